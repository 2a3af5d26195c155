"""Validation package for compiled relation graphs."""

from .base import Validator, run_validators
from .references import DuplicateIdValidator, ReferenceValidator, default_validators

__all__ = [
    "DuplicateIdValidator",
    "ReferenceValidator",
    "Validator",
    "default_validators",
    "run_validators",
]
