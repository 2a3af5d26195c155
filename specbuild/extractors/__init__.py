"""Entity extraction over heterogeneous structured-document shapes."""

from __future__ import annotations

from .entity import (
    extract_entity,
    extract_id,
    extract_relations,
    extract_title,
    flatten_document,
    strip_suffix,
)
from .shapes import ENTITY_SHAPES, IDENTIFYING_SHAPES, UNWRAPPING_SHAPES, EntityShape

__all__ = [
    "ENTITY_SHAPES",
    "EntityShape",
    "IDENTIFYING_SHAPES",
    "UNWRAPPING_SHAPES",
    "extract_entity",
    "extract_id",
    "extract_relations",
    "extract_title",
    "flatten_document",
    "strip_suffix",
]
