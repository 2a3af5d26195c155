"""Core validation protocol and runner."""

from __future__ import annotations

from typing import Iterable, List, Protocol

from ..logging import get_logger
from ..models import RelationGraph, ValidationIssue

logger = get_logger("validators")


class Validator(Protocol):
    """Protocol implemented by relation graph validators."""

    name: str

    def validate(self, graph: RelationGraph) -> List[ValidationIssue]:
        """Inspect the graph and return any issues without mutating it."""


def run_validators(graph: RelationGraph, validators: Iterable[Validator]) -> List[ValidationIssue]:
    """Run validators in order and concatenate their issues."""
    issues: List[ValidationIssue] = []
    for validator in validators:
        found = validator.validate(graph)
        for issue in found:
            logger.warning(issue.detail)
        logger.debug("Validator %s reported %d issue(s)", validator.name, len(found))
        issues.extend(found)
    if issues:
        logger.warning("%d relation warnings", len(issues))
    return issues
