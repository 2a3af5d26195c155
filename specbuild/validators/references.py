"""Referential integrity checks over the relation graph."""

from __future__ import annotations

from typing import List

from ..models import RelationGraph, ValidationIssue
from .base import Validator


class ReferenceValidator(Validator):
    """Flags relation targets that no scanned entity defines."""

    name = "references"

    def validate(self, graph: RelationGraph) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for source_id, relations in graph.relations.items():
            for kind, target_ids in relations.items():
                for target_id in target_ids:
                    if target_id in graph.by_id:
                        continue
                    issues.append(
                        ValidationIssue(
                            code="dangling-reference",
                            source_id=source_id,
                            kind=kind,
                            target_id=target_id,
                            detail=f'{source_id} references unknown id "{target_id}" in {kind}',
                        )
                    )
        return issues


class DuplicateIdValidator(Validator):
    """Reports ids defined by more than one file; the graph keeps the last one."""

    name = "duplicate_ids"

    def validate(self, graph: RelationGraph) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                code="duplicate-id",
                source_id=collision.id,
                kind="id",
                target_id=collision.id,
                detail=(
                    f'id "{collision.id}" in {collision.path} overrides {collision.previous_path}'
                ),
            )
            for collision in graph.collisions
        ]


def default_validators() -> List[Validator]:
    return [ReferenceValidator(), DuplicateIdValidator()]
