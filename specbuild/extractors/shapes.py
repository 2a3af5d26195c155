"""Known entity shapes, keyed by the wrapper table a document nests its fields under."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class EntityShape:
    """One wrapper-key variant of a structured document.

    ``identifies`` shapes take part in id/title/relations resolution, in table
    order. ``unwraps`` shapes are flattened into manifest entities.
    """

    key: str
    title_field: str = "name"
    identifies: bool = True
    unwraps: bool = True

    def table(self, document: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
        value = document.get(self.key)
        return value if isinstance(value, Mapping) else None


ENTITY_SHAPES: Tuple[EntityShape, ...] = (
    EntityShape("useCase"),
    EntityShape("guard"),
    EntityShape("role"),
    EntityShape("route", title_field="title"),
    EntityShape("topic"),
    EntityShape("project"),
    EntityShape("entity"),
    EntityShape("status", unwraps=False),
    EntityShape("component"),
    EntityShape("module"),
    EntityShape("page", identifies=False),
    EntityShape("event", identifies=False),
    EntityShape("platform", identifies=False),
)

IDENTIFYING_SHAPES: Tuple[EntityShape, ...] = tuple(s for s in ENTITY_SHAPES if s.identifies)

UNWRAPPING_SHAPES = {shape.key: shape for shape in ENTITY_SHAPES if shape.unwraps}


__all__ = ["ENTITY_SHAPES", "EntityShape", "IDENTIFYING_SHAPES", "UNWRAPPING_SHAPES"]
