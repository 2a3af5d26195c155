"""Entity identity, title, relation and field extraction across wrapper shapes."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any, Dict, List, Mapping, Optional

from ..models import ExtractedEntity
from .shapes import IDENTIFYING_SHAPES, UNWRAPPING_SHAPES

STRUCTURED_SUFFIX = ".toml"
RELATIONS_KEY = "relations"


def extract_id(document: Mapping[str, Any], file_name: str) -> str:
    """Resolve an entity id: top-level, then each shape in order, then the file name."""
    value = document.get("id")
    if _present(value):
        return str(value)
    for shape in IDENTIFYING_SHAPES:
        table = shape.table(document)
        if table is not None and _present(table.get("id")):
            return str(table["id"])
    return strip_suffix(file_name)


def extract_title(document: Mapping[str, Any]) -> Optional[str]:
    value = document.get("name")
    if _present(value):
        return str(value)
    for shape in IDENTIFYING_SHAPES:
        table = shape.table(document)
        if table is not None and _present(table.get(shape.title_field)):
            return str(table[shape.title_field])
    return None


def extract_relations(document: Mapping[str, Any]) -> Optional[Dict[str, List[str]]]:
    """Return list-valued relation entries, or None when there are none.

    A top-level ``relations`` table shadows any nested one; otherwise the first
    shape carrying a ``relations`` table is used.
    """
    if RELATIONS_KEY in document and document[RELATIONS_KEY] is not None:
        return _filter_relations(document[RELATIONS_KEY])
    for shape in IDENTIFYING_SHAPES:
        table = shape.table(document)
        if table is not None and table.get(RELATIONS_KEY) is not None:
            return _filter_relations(table[RELATIONS_KEY])
    return None


def extract_entity(
    document: Mapping[str, Any],
    file_name: str,
    *,
    folder: str,
    source_path: str,
) -> ExtractedEntity:
    return ExtractedEntity(
        id=extract_id(document, file_name),
        folder=folder,
        source_path=source_path,
        title=extract_title(document),
        relations=extract_relations(document),
    )


def flatten_document(document: Mapping[str, Any], file_name: str) -> Dict[str, Any]:
    """Flatten a document into a manifest entity.

    The first key in document order naming an unwrapping shape supplies the
    base fields; remaining top-level keys are merged in. Top-level
    ``relations`` never reaches the entity.
    """
    wrapper_key = next(
        (
            key
            for key, value in document.items()
            if key in UNWRAPPING_SHAPES and isinstance(value, Mapping)
        ),
        None,
    )

    item: Dict[str, Any]
    if wrapper_key is not None:
        item = dict(document[wrapper_key])
        for key, value in document.items():
            if key not in (wrapper_key, RELATIONS_KEY):
                item[key] = value
    else:
        item = {key: value for key, value in document.items() if key != RELATIONS_KEY}

    if not _present(item.get("id")):
        item["id"] = strip_suffix(file_name)
    return item


def strip_suffix(file_name: str) -> str:
    name = PurePosixPath(file_name).name
    if name.endswith(STRUCTURED_SUFFIX):
        return name[: -len(STRUCTURED_SUFFIX)]
    return name


def _filter_relations(raw: Any) -> Optional[Dict[str, List[str]]]:
    if not isinstance(raw, Mapping):
        return None
    relations = {
        str(kind): [str(target) for target in targets]
        for kind, targets in raw.items()
        if isinstance(targets, list)
    }
    return relations or None


def _present(value: Any) -> bool:
    return value is not None and value != ""


__all__ = [
    "extract_entity",
    "extract_id",
    "extract_relations",
    "extract_title",
    "flatten_document",
    "strip_suffix",
]
