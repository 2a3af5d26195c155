"""Core data models shared across specbuild components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FileKind(str, Enum):
    """Recognised document kinds, valued by their serialised type tag."""

    STRUCTURED = "toml"
    LONG_FORM = "markdown"

    @classmethod
    def from_suffix(cls, suffix: str) -> Optional["FileKind"]:
        return _KIND_BY_SUFFIX.get(suffix.lower())


_KIND_BY_SUFFIX = {
    ".toml": FileKind.STRUCTURED,
    ".md": FileKind.LONG_FORM,
}


@dataclass
class FileMetadata:
    size: int
    modified: str

    def to_dict(self) -> Dict[str, Any]:
        return {"size": self.size, "modified": self.modified}


@dataclass
class FileRef:
    """A discovered document, addressed relative to the spec root."""

    path: str
    name: str
    kind: FileKind
    metadata: FileMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "type": self.kind.value,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class DirectoryNode:
    """One directory of the scanned spec tree."""

    path: str
    name: str
    files: List[FileRef] = field(default_factory=list)
    folders: List["DirectoryNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "files": [ref.to_dict() for ref in self.files],
            "folders": [folder.to_dict() for folder in self.folders],
        }


@dataclass(frozen=True)
class ParseFailure:
    """Marker returned in place of a document that could not be read or parsed."""

    path: str
    cause: str


@dataclass
class ExtractedEntity:
    id: str
    folder: str
    source_path: str
    title: Optional[str] = None
    relations: Optional[Dict[str, List[str]]] = None


@dataclass
class GraphEntry:
    path: str
    folder: str
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": self.path, "folder": self.folder}
        if self.title is not None:
            data["title"] = self.title
        return data


@dataclass(frozen=True)
class IdCollision:
    """Records an id claimed by two source files; the later file wins."""

    id: str
    previous_path: str
    path: str


@dataclass
class RelationGraph:
    """Id index, folder index, forward relations and computed backlinks."""

    by_id: Dict[str, GraphEntry] = field(default_factory=dict)
    by_folder: Dict[str, List[str]] = field(default_factory=dict)
    referenced_by: Dict[str, List[str]] = field(default_factory=dict)
    relations: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    collisions: List[IdCollision] = field(default_factory=list)

    def relation_count(self) -> int:
        return sum(len(targets) for kinds in self.relations.values() for targets in kinds.values())

    def backlink_count(self) -> int:
        return sum(len(sources) for sources in self.referenced_by.values())

    def by_id_dict(self) -> Dict[str, Any]:
        return {entity_id: entry.to_dict() for entity_id, entry in self.by_id.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "byId": self.by_id_dict(),
            "byFolder": {folder: list(ids) for folder, ids in self.by_folder.items()},
            "referencedBy": {target: list(ids) for target, ids in self.referenced_by.items()},
            "relations": self.relations,
        }


@dataclass
class DocEntry:
    id: str
    title: str
    content: str
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "_meta": {"path": self.path},
        }


@dataclass(frozen=True)
class Manifest:
    """Consolidated artifact of layers, docs and the relation graph."""

    project: Optional[Dict[str, Any]]
    layers: Dict[str, List[Dict[str, Any]]]
    docs: List[DocEntry]
    graph: RelationGraph
    version: str = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "project": self.project,
            "layers": self.layers,
            "docs": [doc.to_dict() for doc in self.docs],
            "relations": {
                "byId": self.graph.by_id_dict(),
                "graph": self.graph.relations,
            },
        }


@dataclass(frozen=True)
class ValidationIssue:
    """A diagnostic raised against the relation graph."""

    code: str
    source_id: str
    kind: str
    target_id: str
    detail: str
