"""Deterministic JSON artifact output."""

from __future__ import annotations

import json
import shutil
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .logging import get_logger
from .models import DirectoryNode, FileKind, FileRef, Manifest, ParseFailure, RelationGraph
from .reader import StructuredDocumentReader
from .scanner import format_mtime, iter_files

TREE_ARTIFACT = "docs-tree.json"
DOCS_DIR = "docs"
ROUTE_MAP_ARTIFACT = "route-docs-map.json"
RELATIONS_ARTIFACT = "relations-map.json"
MANIFEST_ARTIFACT = "manifest.json"
INTERVIEW_ARTIFACT = "interview.json"
SCHEMA_ARTIFACT = "schema.json"
MOCKS_DIR = "mocks"
MOCKS_INDEX_ARTIFACT = "mocks-index.json"

STATUS_DOCUMENT = "status.toml"
INTERVIEW_DOCUMENT = "interview.toml"

logger = get_logger("writer")


class OutputError(RuntimeError):
    """Raised when the output directory cannot be prepared."""


def dump_json(payload: Any) -> str:
    """Serialise with fixed indentation and insertion key order."""
    return json.dumps(payload, indent=2, ensure_ascii=False, default=_json_default) + "\n"


def build_route_map(
    tree: DirectoryNode, spec_root: Path, reader: StructuredDocumentReader
) -> Dict[str, str]:
    """Map every ``route.path`` declared in the tree to its document path."""
    route_map: Dict[str, str] = {}
    refs = [ref for ref in iter_files(tree) if ref.kind is FileKind.STRUCTURED]
    documents = reader.read_many([spec_root / ref.path for ref in refs])
    for ref, document in zip(refs, documents):
        if isinstance(document, ParseFailure):
            continue
        route = document.get("route")
        if isinstance(route, dict) and route.get("path"):
            route_map[str(route["path"])] = ref.path
    return route_map


def build_interview(spec_root: Path, reader: StructuredDocumentReader) -> Dict[str, Any]:
    def _load(name: str) -> Optional[Dict[str, Any]]:
        path = spec_root / name
        if not path.is_file():
            return None
        document = reader.read(path)
        return None if isinstance(document, ParseFailure) else document

    return {
        "status": _load(STATUS_DOCUMENT),
        "interview": _load(INTERVIEW_DOCUMENT),
        "metadata": {
            "statusPath": STATUS_DOCUMENT,
            "interviewPath": INTERVIEW_DOCUMENT,
        },
    }


def document_payload(
    ref: FileRef, spec_root: Path, reader: StructuredDocumentReader, *, raw: bool = False
) -> Optional[Dict[str, Any]]:
    """Return the per-document artifact, or None when the file cannot be loaded.

    TOML documents carry their parsed content plus ``rawContent``; with
    ``raw`` set the unparsed text is returned as ``content`` instead.
    """
    path = spec_root / ref.path
    payload: Dict[str, Any] = {"path": ref.path, "name": ref.name, "type": ref.kind.value}
    if ref.kind is FileKind.STRUCTURED and not raw:
        content = reader.read(path)
        if isinstance(content, ParseFailure):
            return None
        payload["content"] = content
        raw_content = reader.read_text(path)
        if raw_content is not None:
            payload["rawContent"] = raw_content
    else:
        text = reader.read_text(path)
        if text is None:
            return None
        payload["content"] = text
    payload["metadata"] = ref.metadata.to_dict()
    return payload


class OutputWriter:
    """Clears the output directory and writes every artifact into it."""

    def __init__(
        self,
        output_dir: Path,
        spec_root: Path,
        reader: StructuredDocumentReader | None = None,
    ) -> None:
        self.output_dir = output_dir
        self.spec_root = spec_root
        self.reader = reader or StructuredDocumentReader()
        self.written: List[str] = []

    def prepare(self) -> None:
        """Remove and recreate the output directory."""
        output = self.output_dir.resolve()
        spec_root = self.spec_root.resolve()
        if output == spec_root or output in spec_root.parents:
            raise OutputError(f"Refusing to clear {output}: it contains the spec root")
        try:
            if output.exists():
                shutil.rmtree(output)
            output.mkdir(parents=True)
        except OSError as exc:
            raise OutputError(f"Cannot prepare output directory {output}: {exc}") from exc

    def write_tree(self, tree: DirectoryNode) -> None:
        self._write(TREE_ARTIFACT, tree.to_dict())

    def write_documents(self, tree: DirectoryNode) -> int:
        count = 0
        for ref in iter_files(tree):
            payload = document_payload(ref, self.spec_root, self.reader)
            if payload is None:
                continue
            target = Path(ref.path).with_suffix(".json").as_posix()
            self._write(f"{DOCS_DIR}/{target}", payload, record=False)
            count += 1
        self.written.append(f"{DOCS_DIR}/ ({count} files)")
        return count

    def write_route_map(self, tree: DirectoryNode) -> Dict[str, str]:
        route_map = build_route_map(tree, self.spec_root, self.reader)
        self._write(ROUTE_MAP_ARTIFACT, route_map)
        return route_map

    def write_relations(self, graph: RelationGraph) -> None:
        self._write(RELATIONS_ARTIFACT, graph.to_dict())

    def write_manifest(self, manifest: Manifest) -> None:
        self._write(MANIFEST_ARTIFACT, manifest.to_dict())

    def write_interview(self) -> None:
        self._write(INTERVIEW_ARTIFACT, build_interview(self.spec_root, self.reader))

    def write_schema(self, schema_path: Path | None) -> None:
        payload: Dict[str, Any] = {"schema": None, "metadata": None}
        if schema_path is not None:
            try:
                text = schema_path.read_text(encoding="utf-8")
                stat_result = schema_path.stat()
            except FileNotFoundError:
                logger.info("No schema found at %s", schema_path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Could not read schema %s: %s", schema_path, exc)
            else:
                payload = {
                    "schema": text,
                    "metadata": {
                        "path": schema_path.name,
                        "size": stat_result.st_size,
                        "modified": format_mtime(stat_result.st_mtime),
                    },
                }
        self._write(SCHEMA_ARTIFACT, payload)

    def write_mocks(self, mocks_dir: Path | None) -> List[str]:
        """Copy mock JSON files verbatim and index their names."""
        names: List[str] = []
        if mocks_dir is not None:
            try:
                sources = sorted(path for path in mocks_dir.glob("*.json") if path.is_file())
            except OSError as exc:
                logger.warning("Could not read mocks directory %s: %s", mocks_dir, exc)
                sources = []
            for source in sources:
                target = self.output_dir / MOCKS_DIR / source.name
                try:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copyfile(source, target)
                except OSError as exc:
                    logger.warning("Could not copy mock %s: %s", source, exc)
                    continue
                names.append(source.stem)
        self._write(MOCKS_INDEX_ARTIFACT, names)
        return names

    def _write(self, rel_path: str, payload: Any, *, record: bool = True) -> None:
        target = self.output_dir / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(dump_json(payload), encoding="utf-8")
        if record:
            self.written.append(rel_path)
            logger.info("  wrote %s", rel_path)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    raise TypeError(f"Object of type {value.__class__.__name__} is not JSON serializable")


__all__ = [
    "OutputError",
    "OutputWriter",
    "build_interview",
    "build_route_map",
    "document_payload",
    "dump_json",
]
