"""Unified manifest compilation over layers, long-form docs and the relation graph."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from .extractors import flatten_document
from .extractors.entity import STRUCTURED_SUFFIX
from .logging import get_logger
from .models import DocEntry, Manifest, ParseFailure, RelationGraph
from .reader import StructuredDocumentReader

LAYER_FOLDERS: Tuple[Tuple[str, str], ...] = (
    ("entities", "entities"),
    ("components", "components"),
    ("routes", "routes"),
    ("pages", "pages"),
    ("useCases", "use-cases"),
    ("roles", "roles"),
    ("guards", "guards"),
    ("events", "events"),
    ("platforms", "platforms"),
    ("knowledge", "knowledge"),
    ("modules", "modules"),
)

PROJECT_DOCUMENT = "project/about.toml"
LONG_FORM_SUFFIX = ".md"

_HEADING_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)

logger = get_logger("manifest")


def extract_heading(content: str, fallback: str) -> str:
    """Return the first level-one heading of a Markdown document."""
    match = _HEADING_PATTERN.search(content)
    return match.group(1) if match else fallback


class ManifestCompiler:
    """Builds the manifest from the layer folders, docs folder and relation graph."""

    def __init__(
        self,
        spec_root: Path,
        reader: StructuredDocumentReader | None = None,
        *,
        layers_dir: str = "layers",
        docs_dir: str = "docs",
    ) -> None:
        self.spec_root = spec_root
        self.reader = reader or StructuredDocumentReader()
        self.layers_dir = layers_dir
        self.docs_dir = docs_dir

    def compile(self, graph: RelationGraph) -> Manifest:
        layers_root = self.spec_root / self.layers_dir
        layers: Dict[str, List[Dict[str, Any]]] = {}
        for layer_name, folder in LAYER_FOLDERS:
            layers[layer_name] = self._compile_layer(layers_root / folder, folder)

        manifest = Manifest(
            project=self._load_project(layers_root),
            layers=layers,
            docs=self._compile_docs(self.spec_root / self.docs_dir),
            graph=graph,
        )

        counts = ", ".join(f"{name}: {len(items)}" for name, items in layers.items() if items)
        logger.info("Manifest compiled (%s, docs: %d)", counts or "no layers", len(manifest.docs))
        return manifest

    def _load_project(self, layers_root: Path) -> Dict[str, Any] | None:
        project_path = layers_root / PROJECT_DOCUMENT
        if not project_path.is_file():
            return None
        document = self.reader.read(project_path)
        if isinstance(document, ParseFailure):
            return None
        project = document.get("project")
        if not isinstance(project, Mapping):
            return None
        return {**project, "_meta": {"path": f"{self.layers_dir}/{PROJECT_DOCUMENT}"}}

    def _compile_layer(self, folder_path: Path, folder: str) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        for rel_path, document in self._walk_structured(folder_path, ""):
            item = flatten_document(document, rel_path)
            item["_meta"] = {"path": f"{self.layers_dir}/{folder}/{rel_path}"}
            items.append(item)
        return items

    def _walk_structured(self, dir_path: Path, base: str) -> List[Tuple[str, Dict[str, Any]]]:
        """Return ``(relative path, document)`` pairs below ``dir_path`` in sorted order.

        Sibling files of one level are parsed together before descending.
        """
        entries = self._list_dir(dir_path)
        file_entries = [
            entry
            for entry in entries
            if entry.is_file(follow_symlinks=False) and entry.name.endswith(STRUCTURED_SUFFIX)
        ]
        documents = dict(
            zip(
                (entry.name for entry in file_entries),
                self.reader.read_many([Path(entry.path) for entry in file_entries]),
            )
        )

        results: List[Tuple[str, Dict[str, Any]]] = []
        for entry in entries:
            rel_path = f"{base}/{entry.name}" if base else entry.name
            if entry.is_dir(follow_symlinks=False):
                results.extend(self._walk_structured(Path(entry.path), rel_path))
            elif entry.name in documents:
                document = documents[entry.name]
                if not isinstance(document, ParseFailure):
                    results.append((rel_path, document))
        return results

    def _compile_docs(self, docs_root: Path) -> List[DocEntry]:
        docs: List[DocEntry] = []
        self._walk_docs(docs_root, "", docs)
        return docs

    def _walk_docs(self, dir_path: Path, base: str, docs: List[DocEntry]) -> None:
        for entry in self._list_dir(dir_path):
            rel_path = f"{base}/{entry.name}" if base else entry.name
            if entry.is_dir(follow_symlinks=False):
                self._walk_docs(Path(entry.path), rel_path, docs)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            if not entry.name.endswith(LONG_FORM_SUFFIX):
                continue
            content = self.reader.read_text(Path(entry.path))
            if content is None:
                continue
            stem = entry.name[: -len(LONG_FORM_SUFFIX)]
            docs.append(
                DocEntry(
                    id=rel_path[: -len(LONG_FORM_SUFFIX)].replace("/", "-"),
                    title=extract_heading(content, stem),
                    content=content,
                    path=f"{self.docs_dir}/{rel_path}",
                )
            )

    @staticmethod
    def _list_dir(dir_path: Path) -> List[os.DirEntry]:
        try:
            with os.scandir(dir_path) as iterator:
                return sorted(iterator, key=lambda entry: entry.name)
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning("Could not read %s: %s", dir_path, exc)
            return []


__all__ = ["LAYER_FOLDERS", "ManifestCompiler", "PROJECT_DOCUMENT", "extract_heading"]
