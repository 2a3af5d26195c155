"""Spec tree scanning utilities."""

from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Set

from .logging import get_logger
from .models import DirectoryNode, FileKind, FileMetadata, FileRef

ROOT_NODE_PATH = "docs"

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

logger = get_logger("scanner")


def format_mtime(timestamp: float) -> str:
    """Render a modification time as an ISO-8601 UTC string with millisecond precision."""
    moment = datetime.fromtimestamp(timestamp, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iter_files(node: DirectoryNode) -> Iterator[FileRef]:
    """Yield every file of the tree depth-first, a folder's files before its subfolders."""
    yield from node.files
    for folder in node.folders:
        yield from iter_files(folder)


class DocumentScanner:
    """Walks the spec root and mirrors it as a tree of documents."""

    def __init__(self, exclude: Iterable[str] = ()) -> None:
        self._exclude: Set[str] = set(exclude)

    def scan(self, root: str | Path) -> DirectoryNode:
        """Return the document tree rooted at ``root``.

        A missing or unlistable root raises; failures below the root only
        empty the affected subtree.
        """
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Spec path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Spec path is not a directory: {root}")
        # Surface PermissionError for the root itself.
        os.listdir(root_path)
        return self._scan_directory(root_path, "")

    def _scan_directory(self, dir_path: Path, rel_path: str) -> DirectoryNode:
        node = DirectoryNode(path=rel_path or ROOT_NODE_PATH, name=dir_path.name)
        try:
            with os.scandir(dir_path) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            logger.warning("Could not read directory %s: %s", dir_path, exc)
            return DirectoryNode(path=rel_path, name=dir_path.name)

        folders: List[DirectoryNode] = []
        for entry in entries:
            entry_rel = f"{rel_path}/{entry.name}" if rel_path else entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as exc:
                logger.warning("Could not inspect %s: %s", entry.path, exc)
                continue

            if is_dir:
                if entry.name in self._exclude:
                    continue
                folders.append(self._scan_directory(Path(entry.path), entry_rel))
            elif is_file:
                ref = self._file_ref(entry, entry_rel)
                if ref is not None:
                    node.files.append(ref)

        node.folders = folders
        return node

    def _file_ref(self, entry: os.DirEntry, rel_path: str) -> FileRef | None:
        if entry.name in _EXCLUDED_FILES:
            return None
        kind = FileKind.from_suffix(os.path.splitext(entry.name)[1])
        if kind is None:
            return None
        try:
            stat_result = entry.stat()
        except OSError as exc:
            logger.warning("Could not stat %s: %s", entry.path, exc)
            return None
        return FileRef(
            path=rel_path,
            name=entry.name,
            kind=kind,
            metadata=FileMetadata(
                size=stat_result.st_size,
                modified=format_mtime(stat_result.st_mtime),
            ),
        )


__all__ = ["DocumentScanner", "ROOT_NODE_PATH", "format_mtime", "iter_files"]
