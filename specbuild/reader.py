"""Structured and long-form document reading with contained failures."""

from __future__ import annotations

import tomllib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from .logging import get_logger
from .models import ParseFailure

ParsedDocument = Dict[str, Any]
ReadResult = Union[ParsedDocument, ParseFailure]

logger = get_logger("reader")


class StructuredDocumentReader:
    """Parses TOML documents, converting every error into a ``ParseFailure``.

    Sibling files are parsed concurrently by ``read_many``; results come back
    in input order so callers can assemble deterministic structures after the
    join. Failures are remembered per reader instance for the run summary.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._max_workers = max(1, max_workers)
        self.failures: List[ParseFailure] = []

    def read(self, path: Path) -> ReadResult:
        result = self._parse(path)
        self._record(result)
        return result

    def read_many(self, paths: Sequence[Path]) -> List[ReadResult]:
        if len(paths) <= 1 or self._max_workers == 1:
            results = [self._parse(path) for path in paths]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                results = list(executor.map(self._parse, paths))
        for result in results:
            self._record(result)
        return results

    def read_text(self, path: Path) -> str | None:
        """Return the raw text of a file, or None when it cannot be read."""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            self.failures.append(ParseFailure(path=str(path), cause=str(exc)))
            return None

    def _parse(self, path: Path) -> ReadResult:
        try:
            text = path.read_text(encoding="utf-8")
            return tomllib.loads(text)
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            return ParseFailure(path=str(path), cause=f"{exc.__class__.__name__}: {exc}")

    def _record(self, result: ReadResult) -> None:
        if isinstance(result, ParseFailure):
            logger.warning("Skipping %s (%s)", result.path, result.cause)
            self.failures.append(result)


__all__ = ["ParsedDocument", "ReadResult", "StructuredDocumentReader"]
