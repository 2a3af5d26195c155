"""Helper utilities for constructing temporary spec trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from specbuild.config import SpecBuildConfig, load_config
from specbuild.orchestrator import BuildResult, Orchestrator


class SpecBuilder:
    """Writes files into a throwaway project and compiles its spec tree."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.spec = self.root / "spec"
        self.spec.mkdir(parents=True)
        self.output = self.root / "generated"

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries relative to the spec directory."""
        for relative, content in files.items():
            path = self.spec / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_config(self, content: str) -> None:
        (self.root / ".specbuild.yml").write_text(
            textwrap.dedent(content).lstrip("\n"), encoding="utf-8"
        )

    def config(self) -> SpecBuildConfig:
        return load_config(self.root)

    def build(self) -> BuildResult:
        return Orchestrator().run_build(self.root)

    def output_files(self) -> dict[str, bytes]:
        """Return every output file keyed by its path relative to the output directory."""
        return {
            path.relative_to(self.output).as_posix(): path.read_bytes()
            for path in sorted(self.output.rglob("*"))
            if path.is_file()
        }


__all__ = ["SpecBuilder"]
