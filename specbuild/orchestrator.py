"""Pipeline orchestration for a single spec build."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from .config import ConfigError, SpecBuildConfig, load_config
from .graph import RelationGraphBuilder
from .logging import get_logger
from .manifest import ManifestCompiler
from .models import DirectoryNode, ParseFailure, RelationGraph, ValidationIssue
from .reader import StructuredDocumentReader
from .scanner import DocumentScanner
from .validators import Validator, default_validators, run_validators
from .writer import OutputError, OutputWriter


class BuildError(RuntimeError):
    """Raised for failures that must abort the build."""


@dataclass
class BuildResult:
    """Outcome of a build run, used for the console summary."""

    output_dir: Path
    entity_count: int
    folder_count: int
    relation_count: int
    backlink_count: int
    issues: List[ValidationIssue] = field(default_factory=list)
    failures: List[ParseFailure] = field(default_factory=list)
    artifacts: List[str] = field(default_factory=list)

    def summary_lines(self) -> List[str]:
        lines = [
            f"Found {self.entity_count} entities across {self.folder_count} folders",
            f"Found {self.relation_count} relations, {self.backlink_count} backlinks",
            f"{len(self.issues)} validation warnings",
        ]
        if self.failures:
            lines.append(f"{len(self.failures)} files could not be read or parsed")
        lines.append(f"Output written to {self.output_dir}")
        return lines


class Orchestrator:
    """Runs scan, extraction, graph, validation, manifest and output in order."""

    def __init__(self, validators: Optional[Iterable[Validator]] = None) -> None:
        self._validator_overrides = list(validators) if validators is not None else None
        self.logger = get_logger("orchestrator")

    def load_config(
        self,
        path: str | Path,
        *,
        spec_dir: str | Path | None = None,
        output_dir: str | Path | None = None,
    ) -> SpecBuildConfig:
        project_path = Path(path).expanduser().resolve()
        try:
            config = load_config(project_path)
        except ConfigError as exc:
            raise BuildError(str(exc)) from exc
        if spec_dir is not None:
            config.spec_dir = (project_path / spec_dir).resolve()
        if output_dir is not None:
            config.output_dir = (project_path / output_dir).resolve()
        return config

    def run_build(
        self,
        path: str | Path = ".",
        *,
        spec_dir: str | Path | None = None,
        output_dir: str | Path | None = None,
    ) -> BuildResult:
        """Compile the spec tree under ``path`` into the output directory."""
        config = self.load_config(path, spec_dir=spec_dir, output_dir=output_dir)
        self.logger.info("Spec: %s", config.spec_dir)
        self.logger.info("Output: %s", config.output_dir)

        reader = StructuredDocumentReader(max_workers=config.max_workers)
        tree = self.scan(config)

        writer = OutputWriter(config.output_dir, config.spec_dir, reader)
        try:
            writer.prepare()
        except OutputError as exc:
            raise BuildError(str(exc)) from exc

        writer.write_tree(tree)
        writer.write_documents(tree)
        routes = writer.write_route_map(tree)
        self.logger.debug("Mapped %d routes", len(routes))
        writer.write_schema(config.artifacts.schema_path)
        writer.write_mocks(config.artifacts.mocks_dir)
        writer.write_interview()

        builder = RelationGraphBuilder(reader, layers_dir=config.layers_dir)
        graph = builder.build(builder.collect(config.layers_root))
        issues = run_validators(graph, self._validators())
        writer.write_relations(graph)

        compiler = ManifestCompiler(
            config.spec_dir,
            reader,
            layers_dir=config.layers_dir,
            docs_dir=config.docs_dir,
        )
        writer.write_manifest(compiler.compile(graph))

        return self._result(config, graph, issues, reader, writer)

    def scan(self, config: SpecBuildConfig) -> DirectoryNode:
        try:
            return DocumentScanner(config.exclude).scan(config.spec_dir)
        except OSError as exc:
            raise BuildError(f"Cannot read spec directory {config.spec_dir}: {exc}") from exc

    def _validators(self) -> List[Validator]:
        if self._validator_overrides is not None:
            return list(self._validator_overrides)
        return default_validators()

    @staticmethod
    def _result(
        config: SpecBuildConfig,
        graph: RelationGraph,
        issues: List[ValidationIssue],
        reader: StructuredDocumentReader,
        writer: OutputWriter,
    ) -> BuildResult:
        # The same file may be read by several stages; count it once.
        unique_failures = list({failure.path: failure for failure in reader.failures}.values())
        return BuildResult(
            output_dir=config.output_dir,
            entity_count=len(graph.by_id),
            folder_count=len(graph.by_folder),
            relation_count=graph.relation_count(),
            backlink_count=graph.backlink_count(),
            issues=issues,
            failures=unique_failures,
            artifacts=list(writer.written),
        )


__all__ = ["BuildError", "BuildResult", "Orchestrator"]
