"""FastAPI application serving spec artifacts straight from the spec tree."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import SpecBuildConfig
from ..graph import RelationGraphBuilder
from ..manifest import ManifestCompiler
from ..models import FileKind, FileMetadata, FileRef, RelationGraph
from ..orchestrator import BuildError, BuildResult, Orchestrator
from ..reader import StructuredDocumentReader
from ..scanner import format_mtime
from ..writer import build_interview, build_route_map, document_payload

T = TypeVar("T")


class HealthResponse(BaseModel):
    status: str


class BuildResponse(BaseModel):
    status: str
    output_dir: str
    entities: int
    folders: int
    relations: int
    backlinks: int
    warnings: int
    failures: int


async def _run_blocking(func: Callable[[], T]) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    config: SpecBuildConfig,
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the preview application for one project configuration."""

    app = FastAPI(title="specbuild preview", version="1.0.0")
    spec_root = config.spec_dir.resolve()

    def _reader() -> StructuredDocumentReader:
        return StructuredDocumentReader(max_workers=config.max_workers)

    def _graph(reader: StructuredDocumentReader) -> RelationGraph:
        builder = RelationGraphBuilder(reader, layers_dir=config.layers_dir)
        return builder.build(builder.collect(config.layers_root))

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/api/docs/tree")
    async def docs_tree(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        tree = await _run_blocking(lambda: orchestrator.scan(config))
        return tree.to_dict()

    @app.get("/api/docs/route-map")
    async def route_map(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, str]:
        def _build() -> Dict[str, str]:
            return build_route_map(orchestrator.scan(config), spec_root, _reader())

        return await _run_blocking(_build)

    @app.get("/api/docs/file")
    async def docs_file(
        path: Optional[str] = Query(default=None),
        raw: bool = Query(default=False),
    ) -> Dict[str, Any]:
        if not path:
            raise HTTPException(status_code=400, detail="Path parameter required")
        ref = _resolve_document(spec_root, path)

        def _load() -> Optional[Dict[str, Any]]:
            return document_payload(ref, spec_root, _reader(), raw=raw)

        payload = await _run_blocking(_load)
        if payload is None:
            raise HTTPException(status_code=422, detail=f"Could not parse {ref.path}")
        return payload

    @app.get("/api/relations-map")
    async def relations_map() -> Dict[str, Any]:
        graph = await _run_blocking(lambda: _graph(_reader()))
        return graph.to_dict()

    @app.get("/api/manifest")
    async def manifest() -> Dict[str, Any]:
        def _compile() -> Dict[str, Any]:
            reader = _reader()
            compiler = ManifestCompiler(
                spec_root, reader, layers_dir=config.layers_dir, docs_dir=config.docs_dir
            )
            return compiler.compile(_graph(reader)).to_dict()

        return await _run_blocking(_compile)

    @app.get("/api/interview")
    async def interview() -> Dict[str, Any]:
        return await _run_blocking(lambda: build_interview(spec_root, _reader()))

    @app.post("/build", response_model=BuildResponse)
    async def build(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> BuildResponse:
        def _run_build() -> BuildResult:
            return orchestrator.run_build(
                config.root, spec_dir=config.spec_dir, output_dir=config.output_dir
            )

        result = await _run_blocking(_run_build)
        return BuildResponse(
            status="ok",
            output_dir=str(result.output_dir),
            entities=result.entity_count,
            folders=result.folder_count,
            relations=result.relation_count,
            backlinks=result.backlink_count,
            warnings=len(result.issues),
            failures=len(result.failures),
        )

    @app.exception_handler(BuildError)
    async def build_error_handler(
        _: Any, exc: BuildError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def _resolve_document(spec_root: Path, requested: str) -> FileRef:
    """Resolve a request path to a document, trying ``.toml`` then ``.md`` when no suffix is given."""
    candidate = (spec_root / requested).resolve()
    if candidate != spec_root and spec_root not in candidate.parents:
        raise HTTPException(status_code=403, detail="Access denied")

    rel_path = requested.strip("/")
    if not candidate.suffix:
        for suffix in (".toml", ".md"):
            if candidate.with_name(candidate.name + suffix).is_file():
                candidate = candidate.with_name(candidate.name + suffix)
                rel_path = rel_path + suffix
                break
        else:
            raise HTTPException(status_code=404, detail="File not found")

    kind = FileKind.from_suffix(candidate.suffix)
    if kind is None:
        raise HTTPException(status_code=400, detail="Only .md and .toml supported")
    if not candidate.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    stat_result = candidate.stat()
    return FileRef(
        path=rel_path,
        name=candidate.name,
        kind=kind,
        metadata=FileMetadata(size=stat_result.st_size, modified=format_mtime(stat_result.st_mtime)),
    )


def run_service(
    path: str | Path = ".", host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    config = Orchestrator().load_config(path)
    uvicorn.run(create_app(config), host=host, port=port)
