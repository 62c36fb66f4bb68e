"""FastAPI application entrypoint for sourcelink service mode."""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

from fastapi import Depends, FastAPI
from pydantic import BaseModel, Field, field_validator

from ..linker import LinkSummary, SourceLinker
from ..models import Project, Reflection, SourceFile, SourceReference
from ..paths import is_absolute, normalize_path


def _require_absolute(path: str) -> str:
    if not is_absolute(path):
        raise ValueError(f"path must be absolute: {path!r}")
    return path


class ReferenceRequest(BaseModel):
    file: str
    line: int = Field(ge=1)

    @field_validator("file")
    @classmethod
    def check_absolute_file(cls, value: str) -> str:
        return _require_absolute(value)


class ResolveRequest(BaseModel):
    files: List[str] = Field(default_factory=list)
    references: List[ReferenceRequest] = Field(default_factory=list)

    @field_validator("files")
    @classmethod
    def check_absolute_files(cls, value: List[str]) -> List[str]:
        return [_require_absolute(path) for path in value]


class FileResult(BaseModel):
    path: str
    url: Optional[str] = None


class ReferenceResult(BaseModel):
    file: str
    line: int
    url: Optional[str] = None


class ResolveResponse(BaseModel):
    files: List[FileResult]
    references: List[ReferenceResult]
    repositories: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_linker() -> SourceLinker:
    return SourceLinker()


def _build_project(payload: ResolveRequest) -> Project:
    files = {}
    for path in [*payload.files, *(reference.file for reference in payload.references)]:
        normalized = normalize_path(path)
        files.setdefault(normalized, SourceFile(full_path=normalized))
    reflections = [
        Reflection(
            name=f"{reference.file}:{reference.line}",
            sources=[
                SourceReference(
                    file=files[normalize_path(reference.file)], line=reference.line
                )
            ],
        )
        for reference in payload.references
    ]
    return Project(files=list(files.values()), reflections=reflections)


def create_app(
    linker_factory: Callable[[], SourceLinker] = _default_linker,
) -> FastAPI:
    """Create the FastAPI application exposing source resolution."""
    app = FastAPI(title="SourceLink Service", version="1.0.0")

    async def get_linker() -> SourceLinker:
        # A fresh linker per request keeps resolution caches per pass.
        return linker_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/resolve", response_model=ResolveResponse)
    async def resolve(
        payload: ResolveRequest,
        linker: SourceLinker = Depends(get_linker),
    ) -> ResolveResponse:
        project = _build_project(payload)
        loop = asyncio.get_running_loop()
        summary: LinkSummary = await loop.run_in_executor(None, linker.link, project)

        file_results = [
            FileResult(path=source.full_path, url=source.url) for source in project.files
        ]
        reference_results = [
            ReferenceResult(file=reference.file.full_path, line=reference.line, url=reference.url)
            for reference in project.iter_references()
            if reference.file is not None
        ]
        return ResolveResponse(
            files=file_results,
            references=reference_results,
            repositories=summary.repositories,
        )

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
