"""Attaches hosted source URLs to a completed analysis pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Protocol

from .config import SourceLinkConfig
from .git.query import GitQuery
from .logging import get_logger
from .models import Project
from .paths import normalize_path
from .repository import RepositoryFactory
from .resolver import PathResolver
from .urls import anchor

EVENT_RESOLVE_END = "resolve-end"


class Pipeline(Protocol):
    """Event source that announces finished analysis passes."""

    def subscribe(self, event: str, handler: Any) -> None:
        ...


@dataclass
class LinkSummary:
    """Counts produced by one linking pass."""

    files_total: int = 0
    files_linked: int = 0
    references_linked: int = 0
    repositories: List[str] = field(default_factory=list)


class SourceLinker:
    """Links project files and reflection sources to their hosted pages.

    The linker is inert when Git is not on PATH: ``link`` then leaves every
    URL unset without running a single command.
    """

    def __init__(
        self,
        query: GitQuery | None = None,
        config: SourceLinkConfig | None = None,
    ) -> None:
        self.config = config or SourceLinkConfig(root=Path.cwd())
        self.query = query or GitQuery(command=self.config.git.command)
        self.logger = get_logger("linker")
        self.enabled = self.config.enabled and self.query.is_available()
        if not self.enabled:
            self.logger.info(
                "Source linking disabled (%s not available or disabled in config)",
                self.query.command,
            )

    def attach(self, pipeline: Pipeline) -> bool:
        """Subscribe to ``pipeline`` so every finished pass gets linked."""
        if not self.enabled:
            return False
        pipeline.subscribe(EVENT_RESOLVE_END, self.link)
        return True

    def new_resolver(self) -> PathResolver:
        factory = RepositoryFactory(
            self.query,
            host=self.config.hosting.host,
            default_revision=self.config.git.default_revision,
        )
        return PathResolver(factory)

    def link(self, project: Project) -> LinkSummary:
        """Store file URLs, then derive line-anchored URLs for every source reference."""
        summary = LinkSummary(files_total=len(project.files))
        if not self.enabled:
            return summary

        resolver = self.new_resolver()
        for source_file in project.files:
            path = normalize_path(source_file.full_path)
            repository = resolver.resolve(path)
            source_file.url = repository.url_for(path) if repository else None
            if source_file.url:
                summary.files_linked += 1

        for reference in project.iter_references():
            source_file = reference.file
            if source_file is None or not source_file.url or reference.line < 1:
                continue
            reference.url = anchor(source_file.url, reference.line)
            summary.references_linked += 1

        summary.repositories = [repository.root for repository in resolver.repositories]
        self.logger.info(
            "Linked %d of %d files and %d source references across %d repositories",
            summary.files_linked,
            summary.files_total,
            summary.references_linked,
            len(summary.repositories),
        )
        return summary


__all__ = ["EVENT_RESOLVE_END", "LinkSummary", "Pipeline", "SourceLinker"]
