"""Repository records and discovery through Git queries."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Optional, Sequence, Tuple

from .git.query import GitQuery
from .logging import get_logger
from .paths import is_within, normalize_path
from .urls import build_file_url

DEFAULT_HOST = "github.com"
DEFAULT_REVISION = "master"

logger = get_logger("repository")


@lru_cache(maxsize=None)
def _remote_pattern(host: str) -> re.Pattern[str]:
    return re.compile(re.escape(host) + r"[:/]([^/]+)/(.*)")


def parse_remote(line: str, host: str = DEFAULT_HOST) -> Optional[Tuple[str, str]]:
    """Extract ``(user, project)`` from a remote URL line hosted on ``host``."""
    match = _remote_pattern(host).search(line.strip())
    if match is None:
        return None
    user, project = match.group(1), match.group(2)
    if project.endswith(".git"):
        project = project[: -len(".git")]
    if not user or not project:
        return None
    return user, project


@dataclass(frozen=True)
class Repository:
    """A checked-out Git repository and the files it tracks."""

    root: str
    revision: str = DEFAULT_REVISION
    host: str = DEFAULT_HOST
    host_user: Optional[str] = None
    host_project: Optional[str] = None
    tracked_files: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if (self.host_user is None) != (self.host_project is None):
            raise ValueError("host_user and host_project must be given together")

    @property
    def has_host_identity(self) -> bool:
        return self.host_user is not None and self.host_project is not None

    def contains(self, file_path: str) -> bool:
        """Return True when ``file_path`` (already normalized) is tracked."""
        return file_path in self.tracked_files

    def url_for(self, file_path: str) -> Optional[str]:
        """Return the hosted URL of ``file_path`` or None when it has none."""
        if not self.has_host_identity or not self.contains(file_path):
            return None
        relative = file_path[len(self.root.rstrip("/")) + 1 :]
        return build_file_url(
            self.host,
            self.host_user,  # type: ignore[arg-type]
            self.host_project,  # type: ignore[arg-type]
            self.revision,
            relative,
        )

    def owns(self, file_path: str) -> bool:
        """True when ``file_path`` lies under this repository's root."""
        return is_within(file_path, self.root)


class RepositoryFactory:
    """Discovers the repository enclosing a directory."""

    def __init__(
        self,
        query: GitQuery | None = None,
        *,
        host: str = DEFAULT_HOST,
        default_revision: str = DEFAULT_REVISION,
    ) -> None:
        self.query = query or GitQuery()
        self.host = host
        self.default_revision = default_revision

    def try_discover(self, start_directory: Path | str) -> Optional[Repository]:
        """Return the repository containing ``start_directory`` or None."""
        top_level = self.query.top_level_root(start_directory)
        if not top_level.success or not top_level.text:
            return None
        root = normalize_path(top_level.text)

        identity = self._host_identity(root)
        tracked = self._tracked_files(root)
        revision = self._revision(root)

        repository = Repository(
            root=root,
            revision=revision,
            host=self.host,
            host_user=identity[0] if identity else None,
            host_project=identity[1] if identity else None,
            tracked_files=tracked,
        )
        logger.debug(
            "Discovered repository %s (%d tracked files, revision %s, remote %s)",
            root,
            len(tracked),
            revision,
            "/".join(identity) if identity else "none",
        )
        return repository

    def _host_identity(self, root: str) -> Optional[Tuple[str, str]]:
        result = self.query.remote_urls(root)
        if not result.success:
            return None
        return _first_remote(result.lines, self.host)

    def _tracked_files(self, root: str) -> FrozenSet[str]:
        result = self.query.tracked_files(root)
        if not result.success:
            logger.debug("Could not list tracked files in %s; treating as empty", root)
            return frozenset()
        return frozenset(
            normalize_path(f"{root}/{line}") for line in result.lines if line.strip()
        )

    def _revision(self, root: str) -> str:
        result = self.query.current_revision_short(root)
        if result.success and result.text:
            return result.text
        return self.default_revision


def _first_remote(lines: Sequence[str], host: str) -> Optional[Tuple[str, str]]:
    for line in lines:
        parsed = parse_remote(line, host)
        if parsed is not None:
            return parsed
    return None


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_REVISION",
    "Repository",
    "RepositoryFactory",
    "parse_remote",
]
