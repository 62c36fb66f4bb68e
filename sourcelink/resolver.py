"""Maps file paths to the repositories that own them."""

from __future__ import annotations

import posixpath
import threading
from typing import Dict, Optional, Set, Tuple

from .logging import get_logger
from .paths import ancestors
from .repository import Repository, RepositoryFactory


class PathResolver:
    """Resolves files to repositories while caching hits and misses for one pass.

    ``known_repositories`` holds every discovered repository keyed by root.
    ``ignored_paths`` holds directories known to be outside any repository;
    when discovery fails for a directory, the directory and all of its
    ancestors are added at once, so an unrelated tree costs one query.
    ``aliased_directories`` records directories whose discovered root does not
    prefix them (a checkout reached through a symlink), so they are not
    queried again either.
    """

    def __init__(self, factory: RepositoryFactory | None = None) -> None:
        self.factory = factory or RepositoryFactory()
        self.known_repositories: Dict[str, Repository] = {}
        self.ignored_paths: Set[str] = set()
        self.aliased_directories: Dict[str, Repository] = {}
        self.logger = get_logger("resolver")
        self._lock = threading.RLock()

    @property
    def repositories(self) -> Tuple[Repository, ...]:
        return tuple(self.known_repositories.values())

    def is_ignored(self, directory: str) -> bool:
        return directory in self.ignored_paths

    def resolve(self, file_path: str) -> Optional[Repository]:
        """Return the repository containing ``file_path`` (already normalized)."""
        directory = posixpath.dirname(file_path)
        with self._lock:
            if directory in self.ignored_paths:
                return None

            # Roots are assumed not to nest; the first discovered root wins.
            for repository in self.known_repositories.values():
                if repository.owns(file_path):
                    return repository

            aliased = self.aliased_directories.get(directory)
            if aliased is not None:
                return aliased

            repository = self.factory.try_discover(directory)
            if repository is not None:
                repository = self.known_repositories.setdefault(repository.root, repository)
                if not repository.owns(file_path):
                    self.logger.debug(
                        "%s resolved to %s outside its own path", directory, repository.root
                    )
                    self.aliased_directories[directory] = repository
                return repository

            skipped = ancestors(directory)
            self.ignored_paths.update(skipped)
            self.logger.debug(
                "%s is not inside a repository; ignoring %d directories",
                directory,
                len(skipped),
            )
            return None

    def url_for(self, file_path: str) -> Optional[str]:
        repository = self.resolve(file_path)
        if repository is None:
            return None
        return repository.url_for(file_path)


__all__ = ["PathResolver"]
