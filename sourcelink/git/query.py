"""Synchronous Git queries used to discover repositories."""

from __future__ import annotations

import os
import shutil
import subprocess
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from ..logging import get_logger

# The working directory is process-wide, so every query shares one lock.
_CWD_LOCK = threading.RLock()

logger = get_logger("git.query")


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a single Git query."""

    success: bool
    lines: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines).strip()


@contextmanager
def working_directory(path: Path | str) -> Iterator[Path]:
    """Change into ``path`` for the duration of the block and always change back."""
    with _CWD_LOCK:
        previous = os.getcwd()
        os.chdir(path)
        try:
            yield Path.cwd()
        finally:
            os.chdir(previous)


class GitQuery:
    """Runs the read-only Git commands needed for repository discovery."""

    def __init__(
        self,
        runner: Callable[..., str] | None = None,
        *,
        command: str = "git",
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        self._runner = runner or self._default_runner
        self._command = command
        self._which = which

    @property
    def command(self) -> str:
        return self._command

    def is_available(self) -> bool:
        """Return True when the Git executable can be found on PATH."""
        return self._which(self._command) is not None

    def remote_urls(self, cwd: Path | str) -> QueryResult:
        return self._query(["ls-remote", "--get-url"], cwd)

    def tracked_files(self, cwd: Path | str) -> QueryResult:
        return self._query(["-c", "core.quotepath=off", "ls-files"], cwd)

    def current_revision_short(self, cwd: Path | str) -> QueryResult:
        return self._query(["rev-parse", "--short", "HEAD"], cwd)

    def top_level_root(self, cwd: Path | str) -> QueryResult:
        return self._query(["rev-parse", "--show-toplevel"], cwd)

    # ------------------------------------------------------------------
    # Internals

    def _query(self, args: List[str], cwd: Path | str) -> QueryResult:
        full_args = [self._command, *args]
        try:
            with working_directory(cwd) as current:
                output = self._runner(full_args, cwd=current, capture_output=True)
        except subprocess.CalledProcessError as exc:
            logger.debug("%s failed in %s (exit %s)", " ".join(full_args), cwd, exc.returncode)
            return QueryResult(success=False)
        except OSError as exc:
            logger.debug("%s could not run in %s: %s", " ".join(full_args), cwd, exc)
            return QueryResult(success=False)
        except UnicodeDecodeError as exc:
            logger.debug("%s produced undecodable output in %s: %s", " ".join(full_args), cwd, exc)
            return QueryResult(success=False)
        return QueryResult(success=True, lines=(output or "").splitlines())

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            # Undecodable file names round-trip like os.fsdecode paths.
            encoding="utf-8",
            errors="surrogateescape",
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


__all__ = ["GitQuery", "QueryResult", "working_directory"]
