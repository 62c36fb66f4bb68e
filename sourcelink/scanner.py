"""Source file discovery for the CLI and service entry points."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .models import Project, SourceFile
from .paths import normalize_path

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}


def _matches(rel_path: str, patterns: Sequence[str], is_dir: bool) -> bool:
    for pattern in patterns:
        if pattern.endswith("/"):
            prefix = pattern.rstrip("/")
            if is_dir and (rel_path == prefix or fnmatchcase(rel_path, prefix)):
                return True
            if rel_path.startswith(f"{prefix}/"):
                return True
            continue
        if fnmatchcase(rel_path, pattern):
            return True
        if "/" not in pattern and fnmatchcase(rel_path.rsplit("/", 1)[-1], pattern):
            return True
    return False


def _iter_files(root: Path, patterns: Sequence[str]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _matches(rel_path, patterns, True):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _matches(rel_path, patterns, False):
                continue
            yield current_dir / filename


class SourceScanner:
    """Walks a directory and returns the files as a project ready for linking."""

    def __init__(self, exclude_paths: Sequence[str] = ()) -> None:
        self.exclude_paths: List[str] = list(exclude_paths)

    def scan(self, root: str | Path) -> Project:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Scan root not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Scan root is not a directory: {root}")

        files = [
            SourceFile(full_path=normalize_path(path))
            for path in _iter_files(root_path, self.exclude_paths)
        ]
        return Project(files=files)


__all__ = ["SourceScanner"]
