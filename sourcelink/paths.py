"""Path normalization helpers shared by the resolver and repository records."""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import PurePosixPath, PureWindowsPath
from typing import List, Union

_DRIVE_PATTERN = re.compile(r"^([A-Za-z]):")

PathLike = Union[str, os.PathLike]


def normalize_path(path: PathLike) -> str:
    """Return ``path`` with forward slashes, no redundant segments and a lowercase drive."""
    text = os.fspath(path).replace("\\", "/")
    if not text:
        return text
    normalized = posixpath.normpath(text)
    # normpath keeps a leading "//"; a single root is enough here.
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return _DRIVE_PATTERN.sub(lambda match: f"{match.group(1).lower()}:", normalized)


def ancestors(directory: str) -> List[str]:
    """Return ``directory`` followed by each parent up to the filesystem root."""
    chain: List[str] = []
    current = directory
    while current:
        chain.append(current)
        parent = posixpath.dirname(current)
        if parent == current:
            break
        current = parent
    return chain


def is_absolute(path: str) -> bool:
    """True for POSIX absolute paths and drive-qualified Windows paths."""
    return PurePosixPath(path).is_absolute() or PureWindowsPath(path).is_absolute()


def is_within(path: str, root: str) -> bool:
    """True when ``path`` lives below ``root`` (path prefix, not string prefix)."""
    prefix = root if root.endswith("/") else f"{root}/"
    return path.startswith(prefix)


__all__ = ["ancestors", "is_absolute", "is_within", "normalize_path"]
