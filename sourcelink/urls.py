"""Hosted browse-URL construction."""

from __future__ import annotations


def build_file_url(host: str, user: str, project: str, revision: str, relative_path: str) -> str:
    """Return the browse URL of ``relative_path`` at ``revision``."""
    return "/".join(
        [f"https://{host}", user, project, "blob", revision, relative_path]
    )


def anchor(file_url: str, line: int) -> str:
    """Return ``file_url`` anchored to a 1-based ``line``."""
    if isinstance(line, bool) or not isinstance(line, int) or line < 1:
        raise ValueError(f"Line numbers are 1-based, got {line!r}")
    return f"{file_url}#L{line}"


__all__ = ["anchor", "build_file_url"]
