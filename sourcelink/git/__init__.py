"""Git integration for repository discovery."""

from .query import GitQuery, QueryResult, working_directory

__all__ = ["GitQuery", "QueryResult", "working_directory"]
