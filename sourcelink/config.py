"""Configuration loading for sourcelink (.sourcelink.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".sourcelink.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GitConfig:
    """Settings for the version-control command line."""

    command: str = "git"
    default_revision: str = "master"


@dataclass
class HostingConfig:
    """Hosting service used to build browse URLs."""

    host: str = "github.com"


@dataclass
class ScanConfig:
    """Source discovery exclusions."""

    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class SourceLinkConfig:
    """Represents the settings defined in .sourcelink.yml."""

    root: Path
    enabled: bool = True
    git: GitConfig = field(default_factory=GitConfig)
    hosting: HostingConfig = field(default_factory=HostingConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)


def load_config(config_path: Path) -> SourceLinkConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SourceLinkConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    enabled = _as_bool(data.get("enabled"))

    git = GitConfig()
    git_data = _as_dict(data.get("git"))
    if git_data:
        git.command = _as_str(git_data.get("command")) or git.command
        git.default_revision = (
            _as_str(git_data.get("default_revision")) or git.default_revision
        )

    hosting = HostingConfig()
    hosting_data = _as_dict(data.get("hosting"))
    if hosting_data:
        hosting.host = _as_str(hosting_data.get("host")) or hosting.host

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        scan.exclude_paths = _as_str_list(scan_data.get("exclude_paths"))

    return SourceLinkConfig(
        root=root,
        enabled=True if enabled is None else enabled,
        git=git,
        hosting=hosting,
        scan=scan,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
