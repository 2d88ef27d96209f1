"""Layered TOML configuration: default.toml, then {CRMSYNC_ENV}.toml."""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "CRMSYNC_CONFIG_DIR"
ENVIRONMENT_ENV = "CRMSYNC_ENV"


def get_config_dir() -> Path:
    """Resolve the directory holding the TOML layers.

    ``CRMSYNC_CONFIG_DIR`` wins when set and must exist. Otherwise the first
    ``config/`` found walking up from the working directory is used.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for directory in [cwd, *cwd.parents][:5]:
        if (directory / "config").is_dir():
            return directory / "config"
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_ENV, "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    return tomllib.loads(file_path.read_text(encoding="utf-8"))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated by ``override``, recursing into shared tables."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Merge the layers that exist; an empty dict leaves model defaults in place."""
    config_dir = get_config_dir()
    config: dict[str, Any] = {}
    for name in ("default.toml", f"{get_environment()}.toml"):
        path = config_dir / name
        if path.is_file():
            config = deep_merge(config, load_toml(path))
    return config
