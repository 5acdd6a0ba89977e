"""XDG directory management and configuration for jobtail."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_config_dir
from pydantic import ValidationError

from jobtail.models import AppConfig


def get_config_dir() -> Path:
    """Get the jobtail config directory.

    Respects JOBTAIL_CONFIG_DIR environment variable if set.
    """
    if override := os.environ.get("JOBTAIL_CONFIG_DIR"):
        return Path(override)
    return Path(user_config_dir("jobtail"))


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def load_config() -> AppConfig:
    """Load application config from disk, returning defaults if not found or invalid."""
    path = get_config_path()
    if not path.exists():
        return AppConfig()
    try:
        data: dict[str, Any] = tomllib.loads(path.read_text())
        return AppConfig(**data)
    except (OSError, ValueError, TypeError, KeyError, ValidationError):
        return AppConfig()


def save_config(config: AppConfig) -> None:
    """Save application config to disk. Unset optional values are left out."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    get_config_path().write_bytes(tomli_w.dumps(config.model_dump(exclude_none=True)).encode())
