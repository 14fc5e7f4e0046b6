"""YAML configuration loading, parsing, and validation."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from .protocol import Config


class ConfigError(Exception):
    """Raised when configuration is invalid."""


def default_config_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/fleet-connect/config.yaml``."""
    xdg = os.environ.get(
        "XDG_CONFIG_HOME",
        os.path.expanduser("~/.config"),
    )
    return Path(xdg) / "fleet-connect" / "config.yaml"


def find_config_file(config_path: str | None = None) -> Path | None:
    """Find the configuration file.

    An explicit path must exist. Without one, the XDG location is used
    when present and ``None`` is returned otherwise.
    """
    if config_path is not None:
        p = Path(config_path).expanduser()
        if not p.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        else:
            return p
    else:
        xdg_path = default_config_path()
        if xdg_path.is_file():
            return xdg_path
        else:
            return None


def load_config(config_path: str | None = None) -> Config:
    """Load and validate configuration, falling back to defaults."""
    path = find_config_file(config_path)
    if path is None:
        return Config()
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        return Config()
    elif not isinstance(raw, dict):
        raise ConfigError("Config file must be a YAML mapping")
    else:
        try:
            config = Config.model_validate(raw)
        except Exception as e:
            raise ConfigError(str(e)) from e
        return config
