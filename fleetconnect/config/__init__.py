"""Configuration types and loading."""

from .credentials import SshCredentials, resolve_credentials
from .loader import (
    ConfigError,
    default_config_path,
    find_config_file,
    load_config,
)
from .protocol import (
    AlertHost,
    Config,
    FleetRegistry,
    SshConnectionOptions,
)

__all__ = [
    "AlertHost",
    "Config",
    "ConfigError",
    "FleetRegistry",
    "SshConnectionOptions",
    "SshCredentials",
    "default_config_path",
    "find_config_file",
    "load_config",
    "resolve_credentials",
]
