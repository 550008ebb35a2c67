"""YAML configuration for golta.

Settings are read from `~/.golta/config.yaml`. The file is optional; every
key has a default. Environment switches that affect the shim
(`GOLTA_AUTO_INSTALL`, `CI`) are read by the entry points and passed in.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from golta.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://go.dev/dl/?mode=json&include=all"
DEFAULT_DOWNLOAD_BASE_URL = "https://go.dev/dl"
DEFAULT_PROXY_URL = "https://proxy.golang.org"

UNINSTALL_POLICIES = ("refuse", "clear")


@dataclass
class GoltaConfig:
    """Complete golta configuration."""

    catalog_url: str = DEFAULT_CATALOG_URL
    download_base_url: str = DEFAULT_DOWNLOAD_BASE_URL
    proxy_url: str = DEFAULT_PROXY_URL
    timeout: int = 30
    max_retries: int = 3
    lock_timeout: int = 300
    partial_versions: bool = False
    auto_install: bool = False
    default_uninstall_policy: str = "refuse"  # 'refuse' or 'clear'


def load_config(config_file: Path) -> GoltaConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_file: Path to config.yaml

    Returns:
        Parsed configuration (defaults if the file does not exist)

    Raises:
        ConfigError: If the YAML is invalid or a key is unknown or mistyped

    Example:
        >>> config = load_config(Path.home() / ".golta" / "config.yaml")
        >>> config.timeout
        30
    """
    config_file = Path(config_file)
    if not config_file.exists():
        logger.debug(f"Config file not found (optional): {config_file}")
        return GoltaConfig()

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if data is None:
        return GoltaConfig()

    if not isinstance(data, dict):
        raise ConfigError(
            f"Invalid configuration in {config_file}: expected a mapping at top level"
        )

    return _parse_and_validate(data)


def _parse_and_validate(data: Dict[str, Any]) -> GoltaConfig:
    """Parse and validate configuration data."""
    known = {f.name: f for f in fields(GoltaConfig)}
    defaults = GoltaConfig()

    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        expected = type(getattr(defaults, key))
        # bool is a subclass of int, so reject it explicitly for numeric keys
        if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigError(f"Configuration key '{key}' must be an integer")
        if not isinstance(value, expected):
            raise ConfigError(
                f"Configuration key '{key}' must be of type {expected.__name__}"
            )
        values[key] = value

    config = GoltaConfig(**values)

    if config.default_uninstall_policy not in UNINSTALL_POLICIES:
        raise ConfigError(
            f"Invalid default_uninstall_policy: {config.default_uninstall_policy} "
            f"(expected one of: {', '.join(UNINSTALL_POLICIES)})"
        )

    if config.timeout <= 0:
        raise ConfigError("timeout must be positive")

    if config.max_retries < 1:
        raise ConfigError("max_retries must be at least 1")

    return config


def env_flag(environ: Mapping[str, str], name: str) -> bool:
    """
    Interpret an environment variable as a boolean switch.

    Only "1" and "true" (case-insensitive) count as enabled.
    """
    return environ.get(name, "").strip().lower() in ("1", "true")


__all__ = [
    "GoltaConfig",
    "load_config",
    "env_flag",
    "DEFAULT_CATALOG_URL",
    "DEFAULT_DOWNLOAD_BASE_URL",
    "DEFAULT_PROXY_URL",
    "UNINSTALL_POLICIES",
]
