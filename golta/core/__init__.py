"""
Core functionality for golta.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    GoltaError,
    ConfigError,
    UserInputError,
    InvalidToolSpecError,
    UnsupportedToolError,
    NotInstalledError,
    NotActiveError,
    PinFileError,
    FetchError,
    NoMatchError,
    NoStableVersionError,
    VersionNotFoundError,
    InstallError,
    DownloadError,
    PartialStateError,
    UninstallError,
    DefaultVersionInUseError,
    LockTimeout,
)

from .paths import (
    GoltaPaths,
    PRIMARY_TOOL,
    PIN_FILENAME,
    resolve_home,
)

from .config import (
    GoltaConfig,
    load_config,
    env_flag,
)

from .platform import (
    PlatformInfo,
    detect_platform,
)

__all__ = [
    # Exceptions
    "GoltaError",
    "ConfigError",
    "UserInputError",
    "InvalidToolSpecError",
    "UnsupportedToolError",
    "NotInstalledError",
    "NotActiveError",
    "PinFileError",
    "FetchError",
    "NoMatchError",
    "NoStableVersionError",
    "VersionNotFoundError",
    "InstallError",
    "DownloadError",
    "PartialStateError",
    "UninstallError",
    "DefaultVersionInUseError",
    "LockTimeout",
    # Paths
    "GoltaPaths",
    "PRIMARY_TOOL",
    "PIN_FILENAME",
    "resolve_home",
    # Config
    "GoltaConfig",
    "load_config",
    "env_flag",
    # Platform
    "PlatformInfo",
    "detect_platform",
]
