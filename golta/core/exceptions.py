"""
Centralized exception hierarchy for golta.

This module defines all custom exceptions used across the codebase so that
the CLI and the shim can turn any failure into one consistent message and
exit code.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class GoltaError(Exception):
    """Base exception for all golta errors."""

    pass


class ConfigError(GoltaError):
    """Configuration file could not be parsed or validated."""

    pass


# ============================================================================
# User Input Exceptions
# ============================================================================


class UserInputError(GoltaError):
    """Base exception for malformed command input."""

    pass


class InvalidToolSpecError(UserInputError):
    """Raised when a `tool@version` argument is malformed."""

    def __init__(self, spec: str, hint: str = "<tool>@<version>"):
        self.spec = spec
        super().__init__(f"Invalid format '{spec}'. Use {hint}.")


class UnsupportedToolError(UserInputError):
    """Raised when a tool name is not managed by golta."""

    def __init__(self, tool: str, supported: list):
        self.tool = tool
        self.supported = list(supported)
        super().__init__(
            f"Unknown tool: '{tool}'. Supported tools: {', '.join(self.supported)}"
        )


# ============================================================================
# Version State Exceptions
# ============================================================================


class NotInstalledError(GoltaError):
    """Raised when a version is required but not installed."""

    def __init__(self, tool: str, version: str, reason: str = ""):
        self.tool = tool
        self.version = version
        msg = f"{tool} version {version} is not installed."
        if reason:
            msg += f" {reason}"
        else:
            msg += f" Install it first with `golta install {tool}@{version}`."
        super().__init__(msg)


class NotActiveError(GoltaError):
    """Raised when no pin, manifest directive or default selects a version."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(
            f"No {tool} version is set. Use `golta pin {tool}@<version>` in your "
            f"project, or `golta default {tool}@<version>` globally."
        )


class PinFileError(GoltaError):
    """Raised when a pin file exists but cannot be parsed."""

    pass


# ============================================================================
# Remote Catalog Exceptions
# ============================================================================


class FetchError(GoltaError):
    """Raised when a remote version catalog cannot be fetched."""

    pass


class NoMatchError(GoltaError):
    """Base exception when a version spec matches nothing in the catalog."""

    pass


class NoStableVersionError(NoMatchError):
    """Raised when `latest` is requested but the catalog has no stable entry."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Could not find a stable {tool} version.")


class VersionNotFoundError(NoMatchError):
    """Raised when an exact or partial spec is absent from the catalog."""

    def __init__(self, tool: str, spec: str):
        self.tool = tool
        self.spec = spec
        super().__init__(
            f"{tool} version '{spec}' not found. Please specify an exact version "
            f"from `golta list-remote {tool}`."
        )


# ============================================================================
# Install / Uninstall Exceptions
# ============================================================================


class InstallError(GoltaError):
    """Raised when an installation fails."""

    pass


class DownloadError(InstallError):
    """Raised when an archive download fails."""

    pass


class PartialStateError(InstallError):
    """Raised when extraction would overwrite an existing destination."""

    pass


class UninstallError(GoltaError):
    """Base exception for uninstall failures."""

    pass


class DefaultVersionInUseError(UninstallError):
    """Raised when uninstalling the version recorded as the global default."""

    def __init__(self, tool: str, version: str):
        self.tool = tool
        self.version = version
        super().__init__(
            f"Cannot uninstall {tool} {version} because it is the default version. "
            f"Run `golta default clear {tool}` or set another default first."
        )


class LockTimeout(GoltaError):
    """Raised when an install/uninstall lock cannot be acquired in time."""

    pass
