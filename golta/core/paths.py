"""
Directory layout for golta.

All on-disk state lives under a single root resolved once per process and
passed to every component as a `GoltaPaths` value. Nothing below the
entry points reads the environment to locate the home directory.

Directory Structure (~/.golta/ or %USERPROFILE%\\.golta\\):
    - versions/<version>/go/        : Go installations
    - versions/<tool>/<version>/bin : Auxiliary tool installations
    - state/default.txt             : Global default Go version
    - state/<tool>.default          : Global default of an auxiliary tool
    - cache/remote_versions*.json   : Cached remote catalogs
    - downloads/                    : Temporary archives
    - lock/                         : Install/uninstall lock files
    - config.yaml                   : Optional configuration

Project-Local:
    - <project>/.golta.json         : Pin record
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from golta.core.exceptions import GoltaError

PRIMARY_TOOL = "go"
GOLTA_DIR_NAME = ".golta"
PIN_FILENAME = ".golta.json"


class DirectoryError(GoltaError):
    """Raised when the golta home directory cannot be determined."""

    pass


def resolve_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Determine the user home directory that holds `.golta`.

    `GOLTA_HOME` wins when set, then `USERPROFILE` on Windows, then the
    platform home directory.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Home directory path

    Raises:
        DirectoryError: If no home directory can be determined
    """
    if environ is None:
        environ = os.environ

    override = environ.get("GOLTA_HOME")
    if override:
        return Path(override)

    if os.name == "nt":
        user_profile = environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine the golta home directory."
            )
        return Path(user_profile)

    try:
        return Path.home()
    except RuntimeError as e:
        raise DirectoryError(f"Could not find home directory: {e}") from e


@dataclass(frozen=True)
class GoltaPaths:
    """
    Resolved golta directory layout.

    Attributes:
        home: User home directory containing `.golta`
    """

    home: Path

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "GoltaPaths":
        """Build paths from the process environment."""
        return cls(home=resolve_home(environ))

    @property
    def root(self) -> Path:
        return self.home / GOLTA_DIR_NAME

    @property
    def versions_dir(self) -> Path:
        return self.root / "versions"

    @property
    def state_dir(self) -> Path:
        return self.root / "state"

    @property
    def cache_dir(self) -> Path:
        return self.root / "cache"

    @property
    def downloads_dir(self) -> Path:
        return self.root / "downloads"

    @property
    def lock_dir(self) -> Path:
        return self.root / "lock"

    @property
    def config_file(self) -> Path:
        return self.root / "config.yaml"

    def install_dir(self, tool: str, version: str) -> Path:
        """
        Get the install directory for a tool version.

        Go versions live directly under `versions/`, auxiliary tools are
        namespaced by tool name.

        Example:
            >>> paths = GoltaPaths(Path('/home/user'))
            >>> paths.install_dir('go', '1.22.3')
            PosixPath('/home/user/.golta/versions/1.22.3')
            >>> paths.install_dir('gopls', 'v0.15.3')
            PosixPath('/home/user/.golta/versions/gopls/v0.15.3')
        """
        if tool == PRIMARY_TOOL:
            return self.versions_dir / version
        return self.versions_dir / tool / version

    def default_file(self, tool: str) -> Path:
        """Get the file recording the global default version of a tool."""
        if tool == PRIMARY_TOOL:
            return self.state_dir / "default.txt"
        return self.state_dir / f"{tool}.default"

    def catalog_cache_file(self, tool: str) -> Path:
        """Get the cached catalog file for a tool."""
        if tool == PRIMARY_TOOL:
            return self.cache_dir / "remote_versions.json"
        return self.cache_dir / f"remote_versions_{tool}.json"


def get_pin_file(project_dir: Path) -> Path:
    """Get the pin file path for a project directory."""
    return Path(project_dir) / PIN_FILENAME


__all__ = [
    "PRIMARY_TOOL",
    "GOLTA_DIR_NAME",
    "PIN_FILENAME",
    "DirectoryError",
    "resolve_home",
    "GoltaPaths",
    "get_pin_file",
]
