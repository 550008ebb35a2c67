"""
Local registry of installed versions.

The filesystem is the registry: every directory under the versions root is
an installed version named after its directory. A version counts as
complete only once its binary exists, so a half-finished install is never
reported as installed.

Layout:
    versions/<version>/go/bin/go[.exe]            Go
    versions/<tool>/<version>/bin/<tool>[.exe]    auxiliary tools
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from packaging.version import InvalidVersion, Version

from golta.core.paths import GoltaPaths
from golta.core.platform import PlatformInfo, detect_platform
from golta.toolchain.tools import TOOLS, get_tool

logger = logging.getLogger(__name__)


def version_sort_key(version: str):
    """
    Sort key ordering version strings semantically.

    Strings that are not valid versions sort before valid ones, by text.

    Example:
        >>> sorted(['1.9', '1.21.0', '1.10'], key=version_sort_key)
        ['1.9', '1.10', '1.21.0']
    """
    try:
        return (1, Version(version), "")
    except InvalidVersion:
        return (0, Version("0"), version)


@dataclass(frozen=True)
class InstalledVersion:
    """
    A version present under the versions root.

    Attributes:
        tool: Tool name
        version: Version string (the directory name)
        install_path: Install directory
        binary_path: Path of the tool's executable
    """

    tool: str
    version: str
    install_path: Path
    binary_path: Path


class LocalRegistry:
    """Queries installed versions on disk."""

    def __init__(self, paths: GoltaPaths, platform_info: Optional[PlatformInfo] = None):
        self.paths = paths
        self.platform_info = platform_info or detect_platform()

    def install_dir(self, tool: str, version: str) -> Path:
        return self.paths.install_dir(tool, version)

    def binary_path(self, tool: str, version: str) -> Path:
        """
        Get the executable path of a tool version.

        Example:
            >>> registry.binary_path('go', '1.22.3')
            PosixPath('/home/user/.golta/versions/1.22.3/go/bin/go')
        """
        tool_info = get_tool(tool)
        install_dir = self.install_dir(tool, version)
        binary_name = self.platform_info.executable(tool_info.name)
        if tool_info.is_primary:
            return install_dir / "go" / "bin" / binary_name
        return install_dir / "bin" / binary_name

    def exists(self, tool: str, version: str) -> bool:
        """Check whether the install directory exists, complete or not."""
        return self.install_dir(tool, version).is_dir()

    def is_installed(self, tool: str, version: str) -> bool:
        """Check whether a version is completely installed."""
        return self.binary_path(tool, version).is_file()

    def get(self, tool: str, version: str) -> Optional[InstalledVersion]:
        """Get an installed version, or None if it is not complete."""
        if not self.is_installed(tool, version):
            return None
        return InstalledVersion(
            tool=tool,
            version=version,
            install_path=self.install_dir(tool, version),
            binary_path=self.binary_path(tool, version),
        )

    def list_versions(self, tool: str) -> List[InstalledVersion]:
        """
        List completely installed versions of a tool, oldest first.

        Returns:
            InstalledVersion entries sorted by version
        """
        tool_info = get_tool(tool)
        if tool_info.is_primary:
            root = self.paths.versions_dir
        else:
            root = self.paths.versions_dir / tool_info.name

        if not root.is_dir():
            return []

        installed = []
        for entry in root.iterdir():
            if not entry.is_dir():
                continue
            # Auxiliary tool namespaces share the versions root with Go
            if tool_info.is_primary and entry.name in TOOLS:
                continue
            found = self.get(tool, entry.name)
            if found is None:
                logger.debug(f"Skipping incomplete install: {entry}")
                continue
            installed.append(found)

        installed.sort(key=lambda v: version_sort_key(v.version))
        return installed


__all__ = [
    "InstalledVersion",
    "LocalRegistry",
    "version_sort_key",
]
