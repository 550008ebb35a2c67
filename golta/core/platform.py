"""
Platform detection for golta.

This module maps the host onto the operating system and architecture names
used by the official Go release archives, and picks the archive format.

Usage:
    from golta.core.platform import detect_platform

    platform_info = detect_platform()
    print(platform_info.archive_name("1.22.3"))
    # go1.22.3.linux-amd64.tar.gz
"""

import functools
import platform
from dataclasses import dataclass

from golta.core.exceptions import InstallError

SUPPORTED_OS = ("linux", "darwin", "windows", "freebsd")
SUPPORTED_ARCH = ("amd64", "arm64", "386", "armv6l")


class UnsupportedPlatformError(InstallError):
    """Raised when the host has no matching Go release archive."""

    pass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform in Go release naming.

    Attributes:
        os: Operating system ('linux', 'darwin', 'windows', 'freebsd')
        arch: CPU architecture ('amd64', 'arm64', '386', 'armv6l')
    """

    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    @property
    def archive_extension(self) -> str:
        """Archive format of the official distribution for this host."""
        return "zip" if self.is_windows else "tar.gz"

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.is_windows else ""

    def platform_string(self) -> str:
        """
        Get the `<os>-<arch>` string used in archive names.

        Example:
            >>> PlatformInfo('darwin', 'arm64').platform_string()
            'darwin-arm64'
        """
        return f"{self.os}-{self.arch}"

    def archive_name(self, version: str) -> str:
        """
        Get the release archive file name for a Go version.

        Example:
            >>> PlatformInfo('windows', 'amd64').archive_name('1.22.3')
            'go1.22.3.windows-amd64.zip'
        """
        return f"go{version}.{self.platform_string()}.{self.archive_extension}"

    def executable(self, name: str) -> str:
        """Append the executable suffix for this host to a binary name."""
        return f"{name}{self.executable_suffix}"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect the current platform.

    This function is cached - it only runs detection once per process.

    Raises:
        UnsupportedPlatformError: If the OS or architecture has no Go archive
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """Normalize platform.system() to a Go GOOS value."""
    system = platform.system().lower()

    if system in SUPPORTED_OS:
        return system
    raise UnsupportedPlatformError(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """Normalize platform.machine() to a Go release architecture."""
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "amd64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "386"
    elif machine.startswith("arm"):
        return "armv6l"
    raise UnsupportedPlatformError(f"Unsupported architecture: {machine}")


__all__ = [
    "PlatformInfo",
    "UnsupportedPlatformError",
    "detect_platform",
    "SUPPORTED_OS",
    "SUPPORTED_ARCH",
]
