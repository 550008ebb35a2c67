"""
Core interfaces for golta.

This module defines the narrow capabilities that the resolution, catalog and
dispatch algorithms depend on. Each has exactly one production adapter; tests
substitute in-memory fakes.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, List, Mapping, Sequence

if TYPE_CHECKING:
    from golta.toolchain.catalog import RemoteVersionInfo


class FileReader(ABC):
    """
    Read-only access to project files (pins and build manifests).
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Check whether a regular file exists at path."""
        pass

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """
        Read a file as UTF-8 text.

        Raises:
            OSError: If the file cannot be read
        """
        pass


class LocalFileReader(FileReader):
    """FileReader backed by the real filesystem."""

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")


class CatalogFetcher(ABC):
    """
    Source of published versions for one tool.
    """

    @abstractmethod
    def fetch(self) -> List["RemoteVersionInfo"]:
        """
        Fetch the catalog, newest first.

        Returns:
            List of RemoteVersionInfo

        Raises:
            FetchError: If the catalog cannot be retrieved or decoded
        """
        pass


class ProcessLauncher(ABC):
    """
    Transfers control to a toolchain binary.

    Implementations either replace the current process (and never return)
    or spawn the child, wait, and return its exit status.
    """

    @abstractmethod
    def launch(
        self, binary: Path, args: Sequence[str], env: Mapping[str, str]
    ) -> int:
        """
        Run binary with args and env.

        Returns:
            Exit code of the child process

        Raises:
            OSError: If the binary cannot be started
        """
        pass


__all__ = [
    "FileReader",
    "LocalFileReader",
    "CatalogFetcher",
    "ProcessLauncher",
]
