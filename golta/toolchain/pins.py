"""
Project pins and global defaults.

A pin is a `.golta.json` object mapping tool names to versions, found by
searching upward from the working directory. The nearest directory that has
a pin file is the project boundary: the search never continues past it.

A default is a plain-text file per tool under `~/.golta/state/`.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Optional

from golta.core.exceptions import PinFileError
from golta.core.filesystem import atomic_write
from golta.core.interfaces import FileReader, LocalFileReader
from golta.core.paths import GoltaPaths, get_pin_file

logger = logging.getLogger(__name__)


def walk_up(start_dir: Path) -> Iterator[Path]:
    """
    Yield start_dir and each of its ancestors up to the filesystem root.

    Example:
        >>> list(walk_up(Path('/a/b')))
        [PosixPath('/a/b'), PosixPath('/a'), PosixPath('/')]
    """
    current = Path(start_dir).absolute()
    while True:
        yield current
        parent = current.parent
        if parent == current:
            return
        current = parent


# ============================================================================
# Project Pins
# ============================================================================


@dataclass
class PinRecord:
    """
    Parsed contents of one pin file.

    Attributes:
        path: The `.golta.json` file
        versions: Mapping of tool name to pinned version
    """

    path: Path
    versions: Dict[str, str] = field(default_factory=dict)

    def version_for(self, tool: str) -> Optional[str]:
        """Get the pinned version of a tool; blank values count as absent."""
        version = self.versions.get(tool, "").strip()
        return version or None


class PinStore:
    """Reads and writes `.golta.json` pin files."""

    def __init__(self, file_reader: Optional[FileReader] = None):
        self.file_reader = file_reader or LocalFileReader()

    def read(self, pin_file: Path) -> PinRecord:
        """
        Parse a pin file.

        Raises:
            PinFileError: If the file is not a JSON object of strings
            OSError: If the file cannot be read
        """
        pin_file = Path(pin_file)

        try:
            content = self.file_reader.read_text(pin_file)
        except UnicodeDecodeError as e:
            raise PinFileError(f"Invalid pin file {pin_file}: not UTF-8 text ({e})") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise PinFileError(f"Invalid pin file {pin_file}: {e}") from e

        if not isinstance(data, dict):
            raise PinFileError(f"Invalid pin file {pin_file}: expected a JSON object")

        for tool, version in data.items():
            if not isinstance(version, str):
                raise PinFileError(
                    f"Invalid pin file {pin_file}: version for '{tool}' must be a string"
                )

        return PinRecord(path=pin_file, versions=dict(data))

    def find(self, start_dir: Path) -> Optional[PinRecord]:
        """
        Find the nearest pin file at or above start_dir.

        Returns:
            PinRecord of the nearest pin file, or None if there is none

        Raises:
            PinFileError: If the nearest pin file is corrupt
        """
        for directory in walk_up(start_dir):
            pin_file = get_pin_file(directory)
            if self.file_reader.exists(pin_file):
                logger.debug(f"Found pin file: {pin_file}")
                return self.read(pin_file)
        return None

    def write(self, project_dir: Path, tool: str, version: str) -> Path:
        """
        Pin a tool version in project_dir, keeping pins of other tools.

        Returns:
            Path to the written pin file

        Raises:
            PinFileError: If an existing pin file in project_dir is corrupt
        """
        pin_file = get_pin_file(project_dir)
        versions: Dict[str, str] = {}
        if self.file_reader.exists(pin_file):
            versions = self.read(pin_file).versions

        versions[tool] = version
        atomic_write(pin_file, json.dumps(versions, indent=2) + "\n")
        logger.debug(f"Wrote pin {tool}={version} to {pin_file}")
        return pin_file

    def remove(self, project_dir: Path, tool: Optional[str] = None) -> bool:
        """
        Remove a pin from project_dir.

        Without a tool the whole pin file is deleted. With a tool only that
        entry is removed, and the file is deleted once it is empty.

        Returns:
            True if something was removed
        """
        pin_file = get_pin_file(project_dir)
        if not self.file_reader.exists(pin_file):
            return False

        if tool is None:
            pin_file.unlink()
            return True

        versions = self.read(pin_file).versions
        if tool not in versions:
            return False

        del versions[tool]
        if versions:
            atomic_write(pin_file, json.dumps(versions, indent=2) + "\n")
        else:
            pin_file.unlink()
        return True


# ============================================================================
# Global Defaults
# ============================================================================


class DefaultStore:
    """Reads and writes the per-tool global default files."""

    def __init__(self, paths: GoltaPaths):
        self.paths = paths

    def get(self, tool: str) -> Optional[str]:
        """
        Get the default version of a tool.

        The stored text is trimmed and a leading `<tool>@` is removed.

        Returns:
            Version string, or None when no default is recorded
        """
        default_file = self.paths.default_file(tool)
        try:
            content = default_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        version = content.strip()
        prefix = f"{tool}@"
        if version.startswith(prefix):
            version = version[len(prefix) :].strip()
        return version or None

    def set(self, tool: str, version: str) -> Path:
        """Record version as the default of tool."""
        default_file = self.paths.default_file(tool)
        atomic_write(default_file, version)
        logger.debug(f"Set default {tool} version to {version}")
        return default_file

    def clear(self, tool: str) -> bool:
        """
        Remove the default of tool.

        Returns:
            True if a default was recorded
        """
        default_file = self.paths.default_file(tool)
        try:
            default_file.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Cleared default {tool} version")
        return True


__all__ = [
    "walk_up",
    "PinRecord",
    "PinStore",
    "DefaultStore",
]
