"""
Active version resolution.

Precedence, strongest first:
    1. Project pin (`.golta.json`), nearest ancestor directory
    2. Build manifest (`go.mod` toolchain/go directive), Go only
    3. Global default (`~/.golta/state/...`)

The upward search ends at the first directory containing a pin file. When a
pin file and a go.mod share that directory, the pin wins; the go.mod is only
consulted when the pin does not name the tool.
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from golta.core.exceptions import NotActiveError
from golta.core.interfaces import FileReader, LocalFileReader
from golta.core.paths import GoltaPaths, get_pin_file
from golta.toolchain.manifest import ManifestReader
from golta.toolchain.pins import DefaultStore, PinStore, walk_up
from golta.toolchain.tools import get_tool

logger = logging.getLogger(__name__)


class VersionSource(enum.Enum):
    """Where an active version came from."""

    PIN = "pin"
    MANIFEST = "manifest"
    DEFAULT = "default"


@dataclass(frozen=True)
class ActiveVersionContext:
    """
    Result of resolving the active version.

    Attributes:
        tool: Tool name
        version: Resolved version
        source: Which precedence level produced it
        origin: File the version was read from
    """

    tool: str
    version: str
    source: VersionSource
    origin: Optional[Path] = None

    def describe(self) -> str:
        """Human readable origin, e.g. 'pinned in /p/.golta.json'."""
        if self.source == VersionSource.PIN:
            return f"pinned in {self.origin}"
        if self.source == VersionSource.MANIFEST:
            return f"from {self.origin}"
        return "global default"


class VersionResolver:
    """
    Resolves which version of a tool is active for a directory.

    Example:
        >>> resolver = VersionResolver(paths)
        >>> ctx = resolver.resolve('go', Path.cwd())
        >>> print(ctx.version, ctx.source)
        1.22.3 VersionSource.PIN
    """

    def __init__(self, paths: GoltaPaths, file_reader: Optional[FileReader] = None):
        self.paths = paths
        self.file_reader = file_reader or LocalFileReader()
        self.pin_store = PinStore(self.file_reader)
        self.manifest_reader = ManifestReader(self.file_reader)
        self.default_store = DefaultStore(paths)

    def resolve(self, tool: str, start_dir: Path) -> ActiveVersionContext:
        """
        Resolve the active version of tool for start_dir.

        Raises:
            NotActiveError: If no pin, manifest or default selects a version
            PinFileError: If the nearest pin file is corrupt
            UnsupportedToolError: If the tool is unknown
        """
        context = self.try_resolve(tool, start_dir)
        if context is None:
            raise NotActiveError(tool)
        return context

    def try_resolve(self, tool: str, start_dir: Path) -> Optional[ActiveVersionContext]:
        """Like resolve(), but return None instead of raising NotActiveError."""
        tool_info = get_tool(tool)

        for directory in walk_up(start_dir):
            pin_file = get_pin_file(directory)
            has_pin = self.file_reader.exists(pin_file)

            if has_pin:
                record = self.pin_store.read(pin_file)
                version = record.version_for(tool_info.name)
                if version:
                    logger.debug(f"{tool} {version} pinned in {pin_file}")
                    return ActiveVersionContext(
                        tool=tool_info.name,
                        version=version,
                        source=VersionSource.PIN,
                        origin=pin_file,
                    )

            if tool_info.is_primary:
                directive = self.manifest_reader.read_dir(directory)
                if directive is not None:
                    logger.debug(
                        f"{tool} {directive.version} from {directive.kind} "
                        f"directive in {directive.path}"
                    )
                    return ActiveVersionContext(
                        tool=tool_info.name,
                        version=directive.version,
                        source=VersionSource.MANIFEST,
                        origin=directive.path,
                    )

            if has_pin:
                logger.debug(f"Stopping search at project boundary {directory}")
                break

        version = self.default_store.get(tool_info.name)
        if version:
            logger.debug(f"{tool} {version} from global default")
            return ActiveVersionContext(
                tool=tool_info.name,
                version=version,
                source=VersionSource.DEFAULT,
                origin=self.paths.default_file(tool_info.name),
            )

        return None


__all__ = [
    "VersionSource",
    "ActiveVersionContext",
    "VersionResolver",
]
