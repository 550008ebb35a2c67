"""
Reader for Go build manifests (`go.mod`).

Only the `toolchain` and `go` directives are of interest. A `toolchain`
directive names an exact release and wins over the `go` language version.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from golta.core.interfaces import FileReader

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "go.mod"

KIND_TOOLCHAIN = "toolchain"
KIND_GO = "go"


@dataclass(frozen=True)
class ManifestDirective:
    """
    Version declared by a go.mod file.

    Attributes:
        path: The go.mod file
        version: Version without the `go` prefix
        kind: 'toolchain' or 'go'
    """

    path: Path
    version: str
    kind: str


def parse_manifest(content: str) -> Optional[tuple]:
    """
    Extract the preferred version directive from go.mod content.

    Comments (`//`) are stripped, lines with fewer than two fields are
    ignored and a `go` prefix on the value is removed.

    Returns:
        Tuple of (version, kind) or None when no directive is present

    Example:
        >>> parse_manifest("module x\\n\\ngo 1.21\\ntoolchain go1.21.5\\n")
        ('1.21.5', 'toolchain')
    """
    go_version = None
    toolchain_version = None

    for line in content.splitlines():
        line = line.split("//", 1)[0].strip()
        parts = line.split()
        if len(parts) < 2:
            continue

        value = parts[1]
        if value.startswith("go"):
            value = value[2:]
        value = value.strip()
        if not value:
            continue

        if parts[0] == KIND_TOOLCHAIN:
            toolchain_version = value
        elif parts[0] == KIND_GO:
            go_version = value

    if toolchain_version:
        return toolchain_version, KIND_TOOLCHAIN
    if go_version:
        return go_version, KIND_GO
    return None


class ManifestReader:
    """Reads go.mod files through a FileReader."""

    def __init__(self, file_reader: FileReader):
        self.file_reader = file_reader

    def read_dir(self, directory: Path) -> Optional[ManifestDirective]:
        """
        Read the directive of the go.mod in one directory (no upward search).

        Returns:
            ManifestDirective, or None if there is no go.mod or no directive

        Raises:
            OSError: If go.mod exists but cannot be read
        """
        manifest_path = Path(directory) / MANIFEST_FILENAME
        if not self.file_reader.exists(manifest_path):
            return None

        parsed = parse_manifest(self.file_reader.read_text(manifest_path))
        if parsed is None:
            logger.debug(f"No go/toolchain directive in {manifest_path}")
            return None

        version, kind = parsed
        return ManifestDirective(path=manifest_path, version=version, kind=kind)


__all__ = [
    "MANIFEST_FILENAME",
    "ManifestDirective",
    "ManifestReader",
    "parse_manifest",
]
