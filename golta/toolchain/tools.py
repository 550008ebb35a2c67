"""
Supported tools and `tool@version` argument parsing.

Go itself is the primary tool. Auxiliary tools are Go programs installed
with `go install <package>@<version>`; their versions are looked up on the
Go module proxy under `module`.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from golta.core.exceptions import (
    InvalidToolSpecError,
    UnsupportedToolError,
    UserInputError,
)
from golta.core.interfaces import FileReader, LocalFileReader
from golta.core.paths import PRIMARY_TOOL
from golta.toolchain.manifest import ManifestReader

logger = logging.getLogger(__name__)

LATEST = "latest"
MANIFEST_SPEC = "mod"


@dataclass(frozen=True)
class ToolInfo:
    """
    Description of a managed tool.

    Attributes:
        name: Command name (also the binary name)
        package: Import path passed to `go install` (None for Go itself)
        module: Module path used for proxy lookups (None for Go itself)
        version_prefix: Prefix stripped from user specs ('go' for Go)
    """

    name: str
    package: Optional[str] = None
    module: Optional[str] = None
    version_prefix: str = ""

    @property
    def is_primary(self) -> bool:
        return self.name == PRIMARY_TOOL

    def normalize_version(self, spec: str) -> str:
        """
        Strip surrounding whitespace and the tool's canonical prefix.

        Example:
            >>> get_tool('go').normalize_version('go1.22.3')
            '1.22.3'
        """
        spec = spec.strip()
        if self.version_prefix and spec.startswith(self.version_prefix):
            return spec[len(self.version_prefix) :]
        return spec

    def checked_version(self, spec: str, hint: str = "<tool>@<version>") -> str:
        """
        Normalize a version and make sure it names exactly one install directory.

        Go versions share `versions/` with the auxiliary tool namespaces, so a
        Go version may not be a tool name.

        Raises:
            InvalidToolSpecError: If the version is empty, a path, or a tool name
        """
        version = self.normalize_version(spec)
        if (
            not version
            or version in (".", "..")
            or "/" in version
            or "\\" in version
            or (self.is_primary and version in TOOLS)
        ):
            raise InvalidToolSpecError(f"{self.name}@{spec.strip()}", hint)
        return version


TOOLS: Dict[str, ToolInfo] = {
    "go": ToolInfo(name="go", version_prefix="go"),
    "gopls": ToolInfo(
        name="gopls",
        package="golang.org/x/tools/gopls",
        module="golang.org/x/tools/gopls",
    ),
    "dlv": ToolInfo(
        name="dlv",
        package="github.com/go-delve/delve/cmd/dlv",
        module="github.com/go-delve/delve",
    ),
    "air": ToolInfo(
        name="air",
        package="github.com/air-verse/air",
        module="github.com/air-verse/air",
    ),
    "staticcheck": ToolInfo(
        name="staticcheck",
        package="honnef.co/go/tools/cmd/staticcheck",
        module="honnef.co/go/tools",
    ),
    "golangci-lint": ToolInfo(
        name="golangci-lint",
        package="github.com/golangci/golangci-lint/cmd/golangci-lint",
        module="github.com/golangci/golangci-lint",
    ),
}


def supported_tools() -> List[str]:
    """Get the names of all managed tools, Go first."""
    return list(TOOLS)


def get_tool(name: str) -> ToolInfo:
    """
    Look up a tool by name.

    Raises:
        UnsupportedToolError: If the tool is not managed by golta
    """
    try:
        return TOOLS[name]
    except KeyError:
        raise UnsupportedToolError(name, supported_tools()) from None


def split_tool_version(text: str, hint: str = "<tool>@<version>") -> Tuple[str, str]:
    """
    Split a strict `tool@version` argument.

    Both halves are required and the tool must be supported.

    Raises:
        InvalidToolSpecError: If either half is missing or the version is not a plain version
        UnsupportedToolError: If the tool is unknown

    Example:
        >>> split_tool_version('go@go1.22.3')
        ('go', '1.22.3')
    """
    tool_name, sep, version = text.strip().partition("@")
    tool_name = tool_name.strip()
    version = version.strip()
    if not sep or not tool_name or not version:
        raise InvalidToolSpecError(text, hint)

    tool = get_tool(tool_name)
    return tool.name, tool.checked_version(version, hint)


def parse_tool_spec(
    text: str,
    start_dir: Path,
    file_reader: Optional[FileReader] = None,
) -> Tuple[str, str]:
    """
    Parse an install argument into a tool name and a version spec.

    Accepted forms:
        go@1.22.3, go@go1.22.3  exact version
        go@latest               newest stable release
        go@mod                  version declared by go.mod in start_dir
        go                      go.mod version if present, else latest
        gopls, gopls@v0.15.3    auxiliary tools (latest when bare)

    Args:
        text: Raw argument from the command line
        start_dir: Directory whose go.mod is consulted for `go`/`go@mod`
        file_reader: Reader for go.mod (defaults to the local filesystem)

    Returns:
        Tuple of (tool name, version spec)

    Raises:
        InvalidToolSpecError: If the tool or version half is empty or malformed
        UnsupportedToolError: If the tool is unknown
        UserInputError: If `@mod` is used without a go.mod version
    """
    text = text.strip()
    tool_name, sep, version = text.partition("@")
    tool_name = tool_name.strip()
    version = version.strip()

    if not tool_name or (sep and not version):
        raise InvalidToolSpecError(text, "<tool>[@<version>]")

    tool = get_tool(tool_name)

    if tool.is_primary and version in ("", MANIFEST_SPEC):
        reader = ManifestReader(file_reader or LocalFileReader())
        directive = reader.read_dir(Path(start_dir))
        if directive is not None:
            logger.debug(
                f"Using {directive.kind} directive from {directive.path}: "
                f"{directive.version}"
            )
            return tool.name, tool.checked_version(directive.version)
        if version == MANIFEST_SPEC:
            raise UserInputError(
                f"No Go version found in {Path(start_dir) / 'go.mod'}. "
                "Add a `go` or `toolchain` directive, or install an explicit version."
            )
        return tool.name, LATEST

    if not version:
        return tool.name, LATEST

    if version == MANIFEST_SPEC:
        raise InvalidToolSpecError(text, f"{tool.name}@<version>")

    return tool.name, tool.checked_version(version, "<tool>[@<version>]")


__all__ = [
    "ToolInfo",
    "TOOLS",
    "LATEST",
    "supported_tools",
    "get_tool",
    "split_tool_version",
    "parse_tool_spec",
]
