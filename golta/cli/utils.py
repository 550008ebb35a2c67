"""
Shared utilities for CLI commands.

Provides the per-invocation service context and the output helpers used
across commands so that every command builds components and reports
problems the same way.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional

from golta.core.config import GoltaConfig, load_config
from golta.core.download import DownloadProgress, format_progress
from golta.core.paths import PRIMARY_TOOL, GoltaPaths
from golta.toolchain.catalog import RemoteCatalog, catalog_for_tool
from golta.toolchain.dispatcher import Dispatcher, SystemLauncher
from golta.toolchain.installer import InstallManager
from golta.toolchain.pins import DefaultStore, PinStore
from golta.toolchain.registry import LocalRegistry
from golta.toolchain.resolver import VersionResolver
from golta.toolchain.uninstaller import UninstallManager

logger = logging.getLogger(__name__)


# ============================================================================
# Service Context
# ============================================================================


@dataclass
class GoltaContext:
    """
    Everything a command needs, built once per invocation.

    Attributes:
        paths: Resolved golta directory layout
        config: Loaded configuration
        environ: Process environment
        cwd: Working directory of the invocation
    """

    paths: GoltaPaths
    config: GoltaConfig
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    cwd: Path = field(default_factory=Path.cwd)

    def registry(self) -> LocalRegistry:
        return LocalRegistry(self.paths)

    def resolver(self) -> VersionResolver:
        return VersionResolver(self.paths)

    def pin_store(self) -> PinStore:
        return PinStore()

    def default_store(self) -> DefaultStore:
        return DefaultStore(self.paths)

    def catalog(self, tool: str) -> RemoteCatalog:
        return catalog_for_tool(tool, self.paths, self.config)

    def installer(self) -> InstallManager:
        return InstallManager(
            self.paths,
            self.config,
            resolver=self.resolver(),
            catalog_factory=self.catalog,
            environ=self.environ,
        )

    def uninstaller(self) -> UninstallManager:
        return UninstallManager(self.paths, self.config)

    def dispatcher(self) -> Dispatcher:
        # The CLI waits for the child so its exit code flows through CLI.run
        return Dispatcher(
            self.paths,
            self.config,
            environ=self.environ,
            launcher=SystemLauncher(replace_process=False),
        )


def load_context(environ: Optional[Mapping[str, str]] = None) -> GoltaContext:
    """
    Build the command context from the environment.

    Raises:
        DirectoryError: If the home directory cannot be determined
        ConfigError: If ~/.golta/config.yaml is invalid
    """
    if environ is None:
        environ = os.environ
    paths = GoltaPaths.from_environment(environ)
    config = load_config(paths.config_file)
    return GoltaContext(paths=paths, config=config, environ=dict(environ))


# ============================================================================
# Output Formatting
# ============================================================================


def display_name(tool: str) -> str:
    """Name of a tool as shown to users ('Go' for the primary tool)."""
    return "Go" if tool == PRIMARY_TOOL else tool


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


def make_progress_printer(quiet: bool = False) -> Optional[Callable[[DownloadProgress], None]]:
    """
    Build a download progress callback that rewrites one stderr line.

    Returns None when output is quiet or stderr is not a terminal.
    """
    if quiet or not sys.stderr.isatty():
        return None

    def on_progress(progress: DownloadProgress):
        end = "\n" if progress.bytes_downloaded >= progress.total_bytes else ""
        print(f"\r  {format_progress(progress)}", end=end, file=sys.stderr, flush=True)

    return on_progress


__all__ = [
    "GoltaContext",
    "load_context",
    "display_name",
    "print_warning",
    "make_progress_printer",
]
