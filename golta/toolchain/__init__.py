"""
Toolchain management module for golta.

This module provides functionality for:
- Tool registry and `tool@version` parsing
- Active version resolution (pins, go.mod, defaults)
- Remote catalogs with offline cache
- Installation, removal and dispatch of toolchain versions
"""

from golta.toolchain.tools import (
    ToolInfo,
    TOOLS,
    LATEST,
    get_tool,
    supported_tools,
    parse_tool_spec,
    split_tool_version,
)
from golta.toolchain.manifest import ManifestDirective, ManifestReader
from golta.toolchain.pins import PinRecord, PinStore, DefaultStore
from golta.toolchain.registry import InstalledVersion, LocalRegistry
from golta.toolchain.resolver import (
    VersionSource,
    ActiveVersionContext,
    VersionResolver,
)
from golta.toolchain.catalog import (
    RemoteVersionInfo,
    CatalogResult,
    CatalogCache,
    RemoteCatalog,
    GoReleaseFetcher,
    ProxyVersionFetcher,
    catalog_for_tool,
    match_version,
)
from golta.toolchain.installer import InstallManager, InstallResult
from golta.toolchain.uninstaller import UninstallManager, UninstallResult
from golta.toolchain.dispatcher import Dispatcher, SystemLauncher

__all__ = [
    # Tools
    "ToolInfo",
    "TOOLS",
    "LATEST",
    "get_tool",
    "supported_tools",
    "parse_tool_spec",
    "split_tool_version",
    # Project state
    "ManifestDirective",
    "ManifestReader",
    "PinRecord",
    "PinStore",
    "DefaultStore",
    "InstalledVersion",
    "LocalRegistry",
    # Resolution
    "VersionSource",
    "ActiveVersionContext",
    "VersionResolver",
    # Catalog
    "RemoteVersionInfo",
    "CatalogResult",
    "CatalogCache",
    "RemoteCatalog",
    "GoReleaseFetcher",
    "ProxyVersionFetcher",
    "catalog_for_tool",
    "match_version",
    # Lifecycle
    "InstallManager",
    "InstallResult",
    "UninstallManager",
    "UninstallResult",
    "Dispatcher",
    "SystemLauncher",
]
