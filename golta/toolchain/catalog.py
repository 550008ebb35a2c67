"""
Remote version catalogs with an offline cache.

Go releases come from the official download index; auxiliary tools are
listed from the Go module proxy. Each catalog is cached as JSON under
`~/.golta/cache/`. The cache is never authoritative: it is only served when
the remote is unchanged or unreachable.

Usage:
    from golta.toolchain.catalog import catalog_for_tool, match_version

    catalog = catalog_for_tool('go', paths, config)
    result = catalog.fetch()
    version = match_version('latest', result.versions, 'go')
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional

import requests
from packaging.version import InvalidVersion, Version

from golta.core.config import GoltaConfig
from golta.core.exceptions import (
    FetchError,
    NoStableVersionError,
    VersionNotFoundError,
)
from golta.core.filesystem import atomic_write
from golta.core.interfaces import CatalogFetcher
from golta.core.paths import GoltaPaths
from golta.toolchain.tools import LATEST, get_tool

logger = logging.getLogger(__name__)

UNSTABLE_MARKERS = ("rc", "beta", "alpha")


@dataclass(frozen=True)
class RemoteVersionInfo:
    """
    One published version.

    Attributes:
        version: Version as published (e.g. 'go1.22.3', 'v0.15.3')
        stable: Whether it is a stable release
    """

    version: str
    stable: bool

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RemoteVersionInfo":
        """
        Build from a JSON object.

        Raises:
            ValueError: If fields are missing or mistyped
        """
        if not isinstance(data, dict):
            raise ValueError("catalog entry must be an object")
        version = data.get("version")
        stable = data.get("stable")
        if not isinstance(version, str) or not isinstance(stable, bool):
            raise ValueError(f"invalid catalog entry: {data!r}")
        return cls(version=version, stable=stable)


@dataclass
class CatalogResult:
    """
    Outcome of a catalog fetch.

    Attributes:
        versions: Catalog, newest first
        from_cache: True when the cached copy was returned
        stale: True when the remote could not be reached
        warning: Message to show the user in degraded mode
    """

    versions: List[RemoteVersionInfo]
    from_cache: bool = False
    stale: bool = False
    warning: Optional[str] = None


def _parse_entries(data) -> List[RemoteVersionInfo]:
    if not isinstance(data, list):
        raise ValueError("catalog must be a JSON list")
    return [RemoteVersionInfo.from_dict(item) for item in data]


# ============================================================================
# Fetchers
# ============================================================================


class GoReleaseFetcher(CatalogFetcher):
    """Fetches Go releases from the official JSON download index."""

    def __init__(self, url: str, timeout: int = 30):
        self.url = url
        self.timeout = timeout

    def fetch(self) -> List[RemoteVersionInfo]:
        logger.debug(f"Fetching Go releases from {self.url}")
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            return _parse_entries(response.json())
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {self.url}: {e}") from e
        except ValueError as e:
            raise FetchError(f"Invalid release index from {self.url}: {e}") from e


def escape_module_path(module: str) -> str:
    """
    Escape a module path for the proxy protocol (uppercase -> '!' + lower).

    Example:
        >>> escape_module_path('github.com/BurntSushi/toml')
        'github.com/!burnt!sushi/toml'
    """
    return "".join(f"!{c.lower()}" if c.isupper() else c for c in module)


def is_stable_module_version(version: str) -> bool:
    """A module version is stable unless it carries a pre-release marker."""
    lowered = version.lower()
    return not any(marker in lowered for marker in UNSTABLE_MARKERS)


class ProxyVersionFetcher(CatalogFetcher):
    """Lists versions of a Go module from a module proxy."""

    def __init__(self, module: str, proxy_url: str, timeout: int = 30):
        self.module = module
        self.proxy_url = proxy_url.rstrip("/")
        self.timeout = timeout

    @property
    def module_url(self) -> str:
        return f"{self.proxy_url}/{escape_module_path(self.module)}"

    def fetch(self) -> List[RemoteVersionInfo]:
        url = f"{self.module_url}/@v/list"
        logger.debug(f"Fetching module versions from {url}")
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {url}: {e}") from e

        # The proxy lists versions oldest first, one per line
        lines = [line.strip() for line in response.text.splitlines()]
        versions = [line for line in lines if line]
        versions.reverse()
        return [
            RemoteVersionInfo(version=v, stable=is_stable_module_version(v))
            for v in versions
        ]

    def latest(self) -> str:
        return resolve_latest_module_version(
            self.module, self.proxy_url, timeout=self.timeout
        )


def resolve_latest_module_version(module: str, proxy_url: str, timeout: int = 30) -> str:
    """
    Ask the module proxy for the latest version of a module.

    Raises:
        FetchError: If the request fails or the response has no Version
    """
    url = f"{proxy_url.rstrip('/')}/{escape_module_path(module)}/@latest"
    logger.debug(f"Resolving latest module version from {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    except ValueError as e:
        raise FetchError(f"Invalid response from {url}: {e}") from e

    version = data.get("Version") if isinstance(data, dict) else None
    if not isinstance(version, str) or not version.strip():
        raise FetchError(f"No version reported for {module} by {url}")
    return version.strip()


# ============================================================================
# Cache
# ============================================================================


class CatalogCache:
    """JSON file holding the last fetched catalog of one tool."""

    def __init__(self, cache_file: Path):
        self.cache_file = Path(cache_file)

    def read(self) -> Optional[List[RemoteVersionInfo]]:
        """
        Read the cached catalog.

        Returns:
            Cached catalog, or None if missing or unreadable
        """
        if not self.cache_file.exists():
            logger.debug(f"No catalog cache at {self.cache_file}")
            return None

        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                return _parse_entries(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable catalog cache {self.cache_file}: {e}")
            return None

    def write(self, versions: List[RemoteVersionInfo]) -> None:
        """
        Replace the cached catalog.

        Raises:
            OSError: If the cache cannot be written
        """
        content = json.dumps([v.to_dict() for v in versions], indent=2)
        atomic_write(self.cache_file, content + "\n")
        logger.debug(f"Wrote {len(versions)} entries to {self.cache_file}")


# ============================================================================
# Catalog
# ============================================================================


class RemoteCatalog:
    """
    A tool's remote catalog combined with its cache.

    Example:
        >>> catalog = RemoteCatalog('go', GoReleaseFetcher(url), CatalogCache(path))
        >>> result = catalog.fetch()
        >>> if result.warning:
        ...     print(result.warning)
    """

    def __init__(self, tool: str, fetcher: CatalogFetcher, cache: CatalogCache):
        self.tool = tool
        self.fetcher = fetcher
        self.cache = cache

    def fetch(self) -> CatalogResult:
        """
        Fetch the catalog, falling back to the cache.

        If the newest remote entry equals the newest cached entry, the cached
        copy is returned and the cache file is left untouched.

        Raises:
            FetchError: If the remote fails and there is no cache
        """
        cached = self.cache.read()

        try:
            fetched = self.fetcher.fetch()
        except FetchError as e:
            if cached:
                logger.debug(f"Fetch failed, serving cached catalog: {e}")
                return CatalogResult(
                    versions=cached,
                    from_cache=True,
                    stale=True,
                    warning=(
                        f"Failed to fetch latest {self.tool} versions ({e}). "
                        "Showing cached results."
                    ),
                )
            raise

        if cached and fetched and cached[0] == fetched[0]:
            logger.debug(f"Latest {self.tool} version unchanged: {fetched[0].version}")
            return CatalogResult(versions=cached, from_cache=True)

        try:
            self.cache.write(fetched)
        except OSError as e:
            logger.warning(f"Could not update catalog cache {self.cache.cache_file}: {e}")

        return CatalogResult(versions=fetched)


def catalog_for_tool(tool: str, paths: GoltaPaths, config: GoltaConfig) -> RemoteCatalog:
    """Build the RemoteCatalog of a tool from paths and configuration."""
    tool_info = get_tool(tool)
    if tool_info.is_primary:
        fetcher = GoReleaseFetcher(config.catalog_url, timeout=config.timeout)
    else:
        fetcher = ProxyVersionFetcher(
            tool_info.module, config.proxy_url, timeout=config.timeout
        )
    cache = CatalogCache(paths.catalog_cache_file(tool_info.name))
    return RemoteCatalog(tool_info.name, fetcher, cache)


# ============================================================================
# Version Matching
# ============================================================================


def _release(version: str):
    try:
        return Version(version).release
    except InvalidVersion:
        return None


def match_version(
    spec: str,
    versions: List[RemoteVersionInfo],
    tool: str,
    allow_partial: bool = False,
) -> str:
    """
    Pick a concrete version from a catalog.

    Supports:
    - Latest: "latest" -> first stable entry (catalogs are newest first)
    - Exact: "1.22.3" or "go1.22.3" -> that entry
    - Partial (allow_partial only): "1.21" -> highest stable 1.21.x

    Args:
        spec: Version spec from the user
        versions: Catalog, newest first
        tool: Tool name (selects the prefix to strip)
        allow_partial: Whether partial specs may match

    Returns:
        Matched version without the tool's prefix

    Raises:
        NoStableVersionError: If "latest" is requested with no stable entry
        VersionNotFoundError: If nothing matches

    Example:
        >>> match_version('go1.22.3', catalog, 'go')
        '1.22.3'
    """
    tool_info = get_tool(tool)
    spec = tool_info.normalize_version(spec)

    if spec.lower() == LATEST:
        for info in versions:
            if info.stable:
                return tool_info.normalize_version(info.version)
        raise NoStableVersionError(tool_info.name)

    for info in versions:
        if tool_info.normalize_version(info.version) == spec:
            return spec

    if allow_partial:
        wanted = _release(spec)
        if wanted is not None and len(wanted) < 3:
            candidates = []
            for info in versions:
                if not info.stable:
                    continue
                name = tool_info.normalize_version(info.version)
                release = _release(name)
                if release is not None and release[: len(wanted)] == wanted:
                    candidates.append((Version(name), name))
            if candidates:
                best = max(candidates)[1]
                logger.debug(f"Resolved partial version {spec} to {best}")
                return best

    raise VersionNotFoundError(tool_info.name, spec)


__all__ = [
    "RemoteVersionInfo",
    "CatalogResult",
    "CatalogCache",
    "GoReleaseFetcher",
    "ProxyVersionFetcher",
    "RemoteCatalog",
    "catalog_for_tool",
    "resolve_latest_module_version",
    "escape_module_path",
    "match_version",
]
