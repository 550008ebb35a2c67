"""
Toolchain installation.

This module orchestrates installing one tool version:
1. Resolve the version spec against the remote catalog (cache fallback)
2. Return early if the version is already complete
3. Download the official archive for the host platform (Go) or run
   `go install` (auxiliary tools)
4. Extract into a staging directory and rename `go/` into place
5. Clean up the staging directory, the archive and any new install dir

Installs of the same version are serialized with a file lock, and the
completeness check is repeated once the lock is held.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

from golta.core.config import GoltaConfig
from golta.core.download import DownloadProgress, download_file
from golta.core.exceptions import GoltaError, InstallError, PartialStateError
from golta.core.filesystem import extract_archive, place_directory, safe_rmtree
from golta.core.locking import InstallCoordinator, LockManager
from golta.core.paths import PRIMARY_TOOL, GoltaPaths
from golta.core.platform import PlatformInfo, detect_platform
from golta.toolchain.catalog import (
    RemoteCatalog,
    catalog_for_tool,
    match_version,
    resolve_latest_module_version,
)
from golta.toolchain.registry import LocalRegistry
from golta.toolchain.resolver import VersionResolver
from golta.toolchain.tools import LATEST, ToolInfo, get_tool

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """
    Result of an install request.

    Attributes:
        tool: Tool name
        version: Concrete installed version
        install_path: Install directory
        binary_path: Path of the installed executable
        already_installed: True if nothing had to be done
    """

    tool: str
    version: str
    install_path: Path
    binary_path: Path
    already_installed: bool = False


class InstallManager:
    """
    Installs Go releases and auxiliary Go tools.

    Example:
        >>> manager = InstallManager(paths, config)
        >>> result = manager.install('go', 'latest')
        >>> print(f"Installed Go {result.version} at {result.install_path}")
    """

    def __init__(
        self,
        paths: GoltaPaths,
        config: Optional[GoltaConfig] = None,
        registry: Optional[LocalRegistry] = None,
        platform_info: Optional[PlatformInfo] = None,
        resolver: Optional[VersionResolver] = None,
        catalog_factory: Optional[Callable[[str], RemoteCatalog]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize install manager.

        Args:
            paths: Resolved golta directory layout
            config: Configuration (defaults if None)
            registry: Local registry (created from paths if None)
            platform_info: Host platform (detected if None)
            resolver: Resolver used to find the Go for `go install`
            catalog_factory: Builds the RemoteCatalog of a tool
            environ: Base environment for `go install` (os.environ if None)
        """
        self.paths = paths
        self.config = config or GoltaConfig()
        self.platform_info = platform_info or detect_platform()
        self.registry = registry or LocalRegistry(paths, self.platform_info)
        self.resolver = resolver or VersionResolver(paths)
        self.catalog_factory = catalog_factory or (
            lambda tool: catalog_for_tool(tool, self.paths, self.config)
        )
        self.environ = environ if environ is not None else os.environ
        self.coordinator = InstallCoordinator(
            LockManager(paths.lock_dir, timeout=self.config.lock_timeout)
        )

    def install(
        self,
        tool: str,
        version_spec: str = LATEST,
        start_dir: Optional[Path] = None,
        allow_partial: Optional[bool] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ) -> InstallResult:
        """
        Install a tool version.

        Args:
            tool: Tool name
            version_spec: 'latest', an exact version or (with partial
                matching) a partial version
            start_dir: Directory used to pick the Go that builds auxiliary tools
            allow_partial: Override config.partial_versions
            progress_callback: Called with DownloadProgress during downloads

        Returns:
            InstallResult

        Raises:
            FetchError: If the catalog is unreachable and not cached
            NoMatchError: If the spec matches no published version
            InstallError: If download, extraction or `go install` fails
            LockTimeout: If another process holds the version lock too long
        """
        tool_info = get_tool(tool)
        spec = tool_info.checked_version(version_spec)
        start_dir = Path(start_dir) if start_dir is not None else Path.cwd()
        if allow_partial is None:
            allow_partial = self.config.partial_versions

        # An exact, already complete version needs no network at all
        if spec != LATEST and self.registry.is_installed(tool_info.name, spec):
            logger.debug(f"{tool_info.name} {spec} already installed")
            return self._result(tool_info.name, spec, already_installed=True)

        version = self.resolve_version(tool_info.name, spec, allow_partial)

        with self.coordinator.coordinate(
            tool_info.name,
            version,
            lambda: self.registry.is_installed(tool_info.name, version),
        ) as should_install:
            if not should_install:
                return self._result(tool_info.name, version, already_installed=True)

            if tool_info.is_primary:
                self._install_go(version, progress_callback)
            else:
                self._install_module_tool(tool_info, version, start_dir)

        logger.debug(f"Installed {tool_info.name} {version}")
        return self._result(tool_info.name, version)

    def resolve_version(self, tool: str, spec: str, allow_partial: bool = False) -> str:
        """
        Resolve a spec to a concrete published version.

        `latest` of an auxiliary tool is asked from the module proxy; every
        other spec is matched against the cached-or-fetched catalog.
        """
        tool_info = get_tool(tool)

        if not tool_info.is_primary and spec == LATEST:
            return resolve_latest_module_version(
                tool_info.module, self.config.proxy_url, timeout=self.config.timeout
            )

        result = self.catalog_factory(tool_info.name).fetch()
        if result.warning:
            logger.warning(result.warning)
        return match_version(spec, result.versions, tool_info.name, allow_partial)

    def _result(
        self, tool: str, version: str, already_installed: bool = False
    ) -> InstallResult:
        return InstallResult(
            tool=tool,
            version=version,
            install_path=self.registry.install_dir(tool, version),
            binary_path=self.registry.binary_path(tool, version),
            already_installed=already_installed,
        )

    # ========================================================================
    # Go releases
    # ========================================================================

    def download_url(self, version: str) -> str:
        """
        Get the archive URL of a Go version for this host.

        Example:
            >>> manager.download_url('1.22.3')
            'https://go.dev/dl/go1.22.3.linux-amd64.tar.gz'
        """
        base_url = self.config.download_base_url.rstrip("/")
        return f"{base_url}/{self.platform_info.archive_name(version)}"

    def _install_go(
        self,
        version: str,
        progress_callback: Optional[Callable[[DownloadProgress], None]],
    ) -> None:
        """Download, extract and place one Go release."""
        install_dir = self.registry.install_dir(PRIMARY_TOOL, version)
        destination = install_dir / "go"
        if destination.exists():
            raise PartialStateError(
                f"Found an incomplete installation at {destination}. "
                f"Run `golta uninstall go@{version}` and try again."
            )

        created_install_dir = not install_dir.exists()
        install_dir.mkdir(parents=True, exist_ok=True)
        self.paths.downloads_dir.mkdir(parents=True, exist_ok=True)

        url = self.download_url(version)
        fd, archive_str = tempfile.mkstemp(
            dir=self.paths.downloads_dir,
            prefix=f"go{version}-",
            suffix=f".{self.platform_info.archive_extension}",
        )
        os.close(fd)
        archive_path = Path(archive_str)
        staging_dir = Path(tempfile.mkdtemp(dir=install_dir, prefix=".staging-"))

        try:
            logger.info(f"Downloading Go {version} from {url}")
            download_file(
                url=url,
                destination=archive_path,
                progress_callback=progress_callback,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
            )

            logger.info(f"Extracting Go {version}")
            extract_archive(archive_path, staging_dir)
            place_directory(staging_dir / "go", destination)

            if not self.registry.is_installed(PRIMARY_TOOL, version):
                raise InstallError(
                    f"Archive for Go {version} did not contain "
                    f"{self.registry.binary_path(PRIMARY_TOOL, version)}"
                )

        except GoltaError:
            self._cleanup_on_error(install_dir, created_install_dir)
            raise
        except Exception as e:
            self._cleanup_on_error(install_dir, created_install_dir)
            raise InstallError(f"Failed to install Go {version}: {e}") from e

        finally:
            if staging_dir.exists():
                safe_rmtree(staging_dir, require_prefix=install_dir)
            archive_path.unlink(missing_ok=True)

    def _cleanup_on_error(self, install_dir: Path, created: bool) -> None:
        """Remove an install directory this attempt created."""
        if not created or not install_dir.exists():
            return
        try:
            safe_rmtree(install_dir, require_prefix=self.paths.versions_dir)
            logger.debug(f"Cleaned up {install_dir}")
        except (OSError, GoltaError) as e:
            logger.warning(f"Failed to clean up {install_dir}: {e}")

    # ========================================================================
    # Auxiliary tools
    # ========================================================================

    def _go_command(self, start_dir: Path, env: dict) -> str:
        """
        Pick the Go used to build auxiliary tools.

        The managed Go active for start_dir is preferred (GOROOT is set to
        it); otherwise `go` from PATH is used.
        """
        context = self.resolver.try_resolve(PRIMARY_TOOL, start_dir)
        if context is not None and self.registry.is_installed(
            PRIMARY_TOOL, context.version
        ):
            env["GOROOT"] = str(self.registry.install_dir(PRIMARY_TOOL, context.version) / "go")
            logger.debug(f"Building with managed Go {context.version}")
            return str(self.registry.binary_path(PRIMARY_TOOL, context.version))

        system_go = shutil.which("go", path=self.environ.get("PATH"))
        logger.debug(f"Building with Go from PATH: {system_go}")
        return system_go or "go"

    def _install_module_tool(self, tool_info: ToolInfo, version: str, start_dir: Path) -> None:
        """Build an auxiliary tool with `go install` into its install dir."""
        install_dir = self.registry.install_dir(tool_info.name, version)
        created_install_dir = not install_dir.exists()
        bin_dir = install_dir / "bin"
        bin_dir.mkdir(parents=True, exist_ok=True)

        env = dict(self.environ)
        env["GOBIN"] = str(bin_dir)
        cmd = [self._go_command(start_dir, env), "install", f"{tool_info.package}@{version}"]

        logger.info(f"Installing {tool_info.name} {version} with go install")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=env)
        except OSError as e:
            self._cleanup_on_error(install_dir, created_install_dir)
            raise InstallError(
                f"Failed to execute go: {e}\n"
                "Install Go first with `golta install go` or put go on PATH."
            ) from e

        if result.returncode != 0:
            self._cleanup_on_error(install_dir, created_install_dir)
            raise InstallError(
                f"go install failed with exit code {result.returncode}\n"
                f"Command: {' '.join(cmd)}\n"
                f"Error output:\n{result.stderr}"
            )

        if not self.registry.is_installed(tool_info.name, version):
            self._cleanup_on_error(install_dir, created_install_dir)
            raise InstallError(
                f"go install succeeded but {self.registry.binary_path(tool_info.name, version)} "
                "was not created"
            )


__all__ = [
    "InstallResult",
    "InstallManager",
]
