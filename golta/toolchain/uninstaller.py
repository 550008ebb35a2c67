"""
Toolchain removal with safety guards.

Before an install directory is deleted:
- The global default is checked. By default uninstalling it is refused;
  with `default_uninstall_policy: clear` the default is cleared instead.
- The nearest project pin is checked and a warning is recorded when it
  names the version being removed. Pin problems never block removal.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from golta.core.config import GoltaConfig
from golta.core.exceptions import (
    DefaultVersionInUseError,
    GoltaError,
    NotInstalledError,
)
from golta.core.filesystem import safe_rmtree
from golta.core.locking import LockManager
from golta.core.paths import GoltaPaths
from golta.toolchain.pins import DefaultStore, PinStore
from golta.toolchain.registry import LocalRegistry
from golta.toolchain.tools import get_tool

logger = logging.getLogger(__name__)

POLICY_REFUSE = "refuse"
POLICY_CLEAR = "clear"


@dataclass
class UninstallResult:
    """
    Result of an uninstall.

    Attributes:
        tool: Tool name
        version: Removed version
        install_path: Directory that was removed
        warnings: Non-fatal notices for the user
        cleared_default: True if the global default was cleared
    """

    tool: str
    version: str
    install_path: Path
    warnings: List[str] = field(default_factory=list)
    cleared_default: bool = False


class UninstallManager:
    """
    Removes installed versions.

    Example:
        >>> manager = UninstallManager(paths, config)
        >>> result = manager.uninstall('go', '1.21.0', Path.cwd())
        >>> for warning in result.warnings:
        ...     print(warning)
    """

    def __init__(
        self,
        paths: GoltaPaths,
        config: Optional[GoltaConfig] = None,
        registry: Optional[LocalRegistry] = None,
        pin_store: Optional[PinStore] = None,
    ):
        self.paths = paths
        self.config = config or GoltaConfig()
        self.registry = registry or LocalRegistry(paths)
        self.pin_store = pin_store or PinStore()
        self.default_store = DefaultStore(paths)
        self.lock_manager = LockManager(paths.lock_dir, timeout=self.config.lock_timeout)

    def uninstall(
        self,
        tool: str,
        version: str,
        start_dir: Optional[Path] = None,
        policy: Optional[str] = None,
    ) -> UninstallResult:
        """
        Uninstall a tool version.

        Args:
            tool: Tool name
            version: Exact installed version
            start_dir: Directory whose nearest pin is checked
            policy: 'refuse' or 'clear' (default: config value)

        Returns:
            UninstallResult with any warnings

        Raises:
            NotInstalledError: If the version directory does not exist
            InvalidToolSpecError: If the version cannot name one install directory
            DefaultVersionInUseError: If it is the default and policy is 'refuse'
            LockTimeout: If another process holds the version lock too long
        """
        tool_info = get_tool(tool)
        version = tool_info.checked_version(version)
        start_dir = Path(start_dir) if start_dir is not None else Path.cwd()
        if policy is None:
            policy = self.config.default_uninstall_policy

        with self.lock_manager.version_lock(tool_info.name, version):
            install_dir = self.registry.install_dir(tool_info.name, version)
            if not install_dir.is_dir():
                raise NotInstalledError(
                    tool_info.name, version, "Nothing to uninstall."
                )

            result = UninstallResult(
                tool=tool_info.name, version=version, install_path=install_dir
            )

            default_version = self.default_store.get(tool_info.name)
            if default_version == version:
                if policy != POLICY_CLEAR:
                    raise DefaultVersionInUseError(tool_info.name, version)
                self.default_store.clear(tool_info.name)
                result.cleared_default = True
                result.warnings.append(
                    f"Uninstalling the default {tool_info.name} version ({version}). "
                    "The global default has been cleared."
                )

            pin_warning = self._check_pin(tool_info.name, version, start_dir)
            if pin_warning:
                result.warnings.append(pin_warning)

            logger.debug(f"Removing {install_dir}")
            safe_rmtree(install_dir, require_prefix=self.paths.versions_dir)

        return result

    def _check_pin(self, tool: str, version: str, start_dir: Path) -> Optional[str]:
        """Get a warning if the nearest pin names this version."""
        try:
            record = self.pin_store.find(start_dir)
        except (OSError, GoltaError) as e:
            logger.warning(f"Could not check project pins: {e}")
            return f"Could not check project pins ({e})."

        if record is not None and record.version_for(tool) == version:
            return f"{tool} {version} is pinned in {record.path}."
        return None


__all__ = [
    "UninstallResult",
    "UninstallManager",
    "POLICY_REFUSE",
    "POLICY_CLEAR",
]
