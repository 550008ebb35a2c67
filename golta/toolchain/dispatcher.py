"""
Command dispatch to the active toolchain.

The dispatcher is what the shim runs for every `go` (or auxiliary tool)
invocation: resolve the active version, make sure it is installed, point
GOROOT at it and hand over to the real binary.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, TextIO

from golta.core.config import GoltaConfig, env_flag
from golta.core.exceptions import NotInstalledError
from golta.core.interfaces import ProcessLauncher
from golta.core.paths import PRIMARY_TOOL, GoltaPaths
from golta.toolchain.installer import InstallManager
from golta.toolchain.registry import LocalRegistry
from golta.toolchain.resolver import VersionResolver
from golta.toolchain.tools import get_tool

logger = logging.getLogger(__name__)

AUTO_INSTALL_ENV = "GOLTA_AUTO_INSTALL"
CI_ENV = "CI"


class SystemLauncher(ProcessLauncher):
    """
    Launches binaries for real.

    On POSIX the current process is replaced with os.execve, so signals and
    the exit status reach the caller directly. Elsewhere the child is spawned
    and waited for; abnormal termination maps to exit code 1.
    """

    def __init__(self, replace_process: Optional[bool] = None):
        if replace_process is None:
            replace_process = os.name == "posix"
        self.replace_process = replace_process

    def launch(self, binary: Path, args: Sequence[str], env: Mapping[str, str]) -> int:
        argv = [str(binary), *args]
        if self.replace_process:
            sys.stdout.flush()
            sys.stderr.flush()
            os.execve(str(binary), argv, dict(env))
            return 0  # not reached

        completed = subprocess.run(argv, env=dict(env))
        if completed.returncode < 0:
            logger.debug(f"{binary} terminated by signal {-completed.returncode}")
            return 1
        return completed.returncode


def prompt_yes_no(question: str, stdin: TextIO = None, stderr: TextIO = None) -> bool:
    """
    Ask a yes/no question on stderr; empty input means yes.

    Returns:
        True for an empty answer, 'y' or 'yes'
    """
    stdin = stdin or sys.stdin
    stderr = stderr or sys.stderr
    stderr.write(f"{question} [Y/n] ")
    stderr.flush()
    answer = stdin.readline()
    if not answer:
        # EOF: no one to ask
        return False
    answer = answer.strip().lower()
    return answer in ("", "y", "yes")


class Dispatcher:
    """
    Runs a tool as its active version.

    Example:
        >>> dispatcher = Dispatcher(paths, config, environ=os.environ)
        >>> exit_code = dispatcher.dispatch('go', ['version'], Path.cwd())
    """

    def __init__(
        self,
        paths: GoltaPaths,
        config: Optional[GoltaConfig] = None,
        environ: Optional[Mapping[str, str]] = None,
        resolver: Optional[VersionResolver] = None,
        registry: Optional[LocalRegistry] = None,
        installer: Optional[InstallManager] = None,
        launcher: Optional[ProcessLauncher] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            paths: Resolved golta directory layout
            config: Configuration (defaults if None)
            environ: Caller environment, copied for the child (os.environ if None)
            resolver: Version resolver
            registry: Local registry
            installer: Used when a missing version is installed on demand
            launcher: Process launcher (SystemLauncher if None)
            confirm: Asks the user a yes/no question (stderr prompt if None)
        """
        self.paths = paths
        self.config = config or GoltaConfig()
        self.environ = dict(environ if environ is not None else os.environ)
        self.resolver = resolver or VersionResolver(paths)
        self.registry = registry or LocalRegistry(paths)
        self._installer = installer
        self.launcher = launcher or SystemLauncher()
        self.confirm = confirm or prompt_yes_no

    @property
    def installer(self) -> InstallManager:
        if self._installer is None:
            self._installer = InstallManager(
                self.paths,
                self.config,
                registry=self.registry,
                resolver=self.resolver,
                environ=self.environ,
            )
        return self._installer

    def dispatch(self, tool: str, args: Sequence[str], cwd: Path) -> int:
        """
        Run tool with args as the version active for cwd.

        Returns:
            Exit code of the tool

        Raises:
            NotActiveError: If no version is selected
            NotInstalledError: If the version is missing and not installed
        """
        context = self.resolver.resolve(tool, cwd)
        logger.debug(f"Dispatching {tool} {context.version} ({context.describe()})")
        binary = self._ensure_installed(context.tool, context.version, cwd)
        return self._launch(context.tool, context.version, binary, args, cwd)

    def run(self, tool: str, version: str, args: Sequence[str], cwd: Path) -> int:
        """
        Run an explicit installed version of a tool.

        Raises:
            NotInstalledError: If the version is not installed
        """
        tool_info = get_tool(tool)
        version = tool_info.checked_version(version)
        if not self.registry.is_installed(tool_info.name, version):
            raise NotInstalledError(tool_info.name, version)
        binary = self.registry.binary_path(tool_info.name, version)
        return self._launch(tool_info.name, version, binary, args, cwd)

    def which(self, tool: str, cwd: Path) -> Path:
        """
        Get the binary path of the version active for cwd.

        Raises:
            NotActiveError: If no version is selected
            NotInstalledError: If the active version is not installed
        """
        context = self.resolver.resolve(tool, cwd)
        if not self.registry.is_installed(context.tool, context.version):
            raise NotInstalledError(context.tool, context.version)
        return self.registry.binary_path(context.tool, context.version)

    def _ensure_installed(self, tool: str, version: str, cwd: Path) -> Path:
        """Get the binary, installing the version first when allowed."""
        if self.registry.is_installed(tool, version):
            return self.registry.binary_path(tool, version)

        auto_install = self.config.auto_install or env_flag(
            self.environ, AUTO_INSTALL_ENV
        )

        if not auto_install:
            if CI_ENV in self.environ:
                raise NotInstalledError(
                    tool,
                    version,
                    f"CI detected, not prompting. Run `golta install {tool}@{version}` "
                    f"or set {AUTO_INSTALL_ENV}=1.",
                )
            if not self.confirm(f"{tool} {version} is not installed. Would you like to install it?"):
                raise NotInstalledError(tool, version)

        logger.warning(f"Installing {tool} {version}...")
        result = self.installer.install(tool, version, start_dir=cwd)
        return result.binary_path

    def child_environment(self, tool: str, version: str, cwd: Path) -> dict:
        """
        Build the child environment: the caller's, with GOROOT set.

        For auxiliary tools GOROOT points at the active Go when it is
        installed, so they run against the project's toolchain.
        """
        env = dict(self.environ)
        if tool == PRIMARY_TOOL:
            env["GOROOT"] = str(self.registry.install_dir(PRIMARY_TOOL, version) / "go")
            return env

        go_context = self.resolver.try_resolve(PRIMARY_TOOL, cwd)
        if go_context is not None and self.registry.is_installed(
            PRIMARY_TOOL, go_context.version
        ):
            env["GOROOT"] = str(
                self.registry.install_dir(PRIMARY_TOOL, go_context.version) / "go"
            )
        return env

    def _launch(
        self, tool: str, version: str, binary: Path, args: Sequence[str], cwd: Path
    ) -> int:
        env = self.child_environment(tool, version, cwd)
        logger.debug(f"Launching {binary} {' '.join(args)}")
        return self.launcher.launch(binary, list(args), env)


__all__ = [
    "Dispatcher",
    "SystemLauncher",
    "prompt_yes_no",
    "AUTO_INSTALL_ENV",
    "CI_ENV",
]
