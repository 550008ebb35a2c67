"""
Shim entry point.

Installed as `golta-shim` and linked or copied under the names of the
managed tools (`go`, `gopls`, ...). The tool is taken from the name the
shim was invoked as; anything unrecognized runs `go`.

The shim only resolves and re-executes. It does not load the argparse CLI.
"""

import logging
import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional

from golta.core.config import load_config
from golta.core.paths import PRIMARY_TOOL, GoltaPaths
from golta.toolchain.dispatcher import Dispatcher
from golta.toolchain.tools import TOOLS

logger = logging.getLogger(__name__)

DEBUG_ENV = "GOLTA_DEBUG"


def tool_from_argv0(argv0: str) -> str:
    """
    Determine which tool the shim stands in for.

    Example:
        >>> tool_from_argv0('/home/user/.golta/bin/gopls')
        'gopls'
        >>> tool_from_argv0('golta-shim')
        'go'
    """
    name = Path(argv0).name
    if name.lower().endswith(".exe"):
        name = name[: -len(".exe")]
    return name if name in TOOLS else PRIMARY_TOOL


def _configure_logging(environ: Mapping[str, str]) -> None:
    level = logging.DEBUG if environ.get(DEBUG_ENV) else logging.WARNING
    logging.basicConfig(level=level, format="golta: %(message)s", force=True)


def run(
    argv: List[str],
    environ: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> int:
    """
    Dispatch argv[1:] to the tool named by argv[0].

    Returns:
        Exit code of the tool
    """
    if environ is None:
        environ = os.environ
    if cwd is None:
        cwd = Path.cwd()

    tool = tool_from_argv0(argv[0] if argv else PRIMARY_TOOL)
    paths = GoltaPaths.from_environment(environ)
    config = load_config(paths.config_file)

    dispatcher = Dispatcher(paths, config, environ=environ)
    return dispatcher.dispatch(tool, argv[1:], cwd)


def main():
    """Main entry point for the shim."""
    _configure_logging(os.environ)
    try:
        exit_code = run(sys.argv)
    except KeyboardInterrupt:
        exit_code = 130
    except Exception as e:
        logger.debug("Shim failed", exc_info=True)
        print(f"golta-shim error: {e}", file=sys.stderr)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
