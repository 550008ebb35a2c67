"""
Pin command implementation.

Records a tool version in `.golta.json` in the current directory.
"""

import logging

from golta.cli.utils import display_name, load_context
from golta.core.exceptions import NotInstalledError
from golta.toolchain.tools import split_tool_version

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the pin command.

    Args:
        args: Parsed command-line arguments with:
            - tool_version: TOOL@VERSION

    Returns:
        Exit code (0 for success)
    """
    tool, version = split_tool_version(args.tool_version)
    ctx = load_context()

    if not ctx.registry().is_installed(tool, version):
        raise NotInstalledError(tool, version)

    pin_file = ctx.pin_store().write(ctx.cwd, tool, version)
    print(f"Pinned {display_name(tool)} version {version} to {pin_file}")
    return 0
