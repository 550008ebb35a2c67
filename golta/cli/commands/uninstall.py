"""
Uninstall command implementation.

Removes an installed version after checking defaults and project pins.
"""

import logging

from golta.cli.utils import display_name, load_context, print_warning
from golta.toolchain.tools import split_tool_version
from golta.toolchain.uninstaller import POLICY_CLEAR

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the uninstall command.

    Args:
        args: Parsed command-line arguments with:
            - tool_version: TOOL@VERSION
            - clear_default: Clear the default instead of refusing

    Returns:
        Exit code (0 for success)
    """
    tool, version = split_tool_version(args.tool_version)
    ctx = load_context()

    policy = POLICY_CLEAR if args.clear_default else None
    result = ctx.uninstaller().uninstall(tool, version, start_dir=ctx.cwd, policy=policy)

    for warning in result.warnings:
        print_warning(warning)

    print(f"{display_name(tool)} {result.version} has been uninstalled.")
    return 0
