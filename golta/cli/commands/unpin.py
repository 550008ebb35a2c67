"""
Unpin command implementation.

Removes the pin file of the current directory, or one tool from it.
"""

import logging

from golta.cli.utils import display_name, load_context
from golta.toolchain.tools import get_tool

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the unpin command.

    Args:
        args: Parsed command-line arguments with:
            - tool: Tool to unpin (all tools if None)

    Returns:
        Exit code (0 for success)
    """
    ctx = load_context()
    tool = get_tool(args.tool).name if args.tool else None

    if ctx.pin_store().remove(ctx.cwd, tool):
        if tool is None:
            print("Removed pinned version for this project.")
        else:
            print(f"Removed pinned {display_name(tool)} version for this project.")
    elif tool is None:
        print("No version is pinned in this directory.")
    else:
        print(f"No {display_name(tool)} version is pinned in this directory.")
    return 0
