"""
Which command implementation.

Prints the binary the shim would run in the current directory.
"""

import logging

from golta.cli.utils import load_context
from golta.toolchain.tools import get_tool

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the which command.

    Args:
        args: Parsed command-line arguments with:
            - tool: Tool name (default: go)

    Returns:
        Exit code (0 for success)
    """
    tool = get_tool(args.tool).name
    ctx = load_context()
    print(ctx.dispatcher().which(tool, ctx.cwd))
    return 0
