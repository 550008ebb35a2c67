"""
Exec command implementation.

Runs a tool as the version active for the current directory, exactly as
the shim would.
"""

import logging

from golta.cli.utils import load_context
from golta.toolchain.tools import get_tool

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the exec command.

    Args:
        args: Parsed command-line arguments with:
            - tool: Tool name
            - args: Arguments for the tool

    Returns:
        Exit code of the tool
    """
    tool = get_tool(args.tool).name
    ctx = load_context()
    return ctx.dispatcher().dispatch(tool, args.args, ctx.cwd)
