"""
Run command implementation.

Runs a tool as an explicitly named installed version.
"""

import logging

from golta.cli.utils import load_context
from golta.toolchain.tools import split_tool_version

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the run command.

    Args:
        args: Parsed command-line arguments with:
            - tool_version: TOOL@VERSION
            - args: Arguments for the tool

    Returns:
        Exit code of the tool
    """
    tool, version = split_tool_version(args.tool_version)
    ctx = load_context()
    return ctx.dispatcher().run(tool, version, args.args, ctx.cwd)
