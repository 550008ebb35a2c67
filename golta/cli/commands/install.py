"""
Install command implementation.

Installs a Go release or an auxiliary Go tool.
"""

import logging

from golta.cli.utils import display_name, load_context, make_progress_printer
from golta.toolchain.tools import parse_tool_spec

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments with:
            - tool_spec: TOOL[@VERSION] (go, go@latest, go@mod, gopls@v0.15.3)
            - partial: Allow partial version matching

    Returns:
        Exit code (0 for success)
    """
    ctx = load_context()
    tool, spec = parse_tool_spec(args.tool_spec, ctx.cwd)
    name = display_name(tool)

    logger.info(f"Installing {name} {spec}")
    result = ctx.installer().install(
        tool,
        spec,
        start_dir=ctx.cwd,
        allow_partial=True if args.partial else None,
        progress_callback=make_progress_printer(quiet=args.quiet),
    )

    if result.already_installed:
        print(f"{name} {result.version} is already installed.")
    else:
        print(f"{name} {result.version} installed to {result.install_path}")

    if ctx.default_store().get(tool) is None:
        print(f"Set it as the default with `golta default {tool}@{result.version}`.")

    return 0
