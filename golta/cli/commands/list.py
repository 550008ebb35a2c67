"""
List command implementation.

Lists installed versions, marking the active one with `*` and tagging the
global default and the project pin.
"""

import logging

from golta.cli.utils import display_name, load_context
from golta.toolchain.resolver import VersionSource
from golta.toolchain.tools import get_tool

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments with:
            - tool: Tool name (default: go)

    Returns:
        Exit code (0 for success)
    """
    tool = get_tool(args.tool).name
    ctx = load_context()

    context = ctx.resolver().try_resolve(tool, ctx.cwd)
    active_version = context.version if context else None
    pinned_version = (
        context.version if context and context.source == VersionSource.PIN else None
    )
    default_version = ctx.default_store().get(tool)

    print(f"Installed {display_name(tool)} versions:")

    installed = ctx.registry().list_versions(tool)
    if not installed:
        print(f"  No {display_name(tool)} versions installed")
        return 0

    for entry in installed:
        tags = []
        if entry.version == default_version:
            tags.append("default")
        if entry.version == pinned_version:
            tags.append("pinned")

        prefix = "*" if entry.version == active_version else " "
        tag_str = f" ({', '.join(tags)})" if tags else ""
        print(f"{prefix} {entry.version}{tag_str}")

    return 0
