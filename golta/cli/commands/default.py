"""
Default command implementation.

Shows, sets or clears the global default version of a tool.
"""

import logging

from golta.cli.utils import display_name, load_context
from golta.core.exceptions import NotInstalledError
from golta.core.paths import PRIMARY_TOOL
from golta.toolchain.tools import get_tool, split_tool_version, supported_tools

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the default command.

    Args:
        args: Parsed command-line arguments with:
            - target: TOOL@VERSION, 'clear', a tool name or None
            - tool: Tool to clear (with 'clear')

    Returns:
        Exit code (0 for success)
    """
    ctx = load_context()
    store = ctx.default_store()

    if args.target is None:
        return _show(store, supported_tools(), show_unset=False)

    if args.target == "clear":
        tool = get_tool(args.tool or PRIMARY_TOOL).name
        if store.clear(tool):
            print(f"Cleared global default {display_name(tool)} version.")
        else:
            print(f"No global default {display_name(tool)} version is set.")
        return 0

    if "@" not in args.target:
        return _show(store, [get_tool(args.target).name], show_unset=True)

    tool, version = split_tool_version(args.target)
    if not ctx.registry().is_installed(tool, version):
        raise NotInstalledError(tool, version)

    store.set(tool, version)
    print(f"Set {display_name(tool)} default version to {version}")
    return 0


def _show(store, tools, show_unset: bool) -> int:
    shown = False
    for tool in tools:
        version = store.get(tool)
        if version:
            print(f"{tool}: {version}")
            shown = True
        elif show_unset:
            print(f"No global default {display_name(tool)} version is set.")
            shown = True

    if not shown:
        print("No global defaults are set.")
    return 0
