"""
List-remote command implementation.

Lists published versions of a tool, newest first. Cached results are shown
when the remote is unchanged or unreachable.
"""

import logging

from golta.cli.utils import display_name, load_context, print_warning
from golta.toolchain.tools import get_tool

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list-remote command.

    Args:
        args: Parsed command-line arguments with:
            - tool: Tool name (default: go)

    Returns:
        Exit code (0 for success)
    """
    tool_info = get_tool(args.tool)
    ctx = load_context()

    result = ctx.catalog(tool_info.name).fetch()
    name = display_name(tool_info.name)

    if result.warning:
        print_warning(result.warning)
    elif result.from_cache:
        print(f"Latest {name} versions unchanged; showing cached results.")

    print("\nAvailable versions:")
    for info in result.versions:
        version = tool_info.normalize_version(info.version)
        if info.stable:
            print(f"  {version}")
        else:
            print(f"  {version} (unstable)")

    print("\nUse `golta install <tool>@<version>` to install a specific version.")
    return 0
