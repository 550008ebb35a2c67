"""
golta CLI argument parser.

This module implements the command-line interface for golta using argparse.
"""

import argparse
import importlib
import logging
import sys
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("golta")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """golta command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="golta",
            description="golta - Go toolchain version manager",
            epilog='Use "golta COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"golta {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_uninstall_command(subparsers)
        self._add_default_command(subparsers)
        self._add_run_command(subparsers)
        self._add_exec_command(subparsers)
        self._add_pin_command(subparsers)
        self._add_unpin_command(subparsers)
        self._add_which_command(subparsers)
        self._add_list_command(subparsers)
        self._add_list_remote_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install a Go version or Go tool",
            description=(
                "Install a Go release or an auxiliary tool. "
                "Examples: go, go@latest, go@1.22.3, go@mod, gopls@v0.15.3"
            ),
        )
        parser.add_argument(
            "tool_spec",
            nargs="?",
            default="go",
            metavar="TOOL[@VERSION]",
            help="Tool and version to install (default: go)",
        )
        parser.add_argument(
            "--partial",
            action="store_true",
            help="Allow partial versions (e.g. 1.21 installs the newest 1.21.x)",
        )

    def _add_uninstall_command(self, subparsers):
        """Add 'uninstall' subcommand."""
        parser = subparsers.add_parser(
            "uninstall",
            help="Remove an installed version",
            description="Remove an installed Go version or tool version",
        )
        parser.add_argument("tool_version", metavar="TOOL@VERSION")
        parser.add_argument(
            "--clear-default",
            action="store_true",
            help="Clear the global default if it is the version being removed",
        )

    def _add_default_command(self, subparsers):
        """Add 'default' subcommand."""
        parser = subparsers.add_parser(
            "default",
            help="Show, set or clear the global default version",
            description=(
                "golta default               show defaults\n"
                "golta default TOOL@VERSION  set a default\n"
                "golta default clear [TOOL]  clear a default (default tool: go)"
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument("target", nargs="?", metavar="TOOL@VERSION|clear|TOOL")
        parser.add_argument("tool", nargs="?", metavar="TOOL")

    def _add_run_command(self, subparsers):
        """Add 'run' subcommand."""
        parser = subparsers.add_parser(
            "run",
            help="Run a command with an explicit version",
            description="Run a tool as a specific installed version",
        )
        parser.add_argument("tool_version", metavar="TOOL@VERSION")
        parser.add_argument(
            "args", nargs=argparse.REMAINDER, help="Arguments passed to the tool"
        )

    def _add_exec_command(self, subparsers):
        """Add 'exec' subcommand."""
        parser = subparsers.add_parser(
            "exec",
            help="Run a command with the active version",
            description="Run a tool as the version active for this directory",
        )
        parser.add_argument("tool", metavar="TOOL")
        parser.add_argument(
            "args", nargs=argparse.REMAINDER, help="Arguments passed to the tool"
        )

    def _add_pin_command(self, subparsers):
        """Add 'pin' subcommand."""
        parser = subparsers.add_parser(
            "pin",
            help="Pin a version for this project",
            description="Record a version in .golta.json in the current directory",
        )
        parser.add_argument("tool_version", metavar="TOOL@VERSION")

    def _add_unpin_command(self, subparsers):
        """Add 'unpin' subcommand."""
        parser = subparsers.add_parser(
            "unpin",
            help="Remove the project pin",
            description="Remove .golta.json (or one tool from it) in the current directory",
        )
        parser.add_argument("tool", nargs="?", metavar="TOOL")

    def _add_which_command(self, subparsers):
        """Add 'which' subcommand."""
        parser = subparsers.add_parser(
            "which",
            help="Show the binary of the active version",
            description="Print the path of the binary the shim would run",
        )
        parser.add_argument("tool", nargs="?", default="go", metavar="TOOL")

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="List installed versions",
            description="List installed versions; * marks the active one",
        )
        parser.add_argument("tool", nargs="?", default="go", metavar="TOOL")

    def _add_list_remote_command(self, subparsers):
        """Add 'list-remote' subcommand."""
        parser = subparsers.add_parser(
            "list-remote",
            help="List versions available for install",
            description="List published versions (cached results are used offline)",
        )
        parser.add_argument("tool", nargs="?", default="go", metavar="TOOL")

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "install": "golta.cli.commands.install",
            "uninstall": "golta.cli.commands.uninstall",
            "default": "golta.cli.commands.default",
            "run": "golta.cli.commands.run",
            "exec": "golta.cli.commands.exec",
            "pin": "golta.cli.commands.pin",
            "unpin": "golta.cli.commands.unpin",
            "which": "golta.cli.commands.which",
            "list": "golta.cli.commands.list",
            "list-remote": "golta.cli.commands.list_remote",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
