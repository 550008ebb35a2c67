"""
Entry point for running the golta CLI as a module.

Usage: python -m golta [command] [options]
"""

from golta.cli.parser import main

if __name__ == "__main__":
    main()
