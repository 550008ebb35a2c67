"""
Entry point for running the golta CLI as a module.

Usage: python -m golta.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
