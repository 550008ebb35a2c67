"""
golta - Go toolchain version manager.

Installs Go releases and auxiliary Go tools side by side, resolves the
active version per project and dispatches commands through a shim.
"""
