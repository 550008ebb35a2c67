"""Command implementations for the golta CLI, one module per subcommand."""
