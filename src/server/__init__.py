"""HTTP API for mdcommands."""
