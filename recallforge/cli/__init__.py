"""Command-line interface for RecallForge."""

from recallforge.cli.main import app, cli_main

__all__ = ["app", "cli_main"]
