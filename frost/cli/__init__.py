"""Command line interface of Frost test programs."""

from .main import app, cli_main, main

__all__ = ["app", "cli_main", "main"]
