"""Command-line interface for animelink.

- app: The Typer application object, used by the ``animelink`` entry point.
- All commands render through Rich and can be switched to plain output with
  ``--no-rich``.
"""

from animelink.cli.commands import app, main

__all__ = ["app", "main"]
