"""Console construction for CLI commands.

The ``--no-rich`` flag (or ``ANIMELINK_NO_RICH=1``) switches every command to
plain, colourless output, which is what tests and pipes want.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console

__all__ = ["make_console", "rich_enabled"]

# ENV VAR used to disable rich output entirely (useful for piping or testing)
_ENV_DISABLE_RICH = "ANIMELINK_NO_RICH"


def rich_enabled() -> bool:
    """True unless rich output has been disabled via the environment."""
    return os.getenv(_ENV_DISABLE_RICH, "0").lower() not in {"1", "true", "yes"}


def make_console(*, record: bool = False, **console_kwargs: Any) -> Console:
    """Return a Console honouring the ``ANIMELINK_NO_RICH`` switch."""
    if rich_enabled():
        return Console(record=record, **console_kwargs)
    return Console(
        record=record, color_system=None, force_terminal=False, **console_kwargs
    )

