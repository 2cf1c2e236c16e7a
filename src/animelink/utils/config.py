"""Persistent user configuration for the animelink command line.

Reads ``~/.config/animelink/config.toml`` (or ``$XDG_CONFIG_HOME/animelink``)
with tomli. A typical file looks like::

    default_source = "arrayanime"
    episode_order = "reversed"

Values are resolved with :func:`resolve_setting`, which applies the usual
precedence: command line option > ``ANIMELINK_*`` environment variable >
config file > built-in default. Keys inside TOML tables are addressed with
dots; ``a.b`` is overridden by the variable ``ANIMELINK_A_B``.
"""

import contextlib
import os
from pathlib import Path
from typing import Any, TypeVar, cast

import tomli

_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
CONFIG_DIR = _xdg_config_home / "animelink"
CONFIG_FILE = CONFIG_DIR / "config.toml"

ENV_PREFIX = "ANIMELINK_"

_TRUTHY = {"1", "true", "yes", "on"}

T = TypeVar("T")


def load_config() -> dict[str, Any]:
    """Return the parsed config file, or an empty table when there is none."""
    try:
        with CONFIG_FILE.open("rb") as f:
            return tomli.load(f)
    except FileNotFoundError:
        return {}


def _config_value(table: dict[str, Any], key: str) -> Any | None:
    """Walk *table* along the dotted *key*; None when any step is missing."""
    head, _, rest = key.partition(".")
    value = table.get(head)
    if not rest:
        return value
    return _config_value(value, rest) if isinstance(value, dict) else None


def env_var_for(key: str) -> str:
    """Name of the environment variable overriding *key*."""
    return ENV_PREFIX + key.upper().replace(".", "_")


def _coerce(raw: Any, default: T) -> T:
    """Coerce *raw* to the type of *default*; fall back to *default* on failure."""
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return cast(T, raw)
        return cast(T, str(raw).lower() in _TRUTHY)
    if isinstance(default, int):
        with contextlib.suppress(TypeError, ValueError):
            return cast(T, int(raw))
        return default
    if isinstance(default, float):
        with contextlib.suppress(TypeError, ValueError):
            return cast(T, float(raw))
        return default
    if isinstance(default, str):
        return cast(T, str(raw))
    return cast(T, raw)


def resolve_setting(key: str, *, default: T, cli_value: T | None = None) -> T:
    """Resolve a configuration *key* using precedence CLI > env > config > default.

    Args:
        key: Key in the config file, dotted for keys inside tables, e.g.
            ``"default_source"``.
        default: Value to fall back to; its type drives coercion.
        cli_value: Value passed from a CLI option (``None`` when not given).

    Returns:
        The resolved value.
    """
    if cli_value is not None:
        return cli_value

    env_var = env_var_for(key)
    if env_var in os.environ:
        return _coerce(os.environ[env_var], default)

    file_val = _config_value(load_config(), key)
    if file_val is not None:
        return _coerce(file_val, default)

    return default
