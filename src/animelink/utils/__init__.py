"""Utility modules for animelink."""

from animelink.utils.config import resolve_setting

__all__ = ["resolve_setting"]
