"""Source adapters and the source registry.

Links carry the identifier of the source that produced them. The registry
maps those identifiers back to adapter classes, so a link can always be
resolved again later without the link owning its source.
"""

from typing import Any

from animelink.errors import UnknownSourceError
from animelink.models.links import Link
from animelink.sources.arrayanime import ArrayanimeSource
from animelink.sources.base import Source

__all__ = [
    "ArrayanimeSource",
    "Source",
    "get_source",
    "list_available_sources",
    "register_source",
    "source_for",
]

# Registry of source adapter implementations
_SOURCE_REGISTRY: dict[str, type[Source]] = {}


def register_source(source_class: type[Source]) -> type[Source]:
    """Register a source adapter under its identifier.

    Usable as a class decorator.

    Args:
        source_class: The Source subclass to register.

    Returns:
        The class, unchanged.
    """
    _SOURCE_REGISTRY[source_class.identifier.lower()] = source_class
    return source_class


def get_source(identifier: str, **kwargs: Any) -> Source:
    """Instantiate the source registered under *identifier*.

    Args:
        identifier: The source identifier (e.g. ``"arrayanime"``).
        **kwargs: Forwarded to the source constructor (``transport``,
            ``settings``).

    Raises:
        UnknownSourceError: If nothing is registered under *identifier*.
    """
    source_class = _SOURCE_REGISTRY.get(identifier.lower())
    if source_class is None:
        raise UnknownSourceError(identifier)
    return source_class(**kwargs)


def source_for(link: Link, **kwargs: Any) -> Source:
    """Instantiate the source that produced *link*."""
    return get_source(link.source, **kwargs)


def list_available_sources() -> list[str]:
    """Return the identifiers of all registered sources."""
    return list(_SOURCE_REGISTRY)


register_source(ArrayanimeSource)
