"""Domain models for animelink."""

from animelink.models.links import (
    LINK_ADAPTER,
    AnimeLink,
    EpisodeLink,
    Link,
    anime_link_of,
    parse_url,
)
from animelink.models.media import Anime, Episode, FeaturedContainer

__all__ = [
    "LINK_ADAPTER",
    "Anime",
    "AnimeLink",
    "Episode",
    "EpisodeLink",
    "FeaturedContainer",
    "Link",
    "anime_link_of",
    "parse_url",
]
