"""Resolved media models: listings, anime details and playable episodes.

- FeaturedContainer is the result of one aggregation request: the featured
  and latest listings, in the order the source returned them.
- Anime is what an AnimeLink resolves to. It groups episode links by server.
- Episode is what an EpisodeLink resolves to: the playback target URL.
"""

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from animelink.errors import PreconditionError
from animelink.models.links import AnimeLink, EpisodeLink


class FeaturedContainer(BaseModel):
    """Featured and latest listings built by one aggregation request."""

    model_config = ConfigDict(frozen=True)

    featured: tuple[AnimeLink, ...] = ()
    latest: tuple[AnimeLink, ...] = ()


class Anime(BaseModel):
    """Details for one anime, with its episodes grouped per server."""

    model_config = ConfigDict(frozen=True)

    link: AnimeLink
    description: str = ""
    servers: dict[str, str] = Field(default_factory=dict)
    """Server identifier -> display name, in the source's preferred order."""
    episodes: dict[str, tuple[EpisodeLink, ...]] = Field(default_factory=dict)
    """Server identifier -> episodes available on that server."""

    @property
    def default_server(self) -> str:
        """The first server listed by the source.

        Raises:
            PreconditionError: If the anime has no servers.
        """
        for server in self.servers:
            return server
        raise PreconditionError(f"'{self.link.title}' has no streaming servers")

    def episodes_on(self, server: str) -> tuple[EpisodeLink, ...]:
        """Return the episodes listed under *server*.

        Raises:
            PreconditionError: If *server* is not one of this anime's servers.
        """
        if server not in self.servers:
            raise PreconditionError(
                f"Server '{server}' is not available for '{self.link.title}'"
            )
        return self.episodes.get(server, ())


class Episode(BaseModel):
    """A resolved episode, ready to hand to a player."""

    model_config = ConfigDict(frozen=True)

    link: EpisodeLink
    target: HttpUrl
    name: str = ""

    @property
    def parent_link(self) -> AnimeLink:
        return self.link.parent
