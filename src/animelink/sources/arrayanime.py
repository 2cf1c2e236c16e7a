"""Arrayanime source adapter.

The site exposes a small JSON API next to its web pages:

- ``{api}/newseason/1`` - this season's popular anime (the featured list)
- ``{api}/recentlyadded/1`` - recently updated anime (the latest list)
- ``{api}/details/{id}`` - title, cover, summary and episode count
- ``{api}/watching/{id}/{episode}`` - stream links for one episode

Listing bodies look like ``{"results": [{"title", "id", "image",
"episodenumber"?}]}``. Canonical anime links are built as
``{endpoint}/ani/{id}``.
"""

import logging

from pydantic import BaseModel

from animelink.concurrency.promise import Promise
from animelink.errors import DecodeError, MalformedLinkError, PreconditionError
from animelink.models.links import AnimeLink, EpisodeLink, parse_url
from animelink.models.media import Anime, Episode
from animelink.sources.base import Source

logger = logging.getLogger(__name__)

SERVER_ID = "arrayanime"
SERVER_NAME = "Arrayanime"
# Characters that would split an id across URL components.
ID_RESERVED = frozenset("/?#")


class AnimeEntry(BaseModel):
    """One record of a listing response."""

    title: str
    id: str
    image: str
    episodenumber: str | None = None


class AnimeResponse(BaseModel):
    results: list[AnimeEntry]


class DetailEntry(BaseModel):
    title: str
    image: str
    summary: str | None = None
    totalepisode: int | None = None


class DetailResponse(BaseModel):
    results: list[DetailEntry]


class StreamEntry(BaseModel):
    src: str
    size: str | None = None


class WatchResponse(BaseModel):
    links: list[StreamEntry]


class ArrayanimeSource(Source):
    """Adapter for arrayanime.com and its JSON API."""

    identifier = "arrayanime"
    name = "Arrayanime"

    @property
    def endpoint(self) -> str:
        return self.settings.arrayanime_endpoint.rstrip("/")

    @property
    def api_endpoint(self) -> str:
        return self.settings.arrayanime_api_endpoint.rstrip("/")

    def fetch_featured(self) -> Promise[list[AnimeLink]]:
        return self._listing("/newseason/1")

    def fetch_latest(self) -> Promise[list[AnimeLink]]:
        return self._listing("/recentlyadded/1")

    def anime(self, link: AnimeLink) -> Promise[Anime]:
        def request() -> Promise[DetailResponse]:
            self.check_owns(link)
            anime_id = self.anime_id(link)
            return self.transport.request(f"{self.api_endpoint}/details/{anime_id}").then(
                lambda response: response.decode(DetailResponse)
            )

        return Promise.firstly(request, label=f"anime[{link.title}]").then(
            lambda details: self._map_anime(link, details)
        )

    def episode(self, link: EpisodeLink, anime: Anime) -> Promise[Episode]:
        def request() -> Promise[WatchResponse]:
            self.check_owns(link)
            if link not in anime.episodes_on(link.server):
                raise PreconditionError(
                    f"Episode '{link.identifier}' is not listed for "
                    f"'{anime.link.title}' on server '{link.server}'"
                )
            anime_id = self.anime_id(link.parent)
            url = f"{self.api_endpoint}/watching/{anime_id}/{link.identifier}"
            return self.transport.request(url).then(
                lambda response: response.decode(WatchResponse)
            )

        return Promise.firstly(request, label=f"episode[{link.identifier}]").then(
            lambda watch: self._map_episode(link, watch)
        )

    def anime_id(self, link: AnimeLink) -> str:
        """Extract the provider id from a canonical ``/ani/{id}`` link."""
        path = (link.link.path or "").rstrip("/")
        prefix, _, anime_id = path.rpartition("/")
        if not anime_id or not prefix.endswith("/ani"):
            raise PreconditionError(f"Not an {self.name} anime link: {link.link}")
        return anime_id

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------
    def _listing(self, path: str) -> Promise[list[AnimeLink]]:
        return (
            self.transport.request(f"{self.api_endpoint}{path}")
            .then(lambda response: response.decode(AnimeResponse))
            .then(self._map_entries)
        )

    def _map_entries(self, response: AnimeResponse) -> list[AnimeLink]:
        # One bad record fails the whole listing; nothing is skipped.
        return [self._map_entry(entry) for entry in response.results]

    def _map_entry(self, entry: AnimeEntry) -> AnimeLink:
        if not entry.id or any(char.isspace() or char in ID_RESERVED for char in entry.id):
            raise MalformedLinkError("id", entry.id)
        return AnimeLink(
            title=entry.title,
            link=parse_url("id", f"{self.endpoint}/ani/{entry.id}"),
            image=parse_url("image", entry.image),
            source=self.identifier,
        )

    def _map_anime(self, link: AnimeLink, details: DetailResponse) -> Anime:
        if not details.results:
            raise DecodeError(DetailResponse.__name__, "no results for anime")
        detail = details.results[0]
        total = detail.totalepisode or 0
        episodes = tuple(
            EpisodeLink(
                identifier=str(number),
                name=f"Episode {number}",
                server=SERVER_ID,
                parent=link,
            )
            for number in range(1, total + 1)
        )
        logger.debug("Resolved %s with %d episodes", link.title, total)
        return Anime(
            link=link,
            description=detail.summary or "",
            servers={SERVER_ID: SERVER_NAME},
            episodes={SERVER_ID: episodes},
        )

    def _map_episode(self, link: EpisodeLink, watch: WatchResponse) -> Episode:
        if not watch.links:
            raise DecodeError(WatchResponse.__name__, "no stream links for episode")
        return Episode(
            link=link,
            target=parse_url("src", watch.links[0].src),
            name=link.name,
        )
