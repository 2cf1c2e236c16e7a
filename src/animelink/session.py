"""Headless model of one anime screen.

:class:`AnimeSession` is what a front end (the bundled CLI, or a GUI) drives
when the user opens an anime or an episode. It owns two task slots, one for
the anime request and one for the episode request, and always starts a new
request through cancel-then-replace. Tearing the session down cancels both,
so no callback can arrive for a screen that is gone.

Failures are logged and reported once through ``on_error``; the session
never retries.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, TypeVar

from animelink.concurrency.context import INLINE, ExecutionContext
from animelink.concurrency.task import AsyncTask, TaskSlot
from animelink.errors import AnimeLinkError, PreconditionError
from animelink.models.links import AnimeLink, EpisodeLink, Link
from animelink.models.media import Anime, Episode
from animelink.sources import source_for
from animelink.sources.base import Source
from animelink.utils import debug

T = TypeVar("T")


class EpisodeOrder(str, Enum):
    """Order in which episodes are listed."""

    NATURAL = "natural"
    REVERSED = "reversed"


class AnimeSession:
    """State and in-flight requests for one anime screen."""

    def __init__(
        self,
        *,
        on_anime: Callable[[Anime], Any] | None = None,
        on_episode: Callable[[Episode], Any] | None = None,
        on_error: Callable[[BaseException], Any] | None = None,
        source_factory: Callable[[Link], Source] = source_for,
        episode_order: EpisodeOrder = EpisodeOrder.NATURAL,
        context: ExecutionContext = INLINE,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Create an empty session.

        Args:
            on_anime: Called once the presented anime is resolved.
            on_episode: Called once the selected episode is resolved.
            on_error: Called once per failed request.
            source_factory: Maps a link to the source that can resolve it.
            episode_order: Listing order for :meth:`episodes`.
            context: Where callbacks are delivered.
            loop: Event loop requests run on; defaults to the running loop.
        """
        self.on_anime = on_anime
        self.on_episode = on_episode
        self.on_error = on_error
        self.source_factory = source_factory
        self.episode_order = episode_order
        self.context = context
        self.loop = loop

        self.anime_link: AnimeLink | None = None
        self.episode_link: EpisodeLink | None = None
        self.anime: Anime | None = None
        self.episode: Episode | None = None
        self.server: str | None = None

        self.anime_slot = TaskSlot("anime")
        self.episode_slot = TaskSlot("episode")
        self._request_loop: asyncio.AbstractEventLoop | None = loop

    # ------------------------------------------------------------------
    # Presenting
    # ------------------------------------------------------------------
    def present(self, link: Link) -> None:
        """Point the session at an anime, or at an episode to auto-play.

        An EpisodeLink also presents its parent anime; once the anime is
        loaded the episode is resolved right away.
        """
        match link:
            case AnimeLink():
                anime_link, self.episode_link = link, None
            case EpisodeLink(parent=parent):
                anime_link, self.episode_link = parent, link
            case _:
                raise TypeError(f"Not a link: {link!r}")
        if anime_link != self.anime_link:
            self.anime_slot.cancel()
            self.episode_slot.cancel()
            self.anime = None
            self.episode = None
            self.server = None
        self.anime_link = anime_link

    def load(self) -> AsyncTask | None:
        """Resolve the presented anime (if needed) and any pending episode.

        Returns:
            The task that was started, or None when nothing needed fetching.

        Raises:
            PreconditionError: If nothing has been presented.
            RuntimeError: If no loop was given and none is running.
        """
        if self.anime is not None:
            return self.play() if self.episode_link is not None else None
        link = _require(self.anime_link, "No anime has been presented")
        source = self.source_factory(link)
        debug.info("Loading '%s' from %s", link.title, link.source)
        # Later requests may be issued from a callback running off the loop.
        self._request_loop = self.loop or asyncio.get_running_loop()
        return self.anime_slot.start(
            source.anime(link),
            self._anime_loaded,
            self._failed,
            context=self.context,
            loop=self._request_loop,
        )

    def select_episode(self, link: EpisodeLink) -> AsyncTask:
        """Select and resolve *link*, cancelling any episode request in flight."""
        self.episode_link = link
        return self.play()

    def play(self) -> AsyncTask:
        """Resolve the selected episode.

        Raises:
            PreconditionError: If the anime is not loaded or no episode is
                selected.
        """
        anime = _require(self.anime, "Anime has not been loaded yet")
        link = _require(self.episode_link, "No episode has been selected")
        source = self.source_factory(link)
        return self.episode_slot.start(
            source.episode(link, anime),
            self._episode_ready,
            self._failed,
            context=self.context,
            loop=self._request_loop,
        )

    def select_server(self, server: str) -> None:
        """Switch the episode listing to *server*.

        Raises:
            PreconditionError: If the anime is not loaded or lacks *server*.
        """
        anime = _require(self.anime, "Anime has not been loaded yet")
        anime.episodes_on(server)
        self.server = server

    def episodes(self) -> list[EpisodeLink]:
        """Episodes on the current server, in the configured order."""
        anime = _require(self.anime, "Anime has not been loaded yet")
        server = _require(self.server, "No server selected")
        episodes = list(anime.episodes_on(server))
        if self.episode_order is EpisodeOrder.REVERSED:
            episodes.reverse()
        return episodes

    def teardown(self) -> None:
        """Cancel outstanding requests and drop the selected episode."""
        self.anime_slot.cancel()
        self.episode_slot.cancel()
        self.episode = None
        self.episode_link = None

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------
    def _anime_loaded(self, anime: Anime) -> None:
        self.anime = anime
        pending = self.episode_link
        if pending is not None and pending.server in anime.servers:
            self.server = pending.server
        else:
            self.server = anime.default_server if anime.servers else None
        if self.on_anime is not None:
            self.on_anime(anime)
        if pending is not None:
            try:
                self.play()
            except (AnimeLinkError, RuntimeError) as e:
                self._failed(e)

    def _episode_ready(self, episode: Episode) -> None:
        self.episode = episode
        self.server = episode.link.server
        debug.info("Episode target retrieved for '%s'", episode.name)
        debug.debug("- Playback target: %s", episode.target)
        if self.on_episode is not None:
            self.on_episode(episode)

    def _failed(self, error: BaseException) -> None:
        debug.error("Request failed: %s", error)
        if self.on_error is not None:
            self.on_error(error)


def _require(value: T | None, message: str) -> T:
    if value is None:
        raise PreconditionError(message)
    return value
