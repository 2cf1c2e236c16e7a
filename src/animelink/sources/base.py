"""Base abstraction for anime source adapters.

A source adapter knows one upstream provider: which endpoints to call, the
wire shape of their responses, and how each provider record maps onto the
common link model. All operations return lazy promises; nothing touches the
network until the caller runs or starts them.

Adapters hold configuration and a transport, nothing else. They never keep
links they produced, and no adapter depends on another adapter's state.
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from animelink.concurrency.promise import Promise
from animelink.errors import PreconditionError
from animelink.models.links import AnimeLink, EpisodeLink, Link
from animelink.models.media import Anime, Episode, FeaturedContainer
from animelink.settings import Settings
from animelink.transport.base import Transport


class Source(ABC):
    """Abstract base class for all source adapters.

    Subclasses set :attr:`identifier` and :attr:`name`, provide the site
    :attr:`endpoint`, and implement the two listings plus anime and episode
    resolution.
    """

    identifier: ClassVar[str]
    """Stable key used in links and in the source registry."""
    name: ClassVar[str]
    """Human readable source name."""

    def __init__(
        self, transport: Transport | None = None, settings: Settings | None = None
    ) -> None:
        """Initialize the adapter.

        Args:
            transport: Transport used for every request. Defaults to an
                :class:`~animelink.transport.HttpxTransport` built from
                *settings*.
            settings: Endpoint and timeout configuration. Loaded from the
                environment when omitted.
        """
        self.settings = settings or Settings()
        if transport is None:
            from animelink.transport.httpx_transport import HttpxTransport

            transport = HttpxTransport(self.settings)
        self.transport = transport

    def __repr__(self) -> str:
        return f"{type(self).__name__}(endpoint={self.endpoint!r})"

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Root URL of the provider's site, without a trailing slash."""
        raise NotImplementedError

    @abstractmethod
    def fetch_featured(self) -> Promise[list[AnimeLink]]:
        """Fetch the provider's popular/trending listing.

        Returns:
            A promise for the links in provider order. It fails with
            MalformedLinkError if any record carries an invalid URL.
        """
        raise NotImplementedError

    @abstractmethod
    def fetch_latest(self) -> Promise[list[AnimeLink]]:
        """Fetch the provider's recently updated listing.

        Returns:
            A promise for the links in provider order. It fails with
            MalformedLinkError if any record carries an invalid URL.
        """
        raise NotImplementedError

    @abstractmethod
    def anime(self, link: AnimeLink) -> Promise[Anime]:
        """Resolve an anime link into its details and episode listing."""
        raise NotImplementedError

    @abstractmethod
    def episode(self, link: EpisodeLink, anime: Anime) -> Promise[Episode]:
        """Resolve an episode link of *anime* into a playable target."""
        raise NotImplementedError

    def featured(self) -> Promise[FeaturedContainer]:
        """Fetch both listings of this source into one FeaturedContainer."""
        from animelink.aggregator import Aggregator

        return Aggregator(self).featured()

    def resolve(self, link: Link) -> Promise[Anime | Episode]:
        """Resolve either kind of link produced by this source.

        An AnimeLink resolves to its Anime. An EpisodeLink first resolves its
        parent anime, then the episode itself.
        """
        self.check_owns(link)
        match link:
            case AnimeLink():
                return self.anime(link)  # type: ignore[return-value]
            case EpisodeLink():
                return self.anime(link.parent).then(
                    lambda anime: self.episode(link, anime)
                )
        raise TypeError(f"Not a link: {link!r}")

    def check_owns(self, link: Link) -> None:
        """Raise PreconditionError if *link* was produced by another source."""
        if link.source != self.identifier:
            raise PreconditionError(
                f"Link from source '{link.source}' cannot be resolved by "
                f"'{self.identifier}'"
            )
