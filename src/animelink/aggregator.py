"""Aggregation of featured and latest listings into one container.

The aggregator issues exactly two listing calls through
:meth:`Promise.queue <animelink.concurrency.promise.Promise.queue>` and builds
a :class:`~animelink.models.media.FeaturedContainer` from the results by
position: index 0 is the featured list, index 1 the latest list.

It fails as a whole when either call fails and forwards that error
untouched. It never returns a container with one side missing, and it never
retries.
"""

import asyncio
import logging
from enum import Enum
from typing import Protocol

from animelink.concurrency.promise import Promise
from animelink.models.links import AnimeLink
from animelink.models.media import FeaturedContainer

logger = logging.getLogger(__name__)


class ListingSource(Protocol):
    """Anything that can produce the two listings, typically a Source."""

    identifier: str

    def fetch_featured(self) -> Promise[list[AnimeLink]]: ...

    def fetch_latest(self) -> Promise[list[AnimeLink]]: ...


class AggregationState(str, Enum):
    """State of the most recent aggregation request."""

    IDLE = "idle"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Aggregator:
    """Combine a featured listing and a latest listing.

    Both listings usually come from the same source, but they may come from
    two different adapters.
    """

    def __init__(
        self, featured_source: ListingSource, latest_source: ListingSource | None = None
    ) -> None:
        self.featured_source = featured_source
        self.latest_source = latest_source or featured_source
        self.state = AggregationState.IDLE

    def featured(self) -> Promise[FeaturedContainer]:
        """Return a promise for the combined featured/latest container."""
        joined = Promise.queue(
            [self.featured_source.fetch_featured(), self.latest_source.fetch_latest()]
        ).then(
            lambda results: FeaturedContainer(
                featured=tuple(results[0]), latest=tuple(results[1])
            )
        )

        async def aggregate() -> FeaturedContainer:
            self._transition(AggregationState.FETCHING)
            try:
                container = await joined.run()
            except asyncio.CancelledError:
                self._transition(AggregationState.IDLE)
                raise
            except Exception:
                self._transition(AggregationState.FAILED)
                raise
            self._transition(AggregationState.SUCCEEDED)
            return container

        label = f"featured[{self.featured_source.identifier}"
        if self.latest_source is not self.featured_source:
            label += f"+{self.latest_source.identifier}"
        return Promise(aggregate, label=label + "]")

    def _transition(self, state: AggregationState) -> None:
        logger.debug("Aggregation %s -> %s", self.state.value, state.value)
        self.state = state
