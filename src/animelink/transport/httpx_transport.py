"""httpx implementation of the :class:`~animelink.transport.base.Transport` port."""

import logging
from typing import Any, Mapping

import httpx

from animelink.concurrency.promise import Promise
from animelink.errors import TransportError
from animelink.settings import Settings
from animelink.transport.base import RawResponse, Transport

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """Async transport backed by :class:`httpx.AsyncClient`.

    Each request opens its own client, so a cancelled chain tears down its
    connection with it. Timeouts, user agent and redirect handling come from
    :class:`~animelink.settings.Settings`.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the transport, loading Settings from the environment if needed."""
        self.settings = settings or Settings()

    def request(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Promise[RawResponse]:
        async def fetch() -> RawResponse:
            request_headers = {"User-Agent": self.settings.user_agent}
            if headers:
                request_headers.update(headers)
            logger.debug("GET %s", url)
            try:
                async with httpx.AsyncClient(
                    timeout=self.settings.request_timeout,
                    follow_redirects=self.settings.follow_redirects,
                    headers=request_headers,
                ) as client:
                    response = await client.get(url, params=params)
                    response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise TransportError(
                    url, exc.response.status_code, exc.response.reason_phrase
                ) from exc
            except httpx.HTTPError as exc:
                raise TransportError(url, reason=str(exc) or type(exc).__name__) from exc
            return RawResponse(
                url=str(response.url),
                status_code=response.status_code,
                content=response.content,
                headers=dict(response.headers),
            )

        return Promise(fetch, label=f"GET {url}")
