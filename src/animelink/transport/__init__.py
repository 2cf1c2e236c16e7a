"""HTTP transport port and its httpx implementation."""

from animelink.transport.base import RawResponse, Transport
from animelink.transport.httpx_transport import HttpxTransport

__all__ = ["HttpxTransport", "RawResponse", "Transport"]
