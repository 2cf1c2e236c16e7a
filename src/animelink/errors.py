"""Error taxonomy for the link resolution pipeline.

Every failure raised inside a promise chain is one of these, or is forwarded
untouched from the code that raised it. Chains never retry; the first error
short-circuits the chain and reaches the caller's failure callback.

- TransportError: the HTTP request failed (network error or non-2xx status).
- DecodeError: the response body does not match the expected shape.
- MalformedLinkError: a decoded record carries a URL that does not parse.
- PreconditionError: an operation needed state that was never populated.
- UnknownSourceError: a link names a source that is not registered.
- TaskSlotViolation: a pending task was overwritten without being cancelled.
"""

from typing import Any


class AnimeLinkError(Exception):
    """Base class for all errors raised by animelink."""


class TransportError(AnimeLinkError):
    """Raised when a request fails at the network or HTTP level."""

    def __init__(
        self, url: str, status_code: int | None = None, reason: str | None = None
    ) -> None:
        """Initialize the error with the failing URL and optional HTTP status."""
        detail = f"HTTP {status_code}" if status_code is not None else "request failed"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(f"{detail} ({url})")
        self.url = url
        self.status_code = status_code
        self.reason = reason


class DecodeError(AnimeLinkError):
    """Raised when a response body cannot be decoded into the expected shape."""

    def __init__(self, shape: str, reason: str) -> None:
        """Initialize the error with the target shape name and the reason."""
        super().__init__(f"Unable to decode response as {shape}: {reason}")
        self.shape = shape
        self.reason = reason


class MalformedLinkError(AnimeLinkError):
    """Raised when a URL-shaped field of a provider record is not a valid URL."""

    def __init__(self, field: str, value: Any) -> None:
        """Initialize the error with the offending field name and value."""
        super().__init__(f"Malformed URL in field '{field}': {value!r}")
        self.field = field
        self.value = value


class PreconditionError(AnimeLinkError):
    """Raised when an operation is attempted before its inputs are available."""


class UnknownSourceError(AnimeLinkError):
    """Raised when a link refers to a source identifier that is not registered."""

    def __init__(self, identifier: str) -> None:
        """Initialize the error with the unknown source identifier."""
        super().__init__(f"No source registered under '{identifier}'")
        self.identifier = identifier


class TaskSlotViolation(AnimeLinkError):
    """Raised when a task slot would end up with two live owners."""
