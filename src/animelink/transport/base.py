"""Transport port used by every source adapter.

Sources never talk to an HTTP library directly. They ask a :class:`Transport`
for a :class:`RawResponse` and decode it into a pydantic model describing the
provider's wire shape. Swapping the transport (or faking it in tests) does
not touch any source code.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from animelink.concurrency.promise import Promise
from animelink.errors import DecodeError

ShapeT = TypeVar("ShapeT", bound=BaseModel)


@dataclass(frozen=True)
class RawResponse:
    """Undecoded HTTP response returned by a :class:`Transport`."""

    url: str
    status_code: int
    content: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises:
            DecodeError: If the body is not valid JSON.
        """
        try:
            return json.loads(self.content)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError("JSON", str(exc)) from exc

    def decode(self, shape: type[ShapeT]) -> Promise[ShapeT]:
        """Decode the body into *shape*.

        Args:
            shape: Pydantic model describing the expected body.

        Returns:
            A promise for the validated model; it fails with
            :class:`~animelink.errors.DecodeError` when the body is not JSON
            or does not match *shape*.
        """

        def validate() -> ShapeT:
            try:
                return shape.model_validate_json(self.content)
            except ValidationError as exc:
                raise DecodeError(shape.__name__, _summarize(exc)) from exc

        return Promise.firstly(validate, label=f"decode[{shape.__name__}]")


def _summarize(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<body>"
    suffix = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{location}: {first.get('msg', 'invalid')}{suffix}"


class Transport(ABC):
    """Abstract HTTP transport.

    Implementations execute the request off the caller's path (the returned
    promise does nothing until run) and surface failures as
    :class:`~animelink.errors.TransportError`.
    """

    @abstractmethod
    def request(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Promise[RawResponse]:
        """Build a promise that performs a GET request for *url*.

        Args:
            url: Absolute URL to fetch.
            params: Optional query parameters.
            headers: Optional extra request headers.

        Returns:
            A promise for the raw response. Non-2xx statuses fail the promise.
        """
        raise NotImplementedError
