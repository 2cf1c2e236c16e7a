"""Link models: the normalized identifiers every source produces.

A link is either an :class:`AnimeLink` (a browsable series) or an
:class:`EpisodeLink` (one episode of a series on one server). The two form a
tagged union, :data:`Link`, discriminated by ``kind``; code that needs to
branch on the variant uses ``match`` over the two classes.

Links are immutable. Two links are equal when they point at the same
canonical URL on the same source, so re-fetching a listing yields links that
compare (and hash) equal to the ones already on screen.

A link refers to the source that produced it by identifier only. The source
object is looked up through :func:`animelink.sources.get_source` when the
link needs to be resolved further; sources never hold on to links.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError

from animelink.errors import MalformedLinkError

_URL_ADAPTER: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)


def parse_url(field: str, value: Any) -> HttpUrl:
    """Validate *value* as an absolute http(s) URL.

    Args:
        field: Name of the record field being mapped, used in the error.
        value: The raw value from the provider record.

    Returns:
        The parsed URL.

    Raises:
        MalformedLinkError: If *value* is not a valid http(s) URL.
    """
    if not isinstance(value, str) or not value.strip():
        raise MalformedLinkError(field, value)
    try:
        return _URL_ADAPTER.validate_python(value.strip())
    except ValidationError as exc:
        raise MalformedLinkError(field, value) from exc


class AnimeLink(BaseModel):
    """A browsable anime on a specific source."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["anime"] = "anime"
    title: str
    """Display title as reported by the source."""
    link: HttpUrl
    """Canonical URL of the anime on the source's site."""
    image: HttpUrl
    """Cover artwork URL."""
    source: str
    """Identifier of the source that produced this link."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnimeLink):
            return NotImplemented
        return (str(self.link), self.source) == (str(other.link), other.source)

    def __hash__(self) -> int:
        return hash(("anime", str(self.link), self.source))


class EpisodeLink(BaseModel):
    """One episode of an anime, as served by one of the source's servers."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["episode"] = "episode"
    identifier: str
    """Source-specific episode identifier (often the episode number)."""
    server: str
    """Identifier of the streaming server this episode is listed under."""
    parent: AnimeLink
    name: str = ""

    @property
    def source(self) -> str:
        """Identifier of the source, inherited from the parent anime."""
        return self.parent.source

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EpisodeLink):
            return NotImplemented
        return (self.parent, self.server, self.identifier) == (
            other.parent,
            other.server,
            other.identifier,
        )

    def __hash__(self) -> int:
        return hash(("episode", self.parent, self.server, self.identifier))


Link = Annotated[Union[AnimeLink, EpisodeLink], Field(discriminator="kind")]
"""Either kind of link; validate raw data with :data:`LINK_ADAPTER`."""

LINK_ADAPTER: TypeAdapter[Link] = TypeAdapter(Link)


def anime_link_of(link: Link) -> AnimeLink:
    """Return the anime a link belongs to (the link itself for an AnimeLink)."""
    match link:
        case AnimeLink():
            return link
        case EpisodeLink(parent=parent):
            return parent
    raise TypeError(f"Not a link: {link!r}")
