"""Tests for the Arrayanime source adapter.

Endpoints are mocked with respx using recorded response fixtures. Tests
cover listing mapping, anime and episode resolution, and the error cases
(malformed records, empty bodies, foreign links).
"""

import json
from pathlib import Path

import pytest
import respx
from httpx import Response

from animelink.errors import (
    DecodeError,
    MalformedLinkError,
    PreconditionError,
    TransportError,
)
from animelink.models.links import AnimeLink, EpisodeLink
from animelink.models.media import Anime, Episode
from animelink.settings import Settings
from animelink.sources.arrayanime import ArrayanimeSource

SITE = "https://arrayanime.test"
API = "https://api.arrayanime.test"


@pytest.fixture
def test_fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "test_fixtures" / "arrayanime"


def load(fixtures: Path, name: str) -> dict:
    with open(fixtures / name) as f:
        return json.load(f)


@pytest.fixture
def source() -> ArrayanimeSource:
    """Return an adapter pointed at the test endpoints."""
    settings = Settings(arrayanime_endpoint=f"{SITE}/", arrayanime_api_endpoint=API)
    return ArrayanimeSource(settings=settings)


@pytest.fixture
def frieren() -> AnimeLink:
    return AnimeLink(
        title="Frieren: Beyond Journey's End",
        link=f"{SITE}/ani/sousou-no-frieren",
        image="https://gogocdn.net/cover/sousou-no-frieren.png",
        source="arrayanime",
    )


@pytest.mark.asyncio
async def test_fetch_featured_maps_records_in_order(
    source: ArrayanimeSource, test_fixtures_dir: Path
) -> None:
    """Test that the newseason listing maps to AnimeLinks in provider order."""
    with respx.mock:
        respx.get(f"{API}/newseason/1").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "newseason.json"))
        )
        links = await source.fetch_featured()

    assert [link.title for link in links] == [
        "Frieren: Beyond Journey's End",
        "The Apothecary Diaries",
        "Shangri-La Frontier",
    ]
    first = links[0]
    assert str(first.link) == f"{SITE}/ani/sousou-no-frieren"
    assert str(first.image) == "https://gogocdn.net/cover/sousou-no-frieren.png"
    assert first.source == "arrayanime"


@pytest.mark.asyncio
async def test_fetch_latest_uses_recently_added(
    source: ArrayanimeSource, test_fixtures_dir: Path
) -> None:
    """Test that the latest listing comes from the recentlyadded endpoint."""
    with respx.mock:
        route = respx.get(f"{API}/recentlyadded/1").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "recentlyadded.json"))
        )
        links = await source.fetch_latest()

    assert route.called
    assert len(links) == 5
    assert links[0].title == "One Piece"


@pytest.mark.asyncio
async def test_relisting_yields_equal_links(
    source: ArrayanimeSource, test_fixtures_dir: Path
) -> None:
    """Test that fetching the same listing twice gives equal, hash-equal links."""
    with respx.mock:
        respx.get(f"{API}/newseason/1").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "newseason.json"))
        )
        first = await source.fetch_featured()
        second = await source.fetch_featured()

    assert first == second
    assert set(first) == set(second)


@pytest.mark.asyncio
async def test_one_malformed_record_fails_whole_listing(
    source: ArrayanimeSource, test_fixtures_dir: Path
) -> None:
    """Test that a single bad image URL fails the listing instead of being skipped."""
    with respx.mock:
        respx.get(f"{API}/newseason/1").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "malformed_listing.json"))
        )
        with pytest.raises(MalformedLinkError) as excinfo:
            await source.fetch_featured()

    assert excinfo.value.field == "image"
    assert excinfo.value.value == "not a url"


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", ["", "bad id", "a/b", "abc?x", "frag#1"])
async def test_malformed_id_is_rejected(source: ArrayanimeSource, bad_id: str) -> None:
    """Test that an id that cannot form a single URL path segment is rejected."""
    body = {"results": [{"title": "Bad", "id": bad_id, "image": "https://img.test/a.png"}]}
    with respx.mock:
        respx.get(f"{API}/recentlyadded/1").mock(return_value=Response(200, json=body))
        with pytest.raises(MalformedLinkError) as excinfo:
            await source.fetch_latest()

    assert excinfo.value.field == "id"
    assert excinfo.value.value == bad_id


@pytest.mark.asyncio
async def test_listing_with_wrong_shape_is_decode_error(source: ArrayanimeSource) -> None:
    """Test that a body missing the results array fails with DecodeError."""
    with respx.mock:
        respx.get(f"{API}/newseason/1").mock(return_value=Response(200, json={"data": []}))
        with pytest.raises(DecodeError) as excinfo:
            await source.fetch_featured()

    assert excinfo.value.shape == "AnimeResponse"


@pytest.mark.asyncio
async def test_listing_http_error_is_transport_error(source: ArrayanimeSource) -> None:
    """Test that a server error on a listing endpoint surfaces as TransportError."""
    with respx.mock:
        respx.get(f"{API}/newseason/1").mock(return_value=Response(502))
        with pytest.raises(TransportError) as excinfo:
            await source.fetch_featured()

    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
async def test_anime_resolves_details_and_episodes(
    source: ArrayanimeSource, frieren: AnimeLink, test_fixtures_dir: Path
) -> None:
    """Test that anime details map to an Anime with numbered episodes."""
    with respx.mock:
        respx.get(f"{API}/details/sousou-no-frieren").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "details.json"))
        )
        anime = await source.anime(frieren)

    assert isinstance(anime, Anime)
    assert anime.link == frieren
    assert anime.description.startswith("The adventure is over")
    assert anime.default_server == "arrayanime"
    episodes = anime.episodes_on("arrayanime")
    assert [episode.identifier for episode in episodes] == ["1", "2", "3", "4"]
    assert episodes[1].name == "Episode 2"
    assert all(episode.parent == frieren for episode in episodes)


@pytest.mark.asyncio
async def test_anime_without_results_is_decode_error(
    source: ArrayanimeSource, frieren: AnimeLink
) -> None:
    """Test that an empty details response fails with DecodeError."""
    with respx.mock:
        respx.get(f"{API}/details/sousou-no-frieren").mock(
            return_value=Response(200, json={"results": []})
        )
        with pytest.raises(DecodeError):
            await source.anime(frieren)


@pytest.mark.asyncio
async def test_episode_resolves_first_stream(
    source: ArrayanimeSource, frieren: AnimeLink, test_fixtures_dir: Path
) -> None:
    """Test that an episode resolves to the first stream link."""
    with respx.mock:
        respx.get(f"{API}/details/sousou-no-frieren").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "details.json"))
        )
        respx.get(f"{API}/watching/sousou-no-frieren/2").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "watching.json"))
        )
        anime = await source.anime(frieren)
        episode = await source.episode(anime.episodes_on("arrayanime")[1], anime)

    assert isinstance(episode, Episode)
    assert episode.name == "Episode 2"
    assert str(episode.target).endswith("/sousou-no-frieren/2/playlist.m3u8")


@pytest.mark.asyncio
async def test_episode_without_streams_is_decode_error(
    source: ArrayanimeSource, frieren: AnimeLink, test_fixtures_dir: Path
) -> None:
    """Test that an empty stream list fails with DecodeError."""
    with respx.mock:
        respx.get(f"{API}/details/sousou-no-frieren").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "details.json"))
        )
        respx.get(f"{API}/watching/sousou-no-frieren/1").mock(
            return_value=Response(200, json={"links": []})
        )
        anime = await source.anime(frieren)
        with pytest.raises(DecodeError):
            await source.episode(anime.episodes_on("arrayanime")[0], anime)


@pytest.mark.asyncio
async def test_episode_not_listed_is_precondition_error(
    source: ArrayanimeSource, frieren: AnimeLink
) -> None:
    """Test that an episode missing from the anime's listing is refused before any request."""
    anime = Anime(link=frieren, servers={"arrayanime": "Arrayanime"}, episodes={})
    stray = EpisodeLink(identifier="99", server="arrayanime", parent=frieren)
    with respx.mock(assert_all_called=False):
        route = respx.get(f"{API}/watching/sousou-no-frieren/99")
        with pytest.raises(PreconditionError):
            await source.episode(stray, anime)
        assert not route.called


@pytest.mark.asyncio
async def test_foreign_link_is_precondition_error(
    source: ArrayanimeSource, frieren: AnimeLink
) -> None:
    """Test that a link produced by another source is refused."""
    foreign = frieren.model_copy(update={"source": "elsewhere"})
    with pytest.raises(PreconditionError):
        await source.anime(foreign)


@pytest.mark.asyncio
async def test_resolve_episode_link_fetches_parent_first(
    source: ArrayanimeSource, frieren: AnimeLink, test_fixtures_dir: Path
) -> None:
    """Test that resolving an EpisodeLink resolves its anime, then the episode."""
    link = EpisodeLink(identifier="2", server="arrayanime", parent=frieren, name="Episode 2")
    with respx.mock:
        details = respx.get(f"{API}/details/sousou-no-frieren").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "details.json"))
        )
        respx.get(f"{API}/watching/sousou-no-frieren/2").mock(
            return_value=Response(200, json=load(test_fixtures_dir, "watching.json"))
        )
        episode = await source.resolve(link)

    assert details.call_count == 1
    assert isinstance(episode, Episode)
    assert episode.link == link


def test_anime_id_requires_canonical_path(source: ArrayanimeSource) -> None:
    """Test that only /ani/{id} links yield a provider id."""
    good = AnimeLink(
        title="x", link=f"{SITE}/ani/one-piece", image="https://img.test/x.png", source="arrayanime"
    )
    bad = AnimeLink(
        title="x", link=f"{SITE}/watch/one-piece", image="https://img.test/x.png", source="arrayanime"
    )
    assert source.anime_id(good) == "one-piece"
    with pytest.raises(PreconditionError):
        source.anime_id(bad)


def test_endpoints_drop_trailing_slash(source: ArrayanimeSource) -> None:
    """Test that configured endpoints are normalized."""
    assert source.endpoint == SITE
    assert source.api_endpoint == API
