"""CLI commands for animelink.

This module implements the user-facing commands:

- ``sources``: list the registered source adapters.
- ``featured``: fetch a source's featured and latest listings.
- ``show``: find an anime in the listings, resolve it, and optionally
  resolve one of its episodes.
- ``version``: print the package version.

Each command behaves like a small screen: it keeps its request in a task
slot, has completions delivered on its own event loop, and cancels whatever
is still in flight when it exits.
"""

import asyncio
import os
from enum import Enum
from typing import Annotated, Optional, TypeVar

import typer

from animelink.cli.console import make_console
from animelink.cli.renderer import render_anime, render_episode, render_featured
from animelink.concurrency.context import LoopContext
from animelink.concurrency.promise import Promise
from animelink.concurrency.task import TaskSlot
from animelink.errors import AnimeLinkError, PreconditionError
from animelink.models.links import AnimeLink, EpisodeLink
from animelink.models.media import Anime, Episode, FeaturedContainer
from animelink.session import AnimeSession, EpisodeOrder
from animelink.settings import Settings
from animelink.sources import get_source, list_available_sources
from animelink.sources.base import Source
from animelink.utils.config import resolve_setting

T = TypeVar("T")

app = typer.Typer(
    name="animelink",
    help="Browse anime sources and resolve episode links.",
    add_completion=False,
)


class ExitCode(int, Enum):
    """Exit codes for CLI commands."""

    SUCCESS = 0
    ERROR = 1


SOURCE = Annotated[
    Optional[str],
    typer.Option(
        "--source",
        "-s",
        help="Source identifier. Defaults to 'default_source' from the config file.",
    ),
]

EPISODE = Annotated[
    Optional[str],
    typer.Option("--episode", "-e", help="Episode identifier to resolve."),
]

ORDER = Annotated[
    Optional[EpisodeOrder],
    typer.Option("--order", case_sensitive=False, help="Episode listing order."),
]


@app.callback()
def callback(
    no_rich: bool = typer.Option(
        False,
        "--no-rich",
        help="Disable coloured output. Same as setting ANIMELINK_NO_RICH=1.",
    ),
) -> None:
    """Browse anime sources and resolve episode links."""
    if no_rich:
        os.environ["ANIMELINK_NO_RICH"] = "1"


@app.command()
def sources() -> None:
    """List the registered sources."""
    console = make_console()
    for identifier in list_available_sources():
        adapter = get_source(identifier)
        console.print(f"[bold]{identifier}[/bold]  {adapter.name}  {adapter.endpoint}")


@app.command()
def featured(source: SOURCE = None) -> None:
    """Show the featured and latest listings of a source."""
    console = make_console()
    try:
        container = run_promise(_source(source).featured(), slot="featured")
    except AnimeLinkError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.ERROR)
    render_featured(container, console)


@app.command()
def show(
    query: Annotated[str, typer.Argument(help="Part of the anime title to look for.")],
    source: SOURCE = None,
    episode: EPISODE = None,
    order: ORDER = None,
) -> None:
    """Resolve an anime from the source's listings and list its episodes."""
    console = make_console()
    try:
        episode_order = EpisodeOrder(
            resolve_setting(
                "episode_order",
                default=Settings().episode_order,
                cli_value=order.value if order else None,
            )
        )
        adapter = _source(source)
        container = run_promise(adapter.featured(), slot="featured")
        link = find_listed(container, query)
        anime, episodes, resolved = run_session(adapter, link, episode, episode_order)
    except (AnimeLinkError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.ERROR)
    render_anime(anime, episodes, console)
    if resolved is not None:
        render_episode(resolved, console)


@app.command()
def version() -> None:
    """Show the version of animelink."""
    from animelink.__about__ import __version__

    make_console().print(f"AnimeLink version: [bold]{__version__}[/bold]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _source(identifier: str | None) -> Source:
    resolved = resolve_setting("default_source", default="arrayanime", cli_value=identifier)
    return get_source(resolved)


def find_listed(container: FeaturedContainer, query: str) -> AnimeLink:
    """Return the first featured (then latest) anime whose title contains *query*.

    Raises:
        PreconditionError: If no listed anime matches.
    """
    needle = query.casefold()
    for link in (*container.featured, *container.latest):
        if needle in link.title.casefold():
            return link
    raise PreconditionError(f"No listed anime matches '{query}'")


def run_promise(promise: Promise[T], *, slot: str) -> T:
    """Run *promise* to completion on a fresh event loop and return its value."""

    async def main() -> T:
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[T] = loop.create_future()
        task_slot = TaskSlot(slot)
        task_slot.start(
            promise,
            outcome.set_result,
            outcome.set_exception,
            context=LoopContext(loop),
        )
        try:
            return await outcome
        finally:
            task_slot.cancel()

    return asyncio.run(main())


def run_session(
    adapter: Source,
    link: AnimeLink,
    episode_id: str | None,
    episode_order: EpisodeOrder,
) -> tuple[Anime, list[EpisodeLink], Episode | None]:
    """Drive an AnimeSession for *link* and wait for it to settle.

    Returns:
        The anime, its episodes in listing order, and the resolved episode
        when *episode_id* was given.
    """

    async def main() -> tuple[Anime, list[EpisodeLink], Episode | None]:
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[Episode | None] = loop.create_future()

        def settle(value: Episode | None) -> None:
            if not outcome.done():
                outcome.set_result(value)

        def fail(error: BaseException) -> None:
            if not outcome.done():
                outcome.set_exception(error)

        def anime_ready(anime: Anime) -> None:
            if episode_id is None:
                settle(None)
                return
            try:
                for candidate in session.episodes():
                    if candidate.identifier == episode_id:
                        session.select_episode(candidate)
                        return
            except PreconditionError as e:
                fail(e)
                return
            fail(PreconditionError(f"'{anime.link.title}' has no episode '{episode_id}'"))

        session = AnimeSession(
            on_anime=anime_ready,
            on_episode=settle,
            on_error=fail,
            source_factory=lambda _: adapter,
            episode_order=episode_order,
            context=LoopContext(loop),
        )
        session.present(link)
        try:
            session.load()
            resolved = await outcome
            if session.anime is None:
                raise PreconditionError(f"'{link.title}' was not loaded")
            return session.anime, session.episodes(), resolved
        finally:
            session.teardown()

    return asyncio.run(main())
