"""Rich renderers for listings, anime details and resolved episodes."""

from typing import Sequence

from rich.console import Console
from rich.table import Table

from animelink.models.links import AnimeLink, EpisodeLink
from animelink.models.media import Anime, Episode, FeaturedContainer


def render_links(
    title: str, links: Sequence[AnimeLink], console: Console | None = None
) -> None:
    """Render a listing as a numbered table, in listing order."""
    console = console or Console()
    table = Table(title=title)
    table.add_column("#", style="bold", justify="right")
    table.add_column("Title", style="magenta")
    table.add_column("Link", style="cyan")
    for index, link in enumerate(links, 1):
        table.add_row(str(index), link.title, str(link.link))
    console.print(table)


def render_featured(container: FeaturedContainer, console: Console | None = None) -> None:
    """Render both sides of a FeaturedContainer."""
    console = console or Console()
    render_links("Featured", container.featured, console)
    render_links("Latest", container.latest, console)
    console.print(
        f"Featured: {len(container.featured)} | Latest: {len(container.latest)}"
    )


def render_anime(
    anime: Anime, episodes: Sequence[EpisodeLink], console: Console | None = None
) -> None:
    """Render an anime's description and its episodes on one server."""
    console = console or Console()
    console.print(f"[bold]{anime.link.title}[/bold] ({anime.link.link})")
    if anime.description:
        console.print(anime.description)
    table = Table(title="Episodes")
    table.add_column("Episode", style="bold")
    table.add_column("Name", style="magenta")
    table.add_column("Server", style="yellow")
    for episode in episodes:
        table.add_row(
            episode.identifier,
            episode.name,
            anime.servers.get(episode.server, episode.server),
        )
    console.print(table)


def render_episode(episode: Episode, console: Console | None = None) -> None:
    """Print the playback target of a resolved episode."""
    console = console or Console()
    console.print(f"[green]{episode.name or episode.link.identifier}[/green] -> {episode.target}")
