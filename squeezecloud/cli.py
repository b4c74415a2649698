"""
Command-line interface for squeezecloud.

This module implements a small debugging host using Click: it drives the
same entry points a media server would, and prints the resulting menus
and streams. rich-click is used for the output colors.

Commands:
    squeezecloud menu                          Print the top-level menu
    squeezecloud browse <kind> [options]       Fetch one page of a listing
    squeezecloud dump <kind> --count N         Page through N items
    squeezecloud play <uri>                    Resolve a play URI to a CDN URL
    squeezecloud resolve <url>                 Resolve a pasted soundcloud.com link

Options:
    --config <path>                            Config file (default: ./config.yaml)
    --verbose                                  Debug logging on the console
    --version                                  Show version and exit

Usage:
    squeezecloud browse tracks --order hotness --limit 10
    squeezecloud browse tags --search ambient
    squeezecloud browse friends --offset 3 --limit 1
    squeezecloud dump favorites --count 400
    squeezecloud play soundcloud://123456
    squeezecloud resolve "https://soundcloud.com/artist/sets/playlist"

Configuration:
    Reads config.yaml from the current directory when present. The API key
    can also come from SQUEEZECLOUD_API_KEY (or a .env file).
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import rich_click as click
from tqdm import tqdm

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "squeezecloud browse": [
        {
            "name": "Paging",
            "options": ["--offset", "--limit"],
        },
        {
            "name": "Filters",
            "options": ["--search", "--user", "--playlist", "--order"],
        },
    ],
}

from squeezecloud import __version__
from squeezecloud.api import BrowseKind, BrowseRequest
from squeezecloud.browse import MenuEntry, Page
from squeezecloud.core import (
    Config,
    ConfigError,
    PlaybackError,
    SqueezeCloudError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from squeezecloud.service import SqueezeCloud

logger = get_logger(__name__)


KIND_CHOICES = [kind.value for kind in BrowseKind]


@click.group(invoke_without_command=True)
@click.option(
    "--config", "config_path",
    type=click.Path(path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show debug logging"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    verbose: bool,
    version: bool
) -> None:
    """
    squeezecloud: Browse SoundCloud and resolve streams for a media host.

    \b
    EXAMPLES:
        squeezecloud menu
        squeezecloud browse tracks --order hotness --limit 10
        squeezecloud play soundcloud://123456
    """
    if version:
        click.echo(f"squeezecloud {__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    level = "DEBUG" if verbose else config.logging.level
    setup_logging(config.logging.directory, console_level=level)
    ctx.call_on_close(shutdown_logging)
    ctx.obj = config


@cli.command()
@click.pass_obj
def menu(config: Config) -> None:
    """Print the top-level menu."""
    service = SqueezeCloud(config)
    for index, entry in enumerate(service.top_level_menu()):
        click.echo(_format_entry(index, entry))


@cli.command()
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@click.option("--offset", type=int, default=None, help="Index of the first item")
@click.option("--limit", type=int, default=20, show_default=True, help="Page size")
@click.option("--search", type=str, default=None, help="Search text, tag or URL")
@click.option("--user", "user_id", type=str, default=None, help="User id")
@click.option("--playlist", "playlist_id", type=str, default=None, help="Playlist id")
@click.option(
    "--order",
    type=click.Choice(["hotness", "created_at"]),
    default=None,
    help="Sort order for track listings"
)
@click.pass_obj
def browse(
    config: Config,
    kind: str,
    offset: Optional[int],
    limit: int,
    search: Optional[str],
    user_id: Optional[str],
    playlist_id: Optional[str],
    order: Optional[str]
) -> None:
    """Fetch one page of a listing."""
    request = BrowseRequest(
        kind=BrowseKind(kind),
        offset=offset,
        limit=limit,
        search_text=search,
        user_id=user_id,
        playlist_id=playlist_id,
        order_params=(("order", order),) if order else (),
    )
    page = _run(config, lambda service: service.browse(request))
    _print_page(page)


@cli.command()
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@click.option("--count", type=int, default=200, show_default=True, help="Number of items to fetch")
@click.option("--search", type=str, default=None, help="Search text or tag")
@click.option("--user", "user_id", type=str, default=None, help="User id")
@click.pass_obj
def dump(
    config: Config,
    kind: str,
    count: int,
    search: Optional[str],
    user_id: Optional[str]
) -> None:
    """Page through a listing the way a host does."""
    request = BrowseRequest(kind=BrowseKind(kind), search_text=search, user_id=user_id)
    entries = _run(config, lambda service: _dump(service, request, count))
    for index, entry in enumerate(entries):
        click.echo(_format_entry(index, entry))


@cli.command()
@click.argument("uri")
@click.pass_obj
def play(config: Config, uri: str) -> None:
    """Resolve a play URI into its CDN stream URL."""
    try:
        stream = _run(config, lambda service: service.resolve_playback(uri))
    except PlaybackError as e:
        click.echo(f"Playback failed ({e.kind.value}): {e.message}", err=True)
        sys.exit(1)

    metadata = stream.metadata
    click.echo(f"{metadata.title} - {metadata.artist} ({metadata.duration_seconds:.0f}s)")
    click.echo(stream.stream_url)


@cli.command()
@click.argument("url")
@click.pass_obj
def resolve(config: Config, url: str) -> None:
    """Resolve a pasted soundcloud.com link."""
    page = _run(config, lambda service: service.resolve_catalog_url(url))
    _print_page(page)


async def _dump(service: SqueezeCloud, request: BrowseRequest, count: int) -> list[MenuEntry]:
    entries: list[MenuEntry] = []
    page_size = service.config.paging.max_items_per_call

    with tqdm(total=count, desc=f"Fetching {request.kind.value}", unit="item") as progress:
        while len(entries) < count:
            page = await service.browse(
                request.at(len(entries), min(page_size, count - len(entries)))
            )
            if not page.items:
                break
            entries.extend(page.items)
            progress.update(len(page.items))
            if len(entries) >= page.total:
                break

    return entries[:count]


def _run(config: Config, operation):
    """Run `operation(service)` on a fresh event loop and return its result."""
    async def runner():
        async with SqueezeCloud(config) as service:
            return await operation(service)

    try:
        return asyncio.run(runner())
    except PlaybackError:
        raise
    except SqueezeCloudError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)


def _format_entry(index: int, entry: MenuEntry) -> str:
    line = f"{index:4d}  [{entry.kind.value:8s}] {entry.name}"
    if entry.play_uri:
        line += f"  <{entry.play_uri}>"
    return line


def _print_page(page: Page) -> None:
    for index, entry in enumerate(page.items, start=page.offset):
        click.echo(_format_entry(index, entry))
        for child in entry.children:
            click.echo("      " + _format_entry(0, child).lstrip())
    click.echo(f"-- offset {page.offset}, {len(page.items)} items, total {page.total}")


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `squeezecloud` from the command
    line. It invokes the Click CLI group.
    """
    cli()


if __name__ == "__main__":
    main()
