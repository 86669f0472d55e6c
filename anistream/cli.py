"""CLI entry point for serving and inspecting stream files."""

import json
import logging
import sys
from pathlib import Path

import click

from .config import ServerConfig
from .errors import AnistreamError, InvalidPageError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

stream_dir_option = click.option(
    "--stream-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the NNNNNNNNN.json stream files (default: $ANISTREAM_STREAM_DIR or ./stream)",
)


def _load_config(**overrides) -> ServerConfig:
    try:
        config = ServerConfig.from_env(**overrides)
    except AnistreamError as e:
        raise click.UsageError(str(e))

    logging.basicConfig(level=getattr(logging, config.log_level), format=LOG_FORMAT)
    return config


@click.group()
def cli():
    """anistream - Anime episode stream browser."""
    pass


@cli.command("serve")
@stream_dir_option
@click.option("--port", default=None, type=int, help="Port to run the server on (default: 3000)")
@click.option("--host", default=None, help="Host to bind to (default: 0.0.0.0)")
@click.option("--debug/--no-debug", default=False, help="Run Flask in debug mode")
@click.option(
    "--cache/--no-cache",
    default=None,
    help="Reuse aggregated episodes until a stream file changes (default: off)",
)
def serve(stream_dir: Path | None, port: int | None, host: str | None, debug: bool, cache: bool | None):
    """Start the episode browser web server.

    Examples:

        anistream serve

        anistream serve --port 8080 --stream-dir data/stream
    """
    from .server import run_server

    config = _load_config(stream_dir=stream_dir, port=port, host=host, cache=cache)
    run_server(config, debug=debug)


@cli.command("episodes")
@stream_dir_option
@click.option("--page", "page_raw", default=None, help="Page number to show (default: 1)")
def episodes(stream_dir: Path | None, page_raw: str | None):
    """List aggregated episodes, one page at a time.

    Examples:

        anistream episodes

        anistream episodes --page 3
    """
    from .utils.pagination import paginate, parse_page
    from .utils.stream_files import StreamStore

    try:
        page_number = parse_page(page_raw)
    except InvalidPageError:
        raise click.BadParameter("page must be a positive integer", param_hint="--page")

    config = _load_config(stream_dir=stream_dir)
    store = StreamStore(config.stream_dir, read_workers=config.read_workers)

    try:
        page = paginate(store.episodes(), page_number, config.items_per_page)
    except AnistreamError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for position, episode in enumerate(page.items, start=page.first_index + 1):
        click.echo(
            f"[{position}] {episode.display_title} "
            f"(id={episode.id}, slug={episode.slug or '-'}, {len(episode.servers)} servers)"
        )
    click.echo(f"\nPage {page.page} of {page.total_pages} ({page.total_items} episodes)")


@cli.command("show")
@click.argument("identifier")
@stream_dir_option
def show(identifier: str, stream_dir: Path | None):
    """Print one episode as JSON, looked up by id or slug.

    Examples:

        anistream show 42

        anistream show one-piece-episode-1
    """
    from .processors.episodes import locate, navigate
    from .utils.stream_files import StreamStore

    config = _load_config(stream_dir=stream_dir)
    store = StreamStore(config.stream_dir, read_workers=config.read_workers)

    try:
        all_episodes = store.episodes()
    except AnistreamError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    episode = locate(identifier, all_episodes)
    if episode is None:
        click.echo(f"Error: Episode '{identifier}' not found", err=True)
        sys.exit(1)

    navigation = navigate(episode, all_episodes)
    click.echo(json.dumps(episode.to_json(), indent=2, ensure_ascii=False))
    click.echo(f"previous: {navigation.previous.link_identifier if navigation.previous else '-'}")
    click.echo(f"next: {navigation.next.link_identifier if navigation.next else '-'}")
