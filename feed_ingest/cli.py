"""Command line interface for feed_ingest.

Each command opens the database, runs one async operation and closes the
connection again before returning.
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Optional

import click

from feed_ingest.config import get_config, load_config, set_config
from feed_ingest.errors import (
    DatabaseInitError,
    DuplicateFeedError,
    TitleValidationError,
    URLValidationError,
)
from feed_ingest.logging_config import setup_logging
from feed_ingest.models.schemas import Feed
from feed_ingest.services.sanitizer import (
    sanitize_title,
    to_display,
    truncate_description,
    validate_title,
)
from feed_ingest.services.sync import subscribe, sync_feeds
from feed_ingest.storage import database


def _run(operation: Awaitable[Any]) -> Any:
    """Run an async operation, closing the database afterwards."""
    async def runner():
        try:
            return await operation
        finally:
            await database.close_database()

    try:
        return asyncio.run(runner())
    except DatabaseInitError as e:
        raise click.ClickException(f"database error: {e}") from e


@click.group()
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database file (overrides FEED_INGEST_DB_PATH)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (overrides FEED_INGEST_LOG_LEVEL)",
)
def cli(db_path: Optional[Path], log_level: Optional[str]) -> None:
    """Manage feed subscriptions and sync their posts."""
    try:
        config = load_config()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if db_path is not None:
        config.db_path = db_path
    if log_level is not None:
        config.log_level = log_level.upper()

    set_config(config)
    setup_logging(config)


@cli.command()
@click.argument("url")
@click.option("--title", default="", help="Display title for the feed")
def add(url: str, title: str) -> None:
    """Subscribe to a feed URL."""
    try:
        feed = _run(subscribe(url, title))
    except (URLValidationError, DuplicateFeedError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Added feed {feed.id}: {feed.url}")


@cli.command(name="list")
def list_feeds() -> None:
    """List subscriptions."""
    feeds = _run(database.get_feeds())

    if not feeds:
        click.echo("No feeds.")
        return

    for feed in feeds:
        click.echo(f"{feed.id}\t{feed.title or '(untitled)'}\t{feed.url}")


@cli.command()
@click.argument("feed_id", type=int)
def remove(feed_id: int) -> None:
    """Remove a subscription and its posts."""
    _run(database.delete_feed(feed_id))
    click.echo(f"Removed feed {feed_id}")


@cli.command()
@click.argument("feed_id", type=int)
@click.argument("title")
def rename(feed_id: int, title: str) -> None:
    """Change the display title of a subscription."""
    try:
        validate_title(title)
    except TitleValidationError as e:
        raise click.ClickException(str(e)) from e

    async def do_rename() -> Optional[Feed]:
        feed = await database.get_feed(feed_id)
        if feed is None:
            return None
        feed.title = sanitize_title(title)
        await database.update_feed(feed)
        return feed

    feed = _run(do_rename())
    if feed is None:
        raise click.ClickException(f"Feed {feed_id} not found")

    click.echo(f"Renamed feed {feed_id} to {feed.title!r}")


@cli.command()
def sync() -> None:
    """Fetch every subscription and store new posts."""
    results = _run(sync_feeds())

    click.echo(f"Updated {len(results)} feeds")
    for result in results:
        name = result.title or result.url
        if result.ok:
            click.echo(f"OK   {name} ({result.new_posts} new posts)")
        else:
            click.echo(f"FAIL {name}: {result.error}")


@cli.command()
@click.argument("feed_id", type=int)
@click.option("--unread", is_flag=True, help="Only show unread posts")
def posts(feed_id: int, unread: bool) -> None:
    """Show the posts of a subscription."""
    post_list = _run(database.get_posts(feed_id, include_read=not unread))
    preview_length = get_config().preview_length

    if not post_list:
        click.echo("No posts.")
        return

    for post in post_list:
        marker = " " if post.read else "*"
        click.echo(f"{marker} {post.id}\t{post.title}\t{post.link}")
        preview = to_display(truncate_description(post.content, preview_length))
        if preview:
            click.echo(f"    {preview}")


@cli.command()
@click.argument("post_id", type=int)
@click.option("--unread", is_flag=True, help="Mark as unread instead")
def read(post_id: int, unread: bool) -> None:
    """Mark a post as read."""
    if unread:
        post = _run(database.mark_post_unread(post_id))
    else:
        post = _run(database.mark_post_read(post_id))

    if post is None:
        raise click.ClickException(f"Post {post_id} not found")

    click.echo(f"Post {post_id} marked {'read' if post.read else 'unread'}")


def main() -> None:
    """Console script entry point."""
    cli()
