"""CLI entrypoint for kiwi-feed."""

from collections.abc import Callable
from pathlib import Path
from typing import TextIO, TypeVar

import rich_click as click

from kiwi_feed import __version__
from kiwi_feed.controllers import (
    FeedCliController,
    IdentityFeedCommand,
    IngestCommand,
    InitDbCommand,
    NewestCommand,
    SubmissionCommand,
)
from kiwi_feed.errors import KiwiFeedError

click.rich_click.USE_MARKDOWN = True
FEED_CONTROLLER = FeedCliController()
T = TypeVar("T")

db_path_option = click.option(
    "--db-path",
    type=click.Path(path_type=Path),
    default=None,
    help="SQLite DB path. Defaults to KIWI_FEED_DB_PATH or $CACHE_DIR/database.db.",
)
format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format.",
)


@click.group()
@click.version_option(version=__version__, prog_name="kiwi-feed")
def kiwi_feed() -> None:
    """Kiwi feed store CLI."""


@kiwi_feed.group()
def db() -> None:
    """Database commands."""


@db.command("init")
@db_path_option
def db_init(db_path: Path | None) -> None:
    """Create the submissions, upvotes and comments tables if missing."""

    _emit_lines(_run(FEED_CONTROLLER.init_db, InitDbCommand(db_path=db_path)))


@kiwi_feed.command("ingest")
@db_path_option
@click.argument("messages", type=click.File("r", encoding="utf-8"))
def ingest(db_path: Path | None, messages: TextIO) -> None:
    """Insert verified messages from a JSON-lines file (`-` for stdin).

    Stops at the first rejected message.
    """

    result = FEED_CONTROLLER.ingest(IngestCommand(db_path=db_path, lines=messages))
    _emit_lines(result.lines)
    if result.error is not None:
        raise click.ClickException(result.error)


@kiwi_feed.group()
def feed() -> None:
    """Read-side feed queries."""


@feed.command("upvotes")
@db_path_option
@format_option
@click.argument("identity")
def feed_upvotes(db_path: Path | None, output_format: str, identity: str) -> None:
    """Upvotes received on IDENTITY's submissions within the window."""

    _emit_lines(
        _run(
            FEED_CONTROLLER.upvotes,
            IdentityFeedCommand(
                db_path=db_path,
                identity=identity,
                output_format=output_format.lower(),
            ),
        ),
    )


@feed.command("comments")
@db_path_option
@format_option
@click.argument("identity")
def feed_comments(db_path: Path | None, output_format: str, identity: str) -> None:
    """Comments addressed to IDENTITY within the window."""

    _emit_lines(
        _run(
            FEED_CONTROLLER.comments,
            IdentityFeedCommand(
                db_path=db_path,
                identity=identity,
                output_format=output_format.lower(),
            ),
        ),
    )


@feed.command("submission")
@db_path_option
@format_option
@click.argument("index")
def feed_submission(db_path: Path | None, output_format: str, index: str) -> None:
    """Show one submission with upvoters and comments."""

    _emit_lines(
        _run(
            FEED_CONTROLLER.submission,
            SubmissionCommand(db_path=db_path, index=index, output_format=output_format.lower()),
        ),
    )


@feed.command("newest")
@db_path_option
@format_option
def feed_newest(db_path: Path | None, output_format: str) -> None:
    """List the newest submissions."""

    _emit_lines(
        _run(
            FEED_CONTROLLER.newest,
            NewestCommand(db_path=db_path, output_format=output_format.lower()),
        ),
    )


def _run(handler: Callable[[T], list[str]], command: T) -> list[str]:
    try:
        return handler(command)
    except KiwiFeedError as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    kiwi_feed()
