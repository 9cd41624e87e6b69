"""Controllers for kiwi-feed CLI commands."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from kiwi_feed.config import Settings
from kiwi_feed.context import open_feed
from kiwi_feed.errors import KiwiFeedError
from kiwi_feed.feed.models import CommentView, NewestSubmissionView, SubmissionView, UpvoteView

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class InitDbCommand:
    """CLI inputs for schema bootstrap."""

    db_path: Path | None


@dataclass(slots=True)
class IngestCommand:
    """CLI inputs for JSON-lines message ingestion."""

    db_path: Path | None
    lines: Iterable[str]


@dataclass(slots=True)
class IdentityFeedCommand:
    """CLI inputs for per-identity activity feeds."""

    db_path: Path | None
    identity: str
    output_format: str = "text"


@dataclass(slots=True)
class SubmissionCommand:
    """CLI inputs for one submission view."""

    db_path: Path | None
    index: str
    output_format: str = "text"


@dataclass(slots=True)
class NewestCommand:
    """CLI inputs for the newest submissions listing."""

    db_path: Path | None
    output_format: str = "text"


@dataclass(slots=True)
class IngestResult:
    """Ingestion outcome; ``error`` is set when a line was rejected."""

    lines: list[str] = field(default_factory=list)
    error: str | None = None


class FeedCliController:
    """Coordinates feed command execution."""

    def init_db(self, command: InitDbCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with open_feed(settings) as feed:
            created = feed.schema_created
        state = "created" if created else "already present"
        return [f"Schema {state}: db={settings.db_path}"]

    def ingest(self, command: IngestCommand) -> IngestResult:
        settings = Settings.from_env(db_path=command.db_path)
        ingested = 0
        with open_feed(settings) as feed:
            for line_no, raw_line in enumerate(command.lines, start=1):
                line = raw_line.strip()
                if not line:
                    continue
                try:
                    payload = json.loads(line)
                except json.JSONDecodeError as error:
                    return _ingest_failure(ingested, line_no, f"invalid JSON: {error.msg}")
                if not isinstance(payload, dict):
                    return _ingest_failure(ingested, line_no, "message must be a JSON object")
                try:
                    feed.classifier.insert_message(payload)
                except KiwiFeedError as error:
                    return _ingest_failure(ingested, line_no, str(error))
                ingested += 1

        return IngestResult(lines=[f"Ingested messages: {ingested}"])

    def upvotes(self, command: IdentityFeedCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with open_feed(settings) as feed:
            upvotes = feed.reader.get_upvotes(command.identity)

        if command.output_format == "json":
            return [_dump_json({"upvotes": [asdict(view) for view in upvotes]})]

        lines = [f"Upvotes for {command.identity}: {len(upvotes)}"]
        lines.extend(_upvote_line(view) for view in upvotes)
        return lines

    def comments(self, command: IdentityFeedCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with open_feed(settings) as feed:
            comments = feed.reader.get_comments(command.identity)

        if command.output_format == "json":
            return [_dump_json({"comments": [asdict(view) for view in comments]})]

        lines = [f"Comments for {command.identity}: {len(comments)}"]
        lines.extend(_comment_line(view) for view in comments)
        return lines

    def submission(self, command: SubmissionCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with open_feed(settings) as feed:
            view = feed.reader.get_submission(command.index)

        if command.output_format == "json":
            return [_dump_json(asdict(view))]
        return _submission_lines(view)

    def newest(self, command: NewestCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with open_feed(settings) as feed:
            submissions = feed.reader.list_newest()

        if command.output_format == "json":
            return [_dump_json({"submissions": [asdict(view) for view in submissions]})]

        lines = [f"Newest submissions: {len(submissions)}"]
        lines.extend(_newest_line(view) for view in submissions)
        return lines


def _ingest_failure(ingested: int, line_no: int, reason: str) -> IngestResult:
    logger.warning("Ingestion stopped at line %d: %s", line_no, reason)
    return IngestResult(
        lines=[f"Ingested messages: {ingested}"],
        error=f"Line {line_no}: {reason}",
    )


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _upvote_line(view: UpvoteView) -> str:
    return (
        f"  index={view.index} timestamp={view.timestamp} "
        f"identity={view.identity} href={view.href}"
    )


def _comment_line(view: CommentView) -> str:
    return (
        f"  index={view.index} timestamp={view.timestamp} identity={view.identity} "
        f"on={view.href} submission={view.submission_title!r} text={view.title!r}"
    )


def _newest_line(view: NewestSubmissionView) -> str:
    return (
        f"  index={view.index} upvotes={view.upvotes} timestamp={view.timestamp} "
        f"identity={view.identity} title={view.title!r} href={view.href}"
    )


def _submission_lines(view: SubmissionView) -> list[str]:
    lines = [
        f"Submission {view.index}: {view.title!r}",
        f"  href={view.href}",
        f"  identity={view.identity} timestamp={view.timestamp} upvotes={view.upvotes}",
        "  upvoters: "
        + ", ".join(f"{upvoter.identity}@{upvoter.timestamp}" for upvoter in view.upvoters),
        f"  comments: {len(view.comments)}",
    ]
    lines.extend(
        f"    index={comment.index} timestamp={comment.timestamp} "
        f"identity={comment.identity} text={comment.title!r}"
        for comment in view.comments
    )
    return lines
