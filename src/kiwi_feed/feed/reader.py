"""Aggregation reader: windowed activity feeds and per-submission views."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Sequence

from sqlalchemy import literal_column
from sqlalchemy.orm import aliased
from sqlmodel import col, select

from kiwi_feed.config import THREE_WEEKS_SECONDS
from kiwi_feed.errors import InvalidItemId, SubmissionNotFound
from kiwi_feed.feed.models import (
    CommentView,
    NewestSubmissionView,
    SubmissionView,
    ThreadComment,
    Upvoter,
    UpvoteView,
)
from kiwi_feed.identifiers import DEFAULT_NAMESPACE, ItemId, derived_index
from kiwi_feed.storage.common import epoch_now
from kiwi_feed.storage.sqlmodel_models import Comment, Submission, Upvote
from kiwi_feed.storage.store import KiwiStore

logger = logging.getLogger(__name__)
DEFAULT_NEWEST_LIMIT = 30

# Storage (insertion) order for rows keyed by text ids.
_SUBMISSION_ROWID = literal_column("submissions.rowid")
_UPVOTE_ROWID = literal_column("upvotes.rowid")
_COMMENT_ROWID = literal_column("comments.rowid")


class AggregationReader:
    """Read-only queries over the feed store.

    Every call computes its window start from the injected clock, so results
    slide forward with wall time while stored rows stay untouched.
    """

    def __init__(
        self,
        store: KiwiStore,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        window_seconds: int = THREE_WEEKS_SECONDS,
        newest_limit: int = DEFAULT_NEWEST_LIMIT,
        clock: Callable[[], int] = epoch_now,
    ) -> None:
        self.store = store
        self.namespace = namespace
        self.window_seconds = window_seconds
        self.newest_limit = newest_limit
        self.clock = clock

    def window_start(self) -> int:
        return self.clock() - self.window_seconds

    def get_upvotes(self, identity: str) -> list[UpvoteView]:
        """Upvotes on submissions authored by ``identity`` inside the window."""

        window_start = self.window_start()
        with self.store.session() as session:
            rows = session.exec(
                select(Upvote)
                .join(Submission, col(Upvote.href) == col(Submission.href))
                .where(
                    Submission.identity == identity,
                    Submission.timestamp >= window_start,
                )
                .order_by(_UPVOTE_ROWID),
            ).all()

        return [
            UpvoteView(
                id=row.id,
                index=derived_index(row.id),
                href=row.href,
                title=row.title,
                timestamp=row.timestamp,
                signer=row.signer,
                identity=row.identity,
            )
            for row in rows
        ]

    def get_comments(self, identity: str) -> list[CommentView]:
        """Replies to ``identity``: comments on its submissions and in threads it joined.

        A thread counts as joined when ``identity`` commented on it inside the
        window; candidate comments are then filtered by their own timestamp
        only. Comments matching both conditions are returned once.
        """

        window_start = self.window_start()
        own_comment = aliased(Comment)
        joined_threads = select(own_comment.submission_id).where(
            own_comment.identity == identity,
            own_comment.timestamp >= window_start,
        )

        with self.store.session() as session:
            on_own_submissions = session.exec(
                select(Comment, Submission.title)
                .join(Submission, col(Comment.submission_id) == col(Submission.id))
                .where(
                    Submission.identity == identity,
                    Comment.identity != identity,
                    Comment.timestamp >= window_start,
                )
                .order_by(_COMMENT_ROWID),
            ).all()
            in_joined_threads = session.exec(
                select(Comment, Submission.title)
                .join(Submission, col(Comment.submission_id) == col(Submission.id))
                .where(
                    col(Comment.submission_id).in_(joined_threads),
                    Comment.identity != identity,
                    Comment.timestamp >= window_start,
                )
                .order_by(_COMMENT_ROWID),
            ).all()

        merged: dict[str, CommentView] = {}
        for comment, submission_title in [*on_own_submissions, *in_joined_threads]:
            merged[comment.id] = CommentView(
                id=comment.id,
                index=derived_index(comment.id),
                href=comment.submission_id,
                title=comment.title,
                timestamp=comment.timestamp,
                signer=comment.signer,
                identity=comment.identity,
                submission_title=submission_title,
            )
        return sorted(merged.values(), key=lambda view: view.timestamp)

    def get_submission(self, index: str | int) -> SubmissionView:
        try:
            item_id = ItemId.for_index(self.namespace, index).encode()
        except InvalidItemId as error:
            raise SubmissionNotFound(index) from error

        with self.store.session() as session:
            submission = session.get(Submission, item_id)
            if submission is None:
                logger.debug("Submission lookup missed for %s.", item_id)
                raise SubmissionNotFound(index)

            upvotes = session.exec(
                select(Upvote).where(Upvote.href == submission.href).order_by(_UPVOTE_ROWID),
            ).all()
            comments = session.exec(
                select(Comment)
                .where(Comment.submission_id == submission.id)
                .order_by(col(Comment.timestamp), _COMMENT_ROWID),
            ).all()

        return SubmissionView(
            index=derived_index(submission.id),
            href=submission.href,
            title=submission.title,
            timestamp=submission.timestamp,
            signer=submission.signer,
            identity=submission.identity,
            upvotes=len(upvotes) + 1,
            upvoters=[
                Upvoter(identity=submission.identity, timestamp=submission.timestamp),
                *(Upvoter(identity=row.identity, timestamp=row.timestamp) for row in upvotes),
            ],
            comments=[_thread_comment(row) for row in comments],
        )

    def list_newest(self) -> list[NewestSubmissionView]:
        """Most recent submissions, newest first, with upvote tallies."""

        with self.store.session() as session:
            submissions = session.exec(
                select(Submission)
                .order_by(col(Submission.timestamp).desc(), _SUBMISSION_ROWID.desc())
                .limit(self.newest_limit),
            ).all()
            upvoters_by_href = _upvoter_identities(
                session.exec(
                    select(Upvote.href, Upvote.identity)
                    .where(col(Upvote.href).in_([row.href for row in submissions]))
                    .order_by(_UPVOTE_ROWID),
                ).all(),
            )

        views: list[NewestSubmissionView] = []
        for submission in submissions:
            upvoters = upvoters_by_href.get(submission.href, [])
            views.append(
                NewestSubmissionView(
                    index=derived_index(submission.id),
                    href=submission.href,
                    title=submission.title,
                    timestamp=submission.timestamp,
                    signer=submission.signer,
                    identity=submission.identity,
                    upvotes=len(upvoters) + 1,
                    upvoters=[submission.identity, *upvoters],
                ),
            )
        return views


def _thread_comment(row: Comment) -> ThreadComment:
    return ThreadComment(
        index=derived_index(row.id),
        submission_id=row.submission_id,
        title=row.title,
        timestamp=row.timestamp,
        signer=row.signer,
        identity=row.identity,
    )


def _upvoter_identities(rows: Sequence[tuple[str, str]]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = defaultdict(list)
    for href, identity in rows:
        grouped[href].append(identity)
    return grouped
