"""Typed views returned by the aggregation reader."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class UpvoteView:
    """Upvote on one of the reader's own submissions."""

    id: str
    index: str
    href: str
    title: str
    timestamp: int
    signer: str
    identity: str


@dataclass(slots=True)
class CommentView:
    """Comment in an identity's activity feed.

    ``href`` holds the commented submission's id.
    """

    id: str
    index: str
    href: str
    title: str
    timestamp: int
    signer: str
    identity: str
    submission_title: str


@dataclass(slots=True)
class Upvoter:
    identity: str
    timestamp: int


@dataclass(slots=True)
class ThreadComment:
    """Comment shown under a single submission."""

    index: str
    submission_id: str
    title: str
    timestamp: int
    signer: str
    identity: str
    type: str = "comment"


@dataclass(slots=True)
class SubmissionView:
    """One submission with its upvotes and comment thread."""

    index: str
    href: str
    title: str
    timestamp: int
    signer: str
    identity: str
    upvotes: int
    upvoters: list[Upvoter] = field(default_factory=list)
    comments: list[ThreadComment] = field(default_factory=list)


@dataclass(slots=True)
class NewestSubmissionView:
    """Submission row of the newest listing."""

    index: str
    href: str
    title: str
    timestamp: int
    signer: str
    identity: str
    upvotes: int
    upvoters: list[str] = field(default_factory=list)
