"""SQLModel ORM tables for the feed store."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlmodel import Field, SQLModel

FEED_TABLES = ("submissions", "upvotes", "comments")


class Submission(SQLModel, table=True):
    __tablename__ = "submissions"  # type: ignore[bad-override]
    __table_args__ = (
        Index("idx_submission_href", "href"),
        Index("idx_submissions_timestamp", "timestamp"),
        Index("idx_submissions_identity", "identity"),
    )

    id: str = Field(sa_column=Column(Text, primary_key=True, nullable=False))
    href: str = Field(sa_column=Column(Text, nullable=False, unique=True))
    title: str = Field(sa_column=Column(Text, nullable=False))
    timestamp: int = Field(sa_column=Column(Integer, nullable=False))
    signer: str = Field(sa_column=Column(Text, nullable=False))
    identity: str = Field(sa_column=Column(Text, nullable=False))


class Upvote(SQLModel, table=True):
    __tablename__ = "upvotes"  # type: ignore[bad-override]
    __table_args__ = (
        Index("idx_upvotes_submission_href", "href"),
        Index("idx_upvotes_timestamp", "timestamp"),
        Index("idx_upvotes_identity", "identity"),
    )

    id: str = Field(sa_column=Column(Text, primary_key=True, nullable=False))
    href: str = Field(
        sa_column=Column(Text, ForeignKey("submissions.href"), nullable=False),
    )
    timestamp: int = Field(sa_column=Column(Integer, nullable=False))
    title: str = Field(sa_column=Column(Text, nullable=False))
    signer: str = Field(sa_column=Column(Text, nullable=False))
    identity: str = Field(sa_column=Column(Text, nullable=False))


class Comment(SQLModel, table=True):
    __tablename__ = "comments"  # type: ignore[bad-override]
    __table_args__ = (
        Index("idx_comments_submission_id", "submission_id"),
        Index("idx_comments_timestamp", "timestamp"),
        Index("idx_comments_identity", "identity"),
    )

    id: str = Field(sa_column=Column(Text, primary_key=True, nullable=False))
    submission_id: str = Field(
        sa_column=Column(Text, ForeignKey("submissions.id"), nullable=False),
    )
    timestamp: int = Field(sa_column=Column(Integer, nullable=False))
    title: str = Field(sa_column=Column(Text, nullable=False))
    signer: str = Field(sa_column=Column(Text, nullable=False))
    identity: str = Field(sa_column=Column(Text, nullable=False))
