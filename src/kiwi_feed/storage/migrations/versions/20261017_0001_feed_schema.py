"""Submissions, upvotes and comments tables."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "submissions",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("href", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.Integer(), nullable=False),
        sa.Column("signer", sa.Text(), nullable=False),
        sa.Column("identity", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("href"),
    )
    op.create_index("idx_submission_href", "submissions", ["href"])
    op.create_index("idx_submissions_timestamp", "submissions", ["timestamp"])
    op.create_index("idx_submissions_identity", "submissions", ["identity"])

    op.create_table(
        "upvotes",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("href", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("signer", sa.Text(), nullable=False),
        sa.Column("identity", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["href"], ["submissions.href"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_upvotes_submission_href", "upvotes", ["href"])
    op.create_index("idx_upvotes_timestamp", "upvotes", ["timestamp"])
    op.create_index("idx_upvotes_identity", "upvotes", ["identity"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("submission_id", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("signer", sa.Text(), nullable=False),
        sa.Column("identity", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_comments_submission_id", "comments", ["submission_id"])
    op.create_index("idx_comments_timestamp", "comments", ["timestamp"])
    op.create_index("idx_comments_identity", "comments", ["identity"])


def downgrade() -> None:
    op.drop_table("comments")
    op.drop_table("upvotes")
    op.drop_table("submissions")
