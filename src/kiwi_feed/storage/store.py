"""SQLite store handle shared by the classifier and the reader."""

from __future__ import annotations

import logging
import sqlite3
from functools import cached_property
from pathlib import Path

from sqlalchemy import inspect
from sqlmodel import Session

from kiwi_feed.errors import SchemaConflict
from kiwi_feed.storage.alembic_runner import upgrade_head
from kiwi_feed.storage.common import build_sqlite_engine, connect_sqlite_with_policy
from kiwi_feed.storage.sqlmodel_models import FEED_TABLES

logger = logging.getLogger(__name__)
DEFAULT_BUSY_TIMEOUT_MS = 5_000


class KiwiStore:
    """Owns the SQLAlchemy engine for one feed database file."""

    def __init__(self, db_path: Path, *, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS) -> None:
        self.db_path = db_path
        self.busy_timeout_ms = busy_timeout_ms
        self.engine = build_sqlite_engine(db_path=db_path, busy_timeout_ms=busy_timeout_ms)

    @cached_property
    def _connection(self) -> sqlite3.Connection:
        """Low-level connection for tests and ad-hoc debugging queries, opened on first use."""

        return connect_sqlite_with_policy(
            db_path=self.db_path,
            busy_timeout_ms=self.busy_timeout_ms,
        )

    def close(self) -> None:
        connection = self.__dict__.pop("_connection", None)
        if connection is not None:
            connection.close()
        self.engine.dispose()

    def session(self) -> Session:
        return Session(self.engine)

    def existing_tables(self) -> set[str]:
        return set(inspect(self.engine).get_table_names()) & set(FEED_TABLES)

    def init_schema(self) -> bool:
        """Create the feed tables unless all of them already exist.

        Returns True when the schema was created by this call.
        """

        existing = self.existing_tables()
        if len(existing) == len(FEED_TABLES):
            logger.info("Feed schema already present in %s; skipping creation.", self.db_path)
            return False
        if existing:
            missing = sorted(set(FEED_TABLES) - existing)
            raise SchemaConflict(
                f"Partial feed schema in {self.db_path}: "
                f"found {sorted(existing)}, missing {missing}.",
            )

        upgrade_head(self.db_path)
        logger.info("Created feed schema in %s.", self.db_path)
        return True
