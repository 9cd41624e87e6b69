"""Process-level wiring: one store handle shared by classifier and reader."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from kiwi_feed.cache import MemoryCache
from kiwi_feed.config import Settings
from kiwi_feed.feed.reader import AggregationReader
from kiwi_feed.ingestion.classifier import MessageClassifier
from kiwi_feed.storage.common import epoch_now
from kiwi_feed.storage.store import KiwiStore


@dataclass(slots=True)
class FeedContext:
    """Explicit handles passed to callers instead of module-level singletons."""

    store: KiwiStore
    classifier: MessageClassifier
    reader: AggregationReader
    cache: MemoryCache
    schema_created: bool


@contextmanager
def open_feed(
    settings: Settings,
    *,
    clock: Callable[[], int] = epoch_now,
) -> Iterator[FeedContext]:
    store = KiwiStore(settings.db_path, busy_timeout_ms=settings.sqlite_busy_timeout_ms)
    try:
        schema_created = store.init_schema()
        yield FeedContext(
            store=store,
            classifier=MessageClassifier(store, namespace=settings.id_namespace),
            reader=AggregationReader(
                store,
                namespace=settings.id_namespace,
                window_seconds=settings.feed.window_seconds,
                newest_limit=settings.feed.newest_limit,
                clock=clock,
            ),
            cache=MemoryCache(
                std_ttl_seconds=settings.cache.std_ttl_seconds,
                max_keys=settings.cache.max_keys,
            ),
            schema_created=schema_created,
        )
    finally:
        store.close()
