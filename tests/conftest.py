"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from kiwi_feed.feed.reader import AggregationReader
from kiwi_feed.ingestion.classifier import MessageClassifier
from kiwi_feed.storage.store import KiwiStore

FIXED_NOW = 1_760_000_000


class FixedClock:
    """Settable clock injected into the reader."""

    def __init__(self, now: int = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture()
def store(tmp_path: Path) -> Iterator[KiwiStore]:
    store = KiwiStore(tmp_path / "feed.db")
    store.init_schema()
    yield store
    store.close()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def classifier(store: KiwiStore) -> MessageClassifier:
    return MessageClassifier(store)


@pytest.fixture()
def reader(store: KiwiStore, clock: FixedClock) -> AggregationReader:
    return AggregationReader(store, clock=clock)
