from __future__ import annotations

from pathlib import Path

import allure
import pytest

from kiwi_feed.config import THREE_WEEKS_SECONDS, Settings

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Environment Settings"),
]

_ENV_VARS = (
    "KIWI_FEED_DB_PATH",
    "CACHE_DIR",
    "KIWI_FEED_ID_NAMESPACE",
    "KIWI_FEED_SQLITE_BUSY_TIMEOUT_MS",
    "KIWI_FEED_WINDOW_SECONDS",
    "KIWI_FEED_NEWEST_LIMIT",
    "KIWI_FEED_CACHE_TTL_SECONDS",
    "KIWI_FEED_CACHE_MAX_KEYS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_from_env_defaults() -> None:
    settings = Settings.from_env()

    assert settings.db_path == Path(".kiwi_feed.db")
    assert settings.id_namespace == "kiwi"
    assert settings.sqlite_busy_timeout_ms == 5_000
    assert settings.feed.window_seconds == THREE_WEEKS_SECONDS
    assert settings.feed.newest_limit == 30
    assert settings.cache.std_ttl_seconds == 0
    assert settings.cache.max_keys == 0


def test_db_path_prefers_explicit_then_env_then_cache_dir(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("CACHE_DIR", str(tmp_path / "cache"))
    assert Settings.from_env().db_path == tmp_path / "cache" / "database.db"

    monkeypatch.setenv("KIWI_FEED_DB_PATH", str(tmp_path / "env.db"))
    assert Settings.from_env().db_path == tmp_path / "env.db"

    assert Settings.from_env(db_path=tmp_path / "cli.db").db_path == tmp_path / "cli.db"


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KIWI_FEED_ID_NAMESPACE", " test ")
    monkeypatch.setenv("KIWI_FEED_WINDOW_SECONDS", "60")
    monkeypatch.setenv("KIWI_FEED_NEWEST_LIMIT", "5")
    monkeypatch.setenv("KIWI_FEED_CACHE_TTL_SECONDS", "30")
    monkeypatch.setenv("KIWI_FEED_CACHE_MAX_KEYS", "100")

    settings = Settings.from_env()

    assert settings.id_namespace == "test"
    assert settings.feed.window_seconds == 60
    assert settings.feed.newest_limit == 5
    assert settings.cache.std_ttl_seconds == 30
    assert settings.cache.max_keys == 100


def test_from_env_rejects_non_integer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KIWI_FEED_NEWEST_LIMIT", "thirty")

    with pytest.raises(ValueError, match="Invalid integer value for KIWI_FEED_NEWEST_LIMIT"):
        Settings.from_env()


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("KIWI_FEED_ID_NAMESPACE", "a:b", "KIWI_FEED_ID_NAMESPACE"),
        ("KIWI_FEED_SQLITE_BUSY_TIMEOUT_MS", "0", "KIWI_FEED_SQLITE_BUSY_TIMEOUT_MS"),
        ("KIWI_FEED_WINDOW_SECONDS", "-5", "KIWI_FEED_WINDOW_SECONDS"),
        ("KIWI_FEED_NEWEST_LIMIT", "0", "KIWI_FEED_NEWEST_LIMIT"),
        ("KIWI_FEED_CACHE_TTL_SECONDS", "-1", "KIWI_FEED_CACHE_TTL_SECONDS"),
        ("KIWI_FEED_CACHE_MAX_KEYS", "-1", "KIWI_FEED_CACHE_MAX_KEYS"),
    ],
)
def test_validate_rejects_out_of_range_values(
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    value: str,
    message: str,
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match=message):
        Settings.from_env()
