from __future__ import annotations

import json
import time
from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from kiwi_feed import __version__
from kiwi_feed.main import kiwi_feed

pytestmark = [
    allure.epic("CLI"),
    allure.feature("Feed Commands"),
]


def _line(type_: str, index: str, href: str, identity: str, timestamp: int, title: str) -> str:
    return json.dumps(
        {
            "type": type_,
            "href": href,
            "index": index,
            "title": title,
            "timestamp": timestamp,
            "signer": f"signer-{identity}",
            "identity": identity,
            "signature": "0xsig",
        },
    )


@pytest.fixture()
def db_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.delenv("KIWI_FEED_DB_PATH", raising=False)
    monkeypatch.delenv("CACHE_DIR", raising=False)
    return tmp_path / "cli.db"


def _ingest_sample(runner: CliRunner, db_path: Path) -> None:
    now = int(time.time())
    messages = "\n".join(
        [
            _line("amplify", "1", "https://Example.com/story/", "0xI1", now - 100, "Story"),
            _line("amplify", "2", "https://example.com/story", "0xI2", now - 90, "Story"),
            "",
            _line("comment", "3", "kiwi:0x1", "0xI3", now - 80, "Nice find"),
        ],
    )
    result = runner.invoke(kiwi_feed, ["ingest", "--db-path", str(db_path), "-"], input=messages)
    assert result.exit_code == 0, result.output
    assert "Ingested messages: 3" in result.output


def test_version_option() -> None:
    result = CliRunner().invoke(kiwi_feed, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_db_init_reports_created_then_present(db_path: Path) -> None:
    runner = CliRunner()

    first = runner.invoke(kiwi_feed, ["db", "init", "--db-path", str(db_path)])
    second = runner.invoke(kiwi_feed, ["db", "init", "--db-path", str(db_path)])

    assert first.exit_code == 0
    assert f"Schema created: db={db_path}" in first.output
    assert second.exit_code == 0
    assert f"Schema already present: db={db_path}" in second.output


def test_db_path_falls_back_to_env(db_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KIWI_FEED_DB_PATH", str(db_path))

    result = CliRunner().invoke(kiwi_feed, ["db", "init"])

    assert result.exit_code == 0
    assert db_path.exists()


def test_feed_submission_text_and_json(db_path: Path) -> None:
    runner = CliRunner()
    _ingest_sample(runner, db_path)

    text = runner.invoke(kiwi_feed, ["feed", "submission", "1", "--db-path", str(db_path)])
    assert text.exit_code == 0, text.output
    assert "Submission 1: 'Story'" in text.output
    assert "href=https://example.com/story" in text.output
    assert "upvotes=2" in text.output
    assert "comments: 1" in text.output

    raw = runner.invoke(
        kiwi_feed,
        ["feed", "submission", "1", "--db-path", str(db_path), "--format", "json"],
    )
    assert raw.exit_code == 0, raw.output
    payload = json.loads(raw.output)
    assert payload["upvotes"] == 2
    assert [upvoter["identity"] for upvoter in payload["upvoters"]] == ["0xI1", "0xI2"]
    assert payload["comments"][0]["index"] == "3"
    assert payload["comments"][0]["type"] == "comment"


def test_feed_identity_commands(db_path: Path) -> None:
    runner = CliRunner()
    _ingest_sample(runner, db_path)

    upvotes = runner.invoke(kiwi_feed, ["feed", "upvotes", "0xI1", "--db-path", str(db_path)])
    assert upvotes.exit_code == 0, upvotes.output
    assert "Upvotes for 0xI1: 1" in upvotes.output
    assert "identity=0xI2" in upvotes.output

    comments = runner.invoke(
        kiwi_feed,
        ["feed", "comments", "0xI1", "--db-path", str(db_path), "--format", "json"],
    )
    assert comments.exit_code == 0, comments.output
    payload = json.loads(comments.output)
    assert [comment["index"] for comment in payload["comments"]] == ["3"]
    assert payload["comments"][0]["submission_title"] == "Story"


def test_feed_newest_lists_submissions(db_path: Path) -> None:
    runner = CliRunner()
    _ingest_sample(runner, db_path)

    result = runner.invoke(kiwi_feed, ["feed", "newest", "--db-path", str(db_path)])

    assert result.exit_code == 0, result.output
    assert "Newest submissions: 1" in result.output
    assert "index=1 upvotes=2" in result.output


def test_ingest_stops_at_first_rejected_line(db_path: Path) -> None:
    now = int(time.time())
    messages = "\n".join(
        [
            _line("amplify", "1", "https://a.com", "0xI1", now, "A"),
            "{not json",
            _line("amplify", "2", "https://b.com", "0xI1", now, "B"),
        ],
    )

    result = CliRunner().invoke(
        kiwi_feed,
        ["ingest", "--db-path", str(db_path), "-"],
        input=messages,
    )

    assert result.exit_code == 1
    assert "Ingested messages: 1" in result.output
    assert "Line 2: invalid JSON" in result.output


def test_ingest_rejects_unsupported_type(db_path: Path) -> None:
    result = CliRunner().invoke(
        kiwi_feed,
        ["ingest", "--db-path", str(db_path), "-"],
        input=_line("like", "1", "https://a.com", "0xI1", 1, "A"),
    )

    assert result.exit_code == 1
    assert "Unsupported message type: 'like'" in result.output


def test_feed_submission_missing_index_fails(db_path: Path) -> None:
    runner = CliRunner()
    runner.invoke(kiwi_feed, ["db", "init", "--db-path", str(db_path)])

    result = runner.invoke(kiwi_feed, ["feed", "submission", "404", "--db-path", str(db_path)])

    assert result.exit_code == 1
    assert "Couldn't find submission with index: 404" in result.output


def test_ingest_reports_unparseable_href_as_line_failure(db_path: Path) -> None:
    result = CliRunner().invoke(
        kiwi_feed,
        ["ingest", "--db-path", str(db_path), "-"],
        input=_line("amplify", "1", "http://[::1", "0xI1", 1, "A"),
    )

    assert result.exit_code == 1
    assert "Line 1: href is not a valid URL" in result.output
