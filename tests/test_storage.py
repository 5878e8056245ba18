#!/usr/bin/env python3
"""Unit tests for SQLite storage."""

import json
import shutil
import sqlite3
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from moodmemo.analytics import normalize_entries
from moodmemo.constants import COMMENT_CHARACTER_LIMIT
from moodmemo.storage import (
    append_mood_entry,
    initialize_storage,
    load_mood_entries,
)

TOKYO = timezone(timedelta(hours=9))


@pytest.fixture
def db_path():
    tmpdir = tempfile.mkdtemp()
    try:
        path = Path(tmpdir) / "test.db"
        initialize_storage(path, Path(tmpdir) / "legacy.json")
        yield path
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


def test_append_and_load_round_trip(db_path):
    moment = datetime(2024, 3, 10, 9, 0, tzinfo=TOKYO)
    stored = append_mood_entry("😄", "  ok  ", db_path, timestamp=moment)

    assert stored.emoji == "😄"
    assert stored.comment == "ok"
    assert datetime.fromisoformat(stored.timestamp) == moment

    loaded = load_mood_entries(db_path)
    assert loaded == [stored]


def test_append_same_moment_gets_unique_ids(db_path):
    moment = datetime(2024, 3, 10, 9, 0, tzinfo=TOKYO)
    first = append_mood_entry("😄", "", db_path, timestamp=moment)
    second = append_mood_entry("😟", "", db_path, timestamp=moment)

    assert second.id == first.id + 1
    assert len(load_mood_entries(db_path)) == 2


def test_append_rejects_unknown_symbol(db_path):
    with pytest.raises(ValueError):
        append_mood_entry("🙃", "nope", db_path)
    assert load_mood_entries(db_path) == []


def test_append_truncates_long_comment(db_path):
    stored = append_mood_entry("😐", "x" * 250, db_path)
    assert len(stored.comment) == COMMENT_CHARACTER_LIMIT


def test_append_failure_is_raised(db_path):
    with sqlite3.connect(db_path) as conn:
        conn.execute("DROP TABLE moods")

    with pytest.raises(sqlite3.DatabaseError):
        append_mood_entry("😊", "lost", db_path)


def test_load_missing_database_is_empty():
    tmpdir = tempfile.mkdtemp()
    try:
        assert load_mood_entries(Path(tmpdir) / "absent.db") == []
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


def test_naive_timestamp_is_read_in_configured_zone(db_path):
    stored = append_mood_entry(
        "😊", "", db_path, timestamp=datetime(2024, 3, 10, 23, 30), tz=TOKYO
    )

    assert stored.timestamp == "2024-03-10T23:30:00+09:00"
    [entry] = normalize_entries(load_mood_entries(db_path), TOKYO)
    assert entry.timestamp.date().isoformat() == "2024-03-10"


def test_default_timestamp_uses_configured_zone(db_path):
    stored = append_mood_entry("😐", "", db_path, tz=TOKYO)
    assert stored.timestamp.endswith("+09:00")


def test_load_failure_is_raised(db_path):
    append_mood_entry("😊", "kept", db_path)
    with sqlite3.connect(db_path) as conn:
        conn.execute("DROP TABLE moods")

    with pytest.raises(sqlite3.DatabaseError):
        load_mood_entries(db_path)


def test_legacy_json_is_migrated_verbatim():
    tmpdir = tempfile.mkdtemp()
    try:
        db_path = Path(tmpdir) / "test.db"
        legacy_path = Path(tmpdir) / "legacy.json"
        legacy_path.write_text(
            json.dumps(
                {
                    "moods": [
                        {"id": 1, "timestamp": "2024-03-10T09:00:00+09:00", "emoji": "😄", "comment": "ok"},
                        {"id": 2, "emoji": "😟"},
                        {"id": 3, "timestamp": "2024-03-11T09:00:00+09:00", "emoji": "??"},
                        "not a record",
                    ]
                }
            ),
            encoding="utf-8",
        )

        initialize_storage(db_path, legacy_path)
        loaded = load_mood_entries(db_path)
        assert [entry.id for entry in loaded] == [1, 2, 3]
        assert loaded[1].timestamp is None

        # malformed rows survive storage and are filtered on read
        normalized = normalize_entries(loaded, TOKYO)
        assert [entry.id for entry in normalized] == [1]

        # a second start-up does not import twice
        initialize_storage(db_path, legacy_path)
        assert len(load_mood_entries(db_path)) == 3
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


def test_corrupt_legacy_json_is_ignored():
    tmpdir = tempfile.mkdtemp()
    try:
        db_path = Path(tmpdir) / "test.db"
        legacy_path = Path(tmpdir) / "legacy.json"
        legacy_path.write_text("{not json", encoding="utf-8")

        initialize_storage(db_path, legacy_path)
        assert load_mood_entries(db_path) == []
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__]))
