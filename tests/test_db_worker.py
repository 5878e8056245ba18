"""Tests for DBWorker slots, called directly on the test thread."""

from __future__ import annotations

import shutil
import sqlite3
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from moodmemo.db_worker import DBWorker
from moodmemo.storage import initialize_storage

TOKYO = timezone(timedelta(hours=9))

app = QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def worker_setup():
    tmpdir = tempfile.mkdtemp()
    db_path = Path(tmpdir) / "test.db"
    initialize_storage(db_path, Path(tmpdir) / "legacy.json")

    worker = DBWorker(db_path)
    events: dict[str, list] = {"loaded": [], "appended": [], "append_failed": [], "load_failed": []}
    worker.entries_loaded.connect(lambda value: events["loaded"].append(value))
    worker.append_succeeded.connect(lambda value: events["appended"].append(value))
    worker.append_failed.connect(lambda value: events["append_failed"].append(value))
    worker.load_failed.connect(lambda value: events["load_failed"].append(value))
    try:
        yield worker, db_path, events
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


def test_load_emits_snapshot(worker_setup):
    worker, _, events = worker_setup
    worker.load_entries(None)
    assert events["loaded"] == [[]]


def test_append_writes_then_reloads(worker_setup):
    worker, _, events = worker_setup
    moment = datetime(2024, 3, 10, 9, tzinfo=TOKYO)

    worker.append_entry({"emoji": "😊", "comment": "better", "timestamp": moment})

    assert len(events["appended"]) == 1
    assert events["appended"][0].comment == "better"
    # the reload after the write already contains the new record
    assert len(events["loaded"]) == 1
    assert [entry.id for entry in events["loaded"][0]] == [events["appended"][0].id]
    assert events["append_failed"] == []


def test_rejected_symbol_reports_failure_without_reload(worker_setup):
    worker, _, events = worker_setup
    worker.append_entry({"emoji": "🙃", "comment": ""})

    assert len(events["append_failed"]) == 1
    assert events["appended"] == []
    assert events["loaded"] == []


def test_database_failure_reports_failure(worker_setup):
    worker, db_path, events = worker_setup
    with sqlite3.connect(db_path) as conn:
        conn.execute("DROP TABLE moods")

    worker.append_entry({"emoji": "😄", "comment": "lost"})

    assert len(events["append_failed"]) == 1
    assert events["loaded"] == []


def test_load_failure_reports_failure(worker_setup):
    worker, db_path, events = worker_setup
    with sqlite3.connect(db_path) as conn:
        conn.execute("DROP TABLE moods")

    worker.load_entries(None)

    assert len(events["load_failed"]) == 1
    assert events["loaded"] == []


def test_failed_reload_after_append_emits_no_snapshot(worker_setup, monkeypatch):
    worker, _, events = worker_setup

    def broken_load(db_path):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr("moodmemo.storage.load_mood_entries", broken_load)
    worker.append_entry({"emoji": "😊", "comment": "stored"})

    # the write went through, but no empty snapshot replaces the old one
    assert len(events["appended"]) == 1
    assert len(events["load_failed"]) == 1
    assert events["loaded"] == []
