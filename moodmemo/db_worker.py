"""Background database worker running in its own QThread.

This module exposes DBWorker, a QObject that performs storage operations
off the UI thread and emits signals with results. The worker never touches
the UI-thread MoodState; it hands back raw snapshots which the main thread
feeds into its recomputation.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from PySide6.QtCore import QObject, Signal, Slot

from moodmemo import storage
from moodmemo.constants import DATABASE_PATH


class DBWorker(QObject):
    """Worker running in a dedicated QThread to perform DB tasks.

    Signals:
        entries_loaded: emitted with list[RawEntry] when a load completes
        append_succeeded: emitted with the stored RawEntry
        append_failed: emitted with str message when append fails
        load_failed: emitted with str message when load fails
    """

    entries_loaded = Signal(object)
    append_succeeded = Signal(object)
    append_failed = Signal(str)
    load_failed = Signal(str)

    def __init__(self, db_path: Path = DATABASE_PATH) -> None:
        super().__init__()
        self._db_path = db_path

    @Slot(object)
    def load_entries(self, payload=None) -> None:
        """Load every record (runs in worker thread) and emit the snapshot.

        payload may carry a Path overriding the worker's database.
        """
        db_path = payload if isinstance(payload, Path) else self._db_path
        try:
            entries = storage.load_mood_entries(db_path)
        except (OSError, sqlite3.DatabaseError) as exc:
            logging.exception("DBWorker failed to load entries")
            self.load_failed.emit(str(exc))
            return

        self.entries_loaded.emit(entries)

    @Slot(object)
    def append_entry(self, payload) -> None:
        """Append one mood from a payload dict, then reload the full snapshot.

        The payload carries ``emoji`` and ``comment``, and optionally
        ``timestamp`` and ``db_path``.
        """
        db_path = payload.get("db_path") or self._db_path
        try:
            entry = storage.append_mood_entry(
                payload.get("emoji", ""),
                payload.get("comment", ""),
                db_path,
                timestamp=payload.get("timestamp"),
            )
        except (ValueError, OSError, sqlite3.DatabaseError) as exc:
            logging.exception("DBWorker failed to append entry")
            self.append_failed.emit(str(exc))
            return

        self.append_succeeded.emit(entry)

        # write-then-refresh: the next recomputation sees the stored record
        self.load_entries(db_path)
