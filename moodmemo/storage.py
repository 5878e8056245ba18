"""Database operations and data persistence."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, tzinfo
from pathlib import Path

from moodmemo.analytics import attach_zone
from moodmemo.constants import COMMENT_CHARACTER_LIMIT, LOCAL_TIMEZONE
from moodmemo.models import RawEntry
from moodmemo.scale import is_mood_symbol


def apply_sqlite_pragmas(conn: sqlite3.Connection) -> None:
    """Apply recommended PRAGMA tunings to an open SQLite connection.

    This centralizes the WAL and sync/temp_store settings so all code paths
    opening the DB get consistent behavior.
    """
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA temp_store=MEMORY;")
        logging.info(
            "Applied SQLite PRAGMAs: journal_mode=WAL, synchronous=NORMAL, temp_store=MEMORY"
        )
    except sqlite3.DatabaseError:
        logging.exception("Failed to apply SQLite PRAGMA settings.")


def initialize_storage(db_path: Path, legacy_json_path: Path) -> None:
    """Ensure the SQLite storage exists and migrate legacy JSON if present."""
    db_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with sqlite3.connect(db_path) as conn:
            apply_sqlite_pragmas(conn)

            # columns stay nullable: partial legacy rows are filtered on read
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS moods (
                    id INTEGER PRIMARY KEY,
                    timestamp TEXT,
                    emoji TEXT,
                    comment TEXT
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_moods_timestamp ON moods(timestamp)"
            )
    except sqlite3.DatabaseError:
        logging.exception("Failed to initialize mood database at %s", db_path)
        raise

    migrate_legacy_json(legacy_json_path, db_path)


def migrate_legacy_json(json_path: Path, db_path: Path) -> None:
    """Import legacy JSON moods into SQLite, preserving the original file."""
    if not json_path.exists() or json_path.stat().st_size == 0:
        return

    try:
        with json_path.open("r", encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, json.JSONDecodeError):
        logging.exception("Failed to read legacy mood JSON from %s", json_path)
        return

    raw_moods = data.get("moods", []) if isinstance(data, dict) else []
    payload: list[tuple[int | None, str | None, str | None, str | None]] = []
    for entry in raw_moods:
        if not isinstance(entry, dict):
            continue
        entry_id = entry.get("id")
        if not isinstance(entry_id, int) or isinstance(entry_id, bool):
            entry_id = None
        payload.append(
            (
                entry_id,
                _optional_text(entry.get("timestamp")),
                _optional_text(entry.get("emoji")),
                _optional_text(entry.get("comment")),
            )
        )

    if not payload:
        return

    try:
        with sqlite3.connect(db_path) as conn:
            apply_sqlite_pragmas(conn)
            existing = conn.execute("SELECT COUNT(*) FROM moods").fetchone()[0]
            if existing:
                logging.info("Skipping legacy migration; database already has moods.")
                return
            conn.executemany(
                "INSERT OR IGNORE INTO moods (id, timestamp, emoji, comment) "
                "VALUES (?, ?, ?, ?)",
                payload,
            )
            logging.info("Migrated %d legacy mood records into SQLite.", len(payload))
    except sqlite3.DatabaseError:
        logging.exception("Failed to migrate legacy JSON moods into SQLite.")


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def append_mood_entry(
    emoji: str,
    comment: str,
    db_path: Path,
    timestamp: datetime | None = None,
    tz: tzinfo | None = LOCAL_TIMEZONE,
) -> RawEntry:
    """Persist one mood record and return it as stored.

    Args:
        emoji: palette symbol; anything else is rejected before the DB is touched
        comment: free text, trimmed and cut to the character limit
        db_path: database path
        timestamp: moment of the entry, defaults to now; naive values are
            wall-clock time in ``tz``
        tz: calendar zone used for naive timestamps and for "now"

    Raises:
        ValueError: the symbol is not part of the palette.
        sqlite3.DatabaseError: the write failed; nothing was stored.
    """
    if not is_mood_symbol(emoji):
        raise ValueError(f"Unknown mood symbol: {emoji!r}")

    if timestamp is None:
        moment = datetime.now().astimezone(tz)
    else:
        moment = attach_zone(timestamp, tz)
    new_entry = RawEntry(
        id=int(moment.timestamp() * 1000),
        timestamp=moment.isoformat(timespec="seconds"),
        emoji=emoji.strip(),
        comment=((comment or "").strip())[:COMMENT_CHARACTER_LIMIT],
    )

    try:
        with sqlite3.connect(db_path) as conn:
            apply_sqlite_pragmas(conn)
            for _attempt in range(3):
                try:
                    conn.execute(
                        "INSERT INTO moods (id, timestamp, emoji, comment) "
                        "VALUES (?, ?, ?, ?)",
                        (
                            new_entry.id,
                            new_entry.timestamp,
                            new_entry.emoji,
                            new_entry.comment,
                        ),
                    )
                except sqlite3.IntegrityError:
                    new_entry.id += 1
                    continue

                return new_entry

            raise sqlite3.IntegrityError("Failed to generate unique mood entry ID")
    except sqlite3.DatabaseError:
        logging.exception("Failed to append mood entry to database.")
        raise


def load_mood_entries(db_path: Path) -> list[RawEntry]:
    """Load every stored mood record.

    Rows come back as-is; validation and ordering belong to the normalizer.
    A missing database file is an empty history.

    Raises:
        sqlite3.DatabaseError: the read failed; callers keep what they had.
    """
    if not db_path.exists():
        return []

    try:
        with sqlite3.connect(db_path) as conn:
            apply_sqlite_pragmas(conn)
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                "SELECT id, timestamp, emoji, comment FROM moods ORDER BY id"
            ).fetchall()
    except sqlite3.DatabaseError:
        logging.exception("Failed to load mood entries from SQLite.")
        raise

    return [
        RawEntry(
            id=int(row["id"]),
            timestamp=row["timestamp"],
            emoji=row["emoji"],
            comment=row["comment"],
        )
        for row in rows
    ]
