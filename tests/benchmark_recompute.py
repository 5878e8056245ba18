#!/usr/bin/env python3
"""Benchmark: reloading SQLite and recomputing versus recomputing in memory."""

import shutil
import sqlite3
import tempfile
import time
from datetime import datetime, timedelta
from pathlib import Path

from moodmemo.scale import MOOD_SYMBOLS
from moodmemo.state import MoodState
from moodmemo.storage import (
    append_mood_entry,
    initialize_storage,
    load_mood_entries,
)


def benchmark_reload(db_path: Path, num_refreshes: int, state: MoodState):
    """Time full load + recompute cycles, as after every append."""
    start = time.perf_counter()
    for _ in range(num_refreshes):
        state.replace_entries(load_mood_entries(db_path))
    return time.perf_counter() - start


def benchmark_navigation(num_refreshes: int, state: MoodState):
    """Time recomputes over the held snapshot, as on month navigation."""
    start = time.perf_counter()
    for i in range(num_refreshes):
        state.navigate_month(-1 if i % 2 else 1)
    return time.perf_counter() - start


def main():
    print("=" * 70)
    print("MoodMemo Recompute Benchmark")
    print("=" * 70)
    print()

    tmpdir = tempfile.mkdtemp()
    try:
        db_path = Path(tmpdir) / "bench.db"
        initialize_storage(db_path, Path(tmpdir) / "legacy.json")

        test_cases = [100, 500, 1000, 2000]
        num_refreshes = 50
        start_moment = datetime.now().astimezone() - timedelta(days=400)

        for num_records in test_cases:
            with sqlite3.connect(db_path) as conn:
                conn.execute("DELETE FROM moods")

            print(f"Generating {num_records} test records...", end="", flush=True)
            for i in range(num_records):
                append_mood_entry(
                    MOOD_SYMBOLS[i % len(MOOD_SYMBOLS)],
                    f"Entry {i + 1}",
                    db_path,
                    timestamp=start_moment + timedelta(hours=5 * i),
                )
            print(" OK")

            print(f"\nTest Case: {num_records} records")
            print("   " + "-" * 52)

            state = MoodState()
            elapsed_db = benchmark_reload(db_path, num_refreshes, state)
            print(
                f"   RELOAD + RECOMPUTE: {elapsed_db:.4f}s total "
                f"({elapsed_db / num_refreshes * 1000:.3f}ms per refresh)"
            )

            elapsed_nav = benchmark_navigation(num_refreshes, state)
            print(
                f"   MONTH NAVIGATION:   {elapsed_nav:.4f}s total "
                f"({elapsed_nav / num_refreshes * 1000:.3f}ms per refresh)"
            )

        print()
        print("=" * 70)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


if __name__ == "__main__":
    main()
