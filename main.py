"""Main entry point for the MoodMemo journal application."""

from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from moodmemo.constants import DATABASE_PATH, LEGACY_JSON_PATH
from moodmemo.storage import initialize_storage
from moodmemo.ui import MoodWindow


def main() -> int:
    """Initialize the database and launch the application."""
    initialize_storage(DATABASE_PATH, LEGACY_JSON_PATH)
    app = QApplication(sys.argv)
    window = MoodWindow()
    window.resize(560, 720)
    window.show()
    return int(app.exec())


if __name__ == "__main__":
    sys.exit(main())
