"""User interface components and event handling."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from PySide6.QtCharts import (
    QChart,
    QChartView,
    QDateTimeAxis,
    QLineSeries,
    QScatterSeries,
    QValueAxis,
)
from PySide6.QtCore import (
    QAbstractListModel,
    QDateTime,
    QModelIndex,
    QPersistentModelIndex,
    Qt,
    QThread,
    Signal,
    Slot,
)
from PySide6.QtGui import QCloseEvent, QColor, QFont, QPainter, QPalette, QPen
from PySide6.QtWidgets import (
    QApplication,
    QButtonGroup,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListView,
    QMessageBox,
    QPushButton,
    QSplitter,
    QTabWidget,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from moodmemo.constants import (
    ANALYSIS_MESSAGES,
    COMMENT_CHARACTER_LIMIT,
    DATABASE_PATH,
    MOOD_CHOICES,
    WEEKDAY_HEADERS,
)
from moodmemo.db_worker import DBWorker
from moodmemo.models import DerivedState, MonthGrid, MoodEntry
from moodmemo.scale import MAX_SCORE, MIN_SCORE
from moodmemo.state import MoodState
from moodmemo.utils import (
    format_timestamp_display,
    mood_color_hex,
    render_day_detail_html,
    render_empty_day_html,
)

EMPTY_CELL_COLOR = "#f0efee"


def _to_qdatetime(moment) -> QDateTime:
    return QDateTime.fromMSecsSinceEpoch(int(moment.timestamp() * 1000))


class MoodEntryListModel(QAbstractListModel):
    """Virtualized history list, newest entry first.

    Only the visible rows are rendered, so long histories stay cheap.
    """

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._entries: list[MoodEntry] = []

    def rowCount(
        self, parent: QModelIndex | QPersistentModelIndex = QModelIndex()
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._entries)

    def data(
        self,
        index: QModelIndex | QPersistentModelIndex,
        role: int = Qt.ItemDataRole.DisplayRole,
    ) -> Any:
        if not index.isValid() or index.row() >= len(self._entries):
            return None

        entry = self._entries[index.row()]

        if role == Qt.ItemDataRole.DisplayRole:
            preview = " ".join(entry.comment.strip().split())
            if len(preview) > 48:
                preview = preview[:47] + "…"

            display_lines = [f"{entry.symbol}  {format_timestamp_display(entry.timestamp)}"]
            if preview:
                display_lines.append(f"  -> {preview}")
            return "\n".join(display_lines)

        elif role == Qt.ItemDataRole.UserRole:
            return entry

        return None

    def get_entry(self, index: QModelIndex) -> MoodEntry | None:
        if not index.isValid() or index.row() >= len(self._entries):
            return None
        return self._entries[index.row()]

    def set_entries(self, entries: list[MoodEntry]) -> None:
        """Show ``entries`` (ascending, as derived) with the newest on top."""
        self.beginResetModel()
        self._entries = list(reversed(entries))
        self.endResetModel()

    def clear(self) -> None:
        self.beginResetModel()
        self._entries = []
        self.endResetModel()


class MoodChartView(QChartView):
    """Score over time with the trend line and day boundary markers."""

    def __init__(self, parent=None) -> None:
        chart = QChart()
        super().__init__(chart, parent)
        self._chart = chart
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self._chart.legend().hide()
        self._chart.setTitle("気分の推移 Mood over time")

    def update_from_state(self, derived: DerivedState) -> None:
        chart = self._chart
        chart.removeAllSeries()
        for axis in chart.axes():
            chart.removeAxis(axis)

        if not derived.entries:
            return

        axis_x = QDateTimeAxis()
        axis_x.setFormat("MM/dd")
        axis_y = QValueAxis()
        axis_y.setRange(MIN_SCORE - 0.5, MAX_SCORE + 0.5)
        axis_y.setTickCount(MAX_SCORE - MIN_SCORE + 1)
        axis_y.setLabelFormat("%d")
        chart.addAxis(axis_x, Qt.AlignmentFlag.AlignBottom)
        chart.addAxis(axis_y, Qt.AlignmentFlag.AlignLeft)

        scores = QLineSeries()
        points = QScatterSeries()
        points.setMarkerSize(8.0)
        for entry in derived.entries:
            x = float(_to_qdatetime(entry.timestamp).toMSecsSinceEpoch())
            scores.append(x, float(entry.score))
            points.append(x, float(entry.score))
        series_list = [scores, points]

        if derived.trend:
            trend = QLineSeries()
            pen = QPen(QColor(231, 76, 60))
            pen.setStyle(Qt.PenStyle.DashLine)
            pen.setWidth(2)
            trend.setPen(pen)
            for point in derived.trend:
                trend.append(
                    float(_to_qdatetime(point.date).toMSecsSinceEpoch()), point.score
                )
            series_list.append(trend)

        for marker in derived.day_boundaries:
            line = QLineSeries()
            pen = QPen(QColor(160, 160, 160))
            pen.setStyle(Qt.PenStyle.DotLine)
            line.setPen(pen)
            x = float(_to_qdatetime(marker).toMSecsSinceEpoch())
            line.append(x, MIN_SCORE - 0.5)
            line.append(x, MAX_SCORE + 0.5)
            series_list.append(line)

        for series in series_list:
            chart.addSeries(series)
            series.attachAxis(axis_x)
            series.attachAxis(axis_y)

        first = _to_qdatetime(derived.entries[0].timestamp)
        last = _to_qdatetime(derived.entries[-1].timestamp)
        if first == last:
            first = first.addSecs(-3600)
            last = last.addSecs(3600)
        axis_x.setRange(first, last)


class MoodCalendarWidget(QWidget):
    """Month heat-map; column 0 is Sunday and each day is tinted by its average."""

    day_selected = Signal(object)
    month_step_requested = Signal(int)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)

        header = QHBoxLayout()
        self.prev_button = QPushButton("◀")
        self.prev_button.clicked.connect(lambda: self.month_step_requested.emit(-1))
        self.next_button = QPushButton("▶")
        self.next_button.clicked.connect(lambda: self.month_step_requested.emit(1))
        self.month_label = QLabel()
        self.month_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        header.addWidget(self.prev_button)
        header.addWidget(self.month_label, 1)
        header.addWidget(self.next_button)
        layout.addLayout(header)

        self.grid = QGridLayout()
        self.grid.setSpacing(4)
        for column, name in enumerate(WEEKDAY_HEADERS):
            label = QLabel(name)
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            self.grid.addWidget(label, 0, column)
        layout.addLayout(self.grid)
        layout.addStretch()
        self.setLayout(layout)

        self._day_buttons: list[QPushButton] = []

    def set_month(self, grid: MonthGrid) -> None:
        for button in self._day_buttons:
            self.grid.removeWidget(button)
            button.deleteLater()
        self._day_buttons = []

        self.month_label.setText(f"{grid.cursor.year}年 {grid.cursor.month}月")

        for offset, cell in enumerate(grid.cells, start=grid.leading_blanks):
            row, column = divmod(offset, 7)
            button = QPushButton(str(cell.day_number))
            button.setObjectName("calendarDay")
            button.setCursor(Qt.CursorShape.PointingHandCursor)
            color = mood_color_hex(cell.average) or EMPTY_CELL_COLOR
            button.setStyleSheet(
                f"background-color: {color}; color: #201f1e; border-radius: 6px;"
            )
            if cell.average is not None:
                button.setToolTip(f"{cell.average:.1f} / {MAX_SCORE}")
            button.clicked.connect(
                lambda _, day=cell.date: self.day_selected.emit(day)
            )
            self.grid.addWidget(button, row + 1, column)
            self._day_buttons.append(button)


class MoodWindow(QWidget):
    """Main window: record a mood, then review it as a list, chart or calendar."""

    # Request signals (emit from UI thread, handled by DBWorker in worker thread)
    append_request = Signal(object)
    load_request = Signal(object)

    def __init__(self, state: MoodState | None = None) -> None:
        super().__init__()
        self.setWindowTitle("気分メモ MoodMemo")
        self.setObjectName("MoodWindow")
        self._apply_fluent_theme()

        self.state = state or MoodState()
        self._selected_day: date | None = None

        layout = QVBoxLayout()
        layout.setContentsMargins(24, 24, 24, 20)
        layout.setSpacing(14)

        title = QLabel("今日の気分は？ How are you feeling today?")
        title.setFont(QFont("Segoe UI", 14))
        layout.addWidget(title)

        picker_row = QHBoxLayout()
        self.mood_buttons = QButtonGroup(self)
        self.mood_buttons.setExclusive(True)
        for symbol, score in MOOD_CHOICES:
            button = QPushButton(symbol)
            button.setObjectName("moodChoice")
            button.setCheckable(True)
            button.setFont(QFont("Segoe UI Emoji", 20))
            button.setProperty("mood_symbol", symbol)
            button.setToolTip(f"{score} / {MAX_SCORE}")
            self.mood_buttons.addButton(button)
            picker_row.addWidget(button)
        self.mood_buttons.buttonToggled.connect(self._on_mood_toggled)
        layout.addLayout(picker_row)

        self.comment_input = QLineEdit()
        self.comment_input.setMaxLength(COMMENT_CHARACTER_LIMIT)
        self.comment_input.setPlaceholderText("コメントを追加（任意） Add a comment (optional)")
        layout.addWidget(self.comment_input)

        self.save_button = QPushButton("記録する Record")
        self.save_button.setEnabled(False)
        self.save_button.clicked.connect(self.record_mood)
        layout.addWidget(self.save_button)

        self.summary_label = QLabel()
        self.summary_label.setWordWrap(True)
        layout.addWidget(self.summary_label)

        self.tabs = QTabWidget()

        self.history_list_model = MoodEntryListModel(self)
        self.history_list = QListView()
        self.history_list.setObjectName("HistoryListView")
        self.history_list.setModel(self.history_list_model)
        self.history_list.setVerticalScrollMode(QListView.ScrollMode.ScrollPerPixel)
        self.history_list.setUniformItemSizes(False)
        self.tabs.addTab(self.history_list, "一覧 List")

        self.chart_view = MoodChartView()
        self.tabs.addTab(self.chart_view, "グラフ Chart")

        self.calendar = MoodCalendarWidget()
        self.calendar.month_step_requested.connect(self.navigate_month)
        self.calendar.day_selected.connect(self.show_day)
        self.day_detail = QTextBrowser()
        self.day_detail.setObjectName("DayDetailView")
        self.day_detail.setOpenExternalLinks(False)
        calendar_splitter = QSplitter(Qt.Orientation.Horizontal)
        calendar_splitter.addWidget(self.calendar)
        calendar_splitter.addWidget(self.day_detail)
        calendar_splitter.setStretchFactor(0, 2)
        calendar_splitter.setStretchFactor(1, 1)
        self.tabs.addTab(calendar_splitter, "カレンダー Calendar")

        layout.addWidget(self.tabs, 1)
        self.setLayout(layout)

        # Start DB worker thread and wire signals
        self._db_thread = QThread(self)
        self._db_worker = DBWorker(DATABASE_PATH)
        self._db_worker.moveToThread(self._db_thread)

        self.append_request.connect(self._db_worker.append_entry)
        self.load_request.connect(self._db_worker.load_entries)

        self._db_worker.entries_loaded.connect(self._on_entries_loaded)
        self._db_worker.append_failed.connect(self._on_append_failed)
        self._db_worker.load_failed.connect(self._on_load_failed)
        self._db_worker.append_succeeded.connect(self._on_append_succeeded)

        self._db_thread.start()

        self.apply_state(self.state.derived)
        self.refresh_history()

    def _apply_fluent_theme(self) -> None:
        """Configure palette and styles to approximate Fluent Design."""
        app = QApplication.instance()
        QApplication.setStyle("Fusion")

        accent_color = QColor(15, 108, 189)
        foreground = QColor(32, 31, 30)

        palette = QPalette()
        palette.setColor(QPalette.ColorRole.Window, QColor(243, 242, 241))
        palette.setColor(QPalette.ColorRole.Base, QColor(255, 255, 255))
        palette.setColor(QPalette.ColorRole.Text, foreground)
        palette.setColor(QPalette.ColorRole.WindowText, foreground)
        palette.setColor(QPalette.ColorRole.ButtonText, foreground)
        palette.setColor(QPalette.ColorRole.Highlight, accent_color)

        if app is not None and isinstance(app, QApplication):
            app.setPalette(palette)
        self.setPalette(palette)
        self.setFont(QFont("Segoe UI", 10))

        accent_hex = accent_color.name()
        self.setStyleSheet(
            f"""
            QLineEdit, QTextBrowser {{
                background-color: white;
                border: 1px solid rgba(32, 31, 30, 40);
                border-radius: 10px;
                padding: 8px 12px;
            }}
            QLineEdit:focus {{
                border: 2px solid {accent_hex};
            }}
            QPushButton {{
                background-color: {accent_hex};
                border: none;
                border-radius: 8px;
                padding: 8px 16px;
                font-weight: 600;
                color: white;
            }}
            QPushButton:disabled {{
                background-color: rgba(32, 31, 30, 60);
            }}
            QPushButton#moodChoice {{
                background-color: transparent;
                border: 2px solid transparent;
                border-radius: 24px;
                padding: 4px;
            }}
            QPushButton#moodChoice:checked {{
                background-color: rgba(15, 108, 189, 77);
                border: 2px solid {accent_hex};
            }}
            QListView#HistoryListView::item {{
                margin: 4px;
                padding: 6px;
            }}
        """
        )

    # ---- input ----

    def _on_mood_toggled(self, _button, _checked: bool) -> None:
        self.save_button.setEnabled(self.selected_mood() is not None)

    def selected_mood(self) -> str | None:
        button = self.mood_buttons.checkedButton()
        if button is None:
            return None
        return button.property("mood_symbol")

    def record_mood(self) -> None:
        """Send the selected mood and comment to the worker for storage."""
        emoji = self.selected_mood()
        if emoji is None:
            return
        payload = {
            "emoji": emoji,
            "comment": self.comment_input.text().strip(),
            "db_path": DATABASE_PATH,
        }
        # block duplicate clicks while the background write runs
        self.save_button.setEnabled(False)
        self.append_request.emit(payload)

    # ---- derived views ----

    def refresh_history(self) -> None:
        """Ask the worker for a fresh snapshot; views update when it arrives."""
        self.load_request.emit(None)

    def navigate_month(self, months: int) -> None:
        self.apply_state(self.state.navigate_month(months))

    def apply_state(self, derived: DerivedState) -> None:
        """Push one derived bundle into every view."""
        message = ANALYSIS_MESSAGES[derived.summary.message.value]
        self.summary_label.setText(
            f"今日の記録 Today: {derived.summary.today_count}  |  {message}"
        )
        self.history_list_model.set_entries(list(derived.entries))
        self.chart_view.update_from_state(derived)
        self.calendar.set_month(derived.month_grid)
        if self._selected_day is not None:
            self.show_day(self._selected_day)

    def show_day(self, day: date) -> None:
        self._selected_day = day
        entries = self.state.entries_on_day(day)
        if not entries:
            self.day_detail.setHtml(render_empty_day_html(day))
            return
        self.day_detail.setHtml(
            render_day_detail_html(
                day,
                entries,
                self.state.derived.daily_averages.get(day),
                self.state.timezone,
            )
        )

    # ---- background worker callbacks ----

    @Slot(object)
    def _on_entries_loaded(self, entries) -> None:
        self.apply_state(self.state.replace_entries(entries))

    @Slot(object)
    def _on_append_succeeded(self, _entry) -> None:
        checked = self.mood_buttons.checkedButton()
        if checked is not None:
            self.mood_buttons.setExclusive(False)
            checked.setChecked(False)
            self.mood_buttons.setExclusive(True)
        self.comment_input.clear()
        self.save_button.setEnabled(False)

    @Slot(str)
    def _on_append_failed(self, message: str) -> None:
        logging.error("Append failed: %s", message)
        QMessageBox.critical(self, "記録できませんでした", f"Could not save mood: {message}")
        self.save_button.setEnabled(self.selected_mood() is not None)

    @Slot(str)
    def _on_load_failed(self, message: str) -> None:
        logging.error("Load failed: %s", message)
        QMessageBox.critical(self, "読み込みエラー", f"Could not load moods: {message}")

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop the worker thread before the window goes away."""
        try:
            if self._db_thread.isRunning():
                self._db_thread.quit()
                self._db_thread.wait(2000)
        except RuntimeError:
            logging.exception("Failed to stop DB worker thread cleanly")
        super().closeEvent(event)
