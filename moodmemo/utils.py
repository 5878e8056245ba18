"""Utility functions for formatting, rendering, and calendar colors."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, tzinfo

from PySide6.QtGui import QColor

from moodmemo.analytics import mood_intensity
from moodmemo.constants import (
    CALENDAR_SATURATION,
    CALENDAR_VALUE,
    DAY_DETAIL_TEMPLATE,
    EMPTY_DAY_TEMPLATE,
    HIGH_MOOD_HUE,
    LOCAL_TIMEZONE,
    LOW_MOOD_HUE,
)
from moodmemo.models import MoodEntry


def format_timestamp_display(
    timestamp: datetime | None, tz: tzinfo | None = LOCAL_TIMEZONE
) -> str:
    """Render a timestamp into a compact, reader-friendly string."""
    if timestamp is None:
        return "不明な時刻"
    return timestamp.astimezone(tz).strftime("%Y-%m-%d %H:%M")


def format_day_display(day: date) -> str:
    return f"{day.year}年{day.month}月{day.day}日 ({day.isoformat()})"


def mood_color(average: float | None) -> QColor | None:
    """Calendar color for a daily average; None when the day has no data.

    The hue rotates from the low-mood end to the high-mood end.
    """
    intensity = mood_intensity(average)
    if intensity is None:
        return None
    hue = LOW_MOOD_HUE + (HIGH_MOOD_HUE - LOW_MOOD_HUE) * intensity
    return QColor.fromHsvF(hue, CALENDAR_SATURATION, CALENDAR_VALUE)


def mood_color_hex(average: float | None) -> str | None:
    color = mood_color(average)
    return color.name() if color is not None else None


def render_day_detail_html(
    day: date,
    entries: Sequence[MoodEntry],
    average: float | None = None,
    tz: tzinfo | None = LOCAL_TIMEZONE,
) -> str:
    """Render one day's entries, or the explicit empty state when there are none."""
    if not entries:
        return render_empty_day_html(day)

    rows = [
        {
            "symbol": entry.symbol,
            "time_display": entry.timestamp.astimezone(tz).strftime("%H:%M"),
            "comment": entry.comment.strip(),
        }
        for entry in entries
    ]
    return DAY_DETAIL_TEMPLATE.render(
        day_display=format_day_display(day),
        average=average,
        entries=rows,
    )


def render_empty_day_html(day: date) -> str:
    return EMPTY_DAY_TEMPLATE.render(day_display=format_day_display(day))
