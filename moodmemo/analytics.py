"""Derived views over the mood history.

Every function here is pure: it takes the current snapshot (plus, where a
calendar day matters, the configured timezone) and returns fresh values.
Insufficient data produces an empty or neutral result, never an exception.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime, tzinfo

from moodmemo.constants import (
    ANALYSIS_WINDOW,
    LOCAL_TIMEZONE,
    MIXED_THRESHOLD,
    VERY_GOOD_THRESHOLD,
)
from moodmemo.models import (
    AnalysisMessage,
    DayCell,
    MonthCursor,
    MonthGrid,
    MoodEntry,
    RawEntry,
    SummaryStats,
    TrendPoint,
)
from moodmemo.scale import MAX_SCORE, MIN_SCORE, score_of


def attach_zone(moment: datetime, tz: tzinfo | None = LOCAL_TIMEZONE) -> datetime:
    """Read a naive datetime as wall-clock time in ``tz``; aware ones pass.

    ``tz=None`` stands for the system zone, resolved for that very moment.
    """
    if moment.tzinfo is not None:
        return moment
    if tz is None:
        return moment.astimezone()
    return moment.replace(tzinfo=tz)


def parse_timestamp(
    value: object, tz: tzinfo | None = LOCAL_TIMEZONE
) -> datetime | None:
    """Turn a stored timestamp into an aware datetime, or None if unusable.

    Naive values are read as wall-clock time in ``tz``. A trailing ``Z``
    marks UTC, as older exports wrote it.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    return attach_zone(dt, tz)


def local_day(moment: datetime, tz: tzinfo | None = LOCAL_TIMEZONE) -> date:
    """Calendar day of ``moment`` in the configured zone."""
    return moment.astimezone(tz).date()


# ---- entry normalizer ----


def normalize_entry(
    raw: RawEntry, tz: tzinfo | None = LOCAL_TIMEZONE
) -> MoodEntry | None:
    timestamp = parse_timestamp(raw.timestamp, tz)
    if timestamp is None:
        return None
    score = score_of(raw.emoji)
    if score is None:
        return None
    comment = raw.comment if isinstance(raw.comment, str) else ""
    return MoodEntry(
        timestamp=timestamp,
        symbol=raw.emoji.strip(),  # type: ignore[union-attr]
        score=score,
        comment=comment,
        id=raw.id,
    )


def normalize_entries(
    raw_entries: Iterable[RawEntry], tz: tzinfo | None = LOCAL_TIMEZONE
) -> list[MoodEntry]:
    """Validate, score and order raw records ascending by timestamp.

    Records without a usable timestamp or with an unknown symbol are left
    out. The sort is stable, so equal timestamps keep their input order.
    """
    entries = [
        entry
        for entry in (normalize_entry(raw, tz) for raw in raw_entries)
        if entry is not None
    ]
    entries.sort(key=lambda entry: entry.timestamp)
    return entries


# ---- time series ----


def day_boundaries(
    entries: Sequence[MoodEntry], tz: tzinfo | None = LOCAL_TIMEZONE
) -> list[datetime]:
    """Timestamps where the series moves onto a new calendar day."""
    markers: list[datetime] = []
    for previous, current in zip(entries, entries[1:]):
        if local_day(previous.timestamp, tz) != local_day(current.timestamp, tz):
            markers.append(current.timestamp)
    return markers


def trend_line(entries: Sequence[MoodEntry]) -> list[TrendPoint]:
    """Least-squares line of score against epoch seconds over the whole series.

    Returns the line evaluated at the first and last timestamps, or an empty
    list when there are fewer than two points or every timestamp is equal.
    """
    if len(entries) < 2:
        return []

    xs = [entry.timestamp.timestamp() for entry in entries]
    # entries are ascending, so equal ends mean every timestamp is equal
    if xs[0] == xs[-1]:
        return []

    # centre on the first point to keep the sums exact for large epochs
    origin = xs[0]
    offsets = [x - origin for x in xs]
    ys = [float(entry.score) for entry in entries]
    mean_x = sum(offsets) / len(offsets)
    mean_y = sum(ys) / len(ys)

    denominator = sum((x - mean_x) ** 2 for x in offsets)
    if denominator == 0:
        return []
    numerator = sum((x - mean_x) * (y - mean_y) for x, y in zip(offsets, ys))
    slope = numerator / denominator
    intercept = mean_y - slope * mean_x

    first, last = entries[0].timestamp, entries[-1].timestamp
    return [
        TrendPoint(first, intercept),
        TrendPoint(last, slope * offsets[-1] + intercept),
    ]


# ---- daily / monthly aggregation ----


def daily_averages(
    entries: Iterable[MoodEntry], tz: tzinfo | None = LOCAL_TIMEZONE
) -> dict[date, float]:
    """Mean score per local calendar day, for days with at least one entry."""
    buckets: dict[date, list[int]] = defaultdict(list)
    for entry in entries:
        buckets[local_day(entry.timestamp, tz)].append(entry.score)
    return {day: sum(scores) / len(scores) for day, scores in buckets.items()}


def leading_blank_count(cursor: MonthCursor) -> int:
    """Empty cells before day 1 in a grid whose first column is Sunday."""
    # calendar numbers Monday as 0; shift so Sunday lands on column 0
    first_weekday, _ = calendar.monthrange(cursor.year, cursor.month)
    return (first_weekday + 1) % 7


def month_grid(cursor: MonthCursor, averages: dict[date, float]) -> MonthGrid:
    _, days_in_month = calendar.monthrange(cursor.year, cursor.month)
    cells = []
    for day_number in range(1, days_in_month + 1):
        day = date(cursor.year, cursor.month, day_number)
        cells.append(DayCell(day_number, day, averages.get(day)))
    return MonthGrid(
        cursor=cursor,
        leading_blanks=leading_blank_count(cursor),
        cells=tuple(cells),
    )


def mood_intensity(average: float | None) -> float | None:
    """Position of a daily average on the low (0.0) to high (1.0) gradient.

    None or a non-positive average means no data for that day.
    """
    if average is None or average <= 0:
        return None
    span = MAX_SCORE - MIN_SCORE
    return max(0.0, min(float(span), average - MIN_SCORE)) / span


# ---- summary ----


def today_count(
    entries: Iterable[MoodEntry],
    now: datetime,
    tz: tzinfo | None = LOCAL_TIMEZONE,
) -> int:
    today = local_day(now, tz)
    return sum(1 for entry in entries if local_day(entry.timestamp, tz) == today)


def analysis_message(entries: Sequence[MoodEntry]) -> AnalysisMessage:
    """Classify the average of the most recent entries.

    ``entries`` must be in ascending order; the window is its tail.
    """
    if not entries:
        return AnalysisMessage.EMPTY

    recent = entries[-ANALYSIS_WINDOW:]
    scores = [entry.score for entry in recent if entry.score is not None]
    if not scores:
        return AnalysisMessage.NOT_ENOUGH

    average = sum(scores) / len(scores)
    if average >= VERY_GOOD_THRESHOLD:
        return AnalysisMessage.VERY_GOOD
    if average >= MIXED_THRESHOLD:
        return AnalysisMessage.MIXED
    return AnalysisMessage.LOW


def summarize(
    entries: Sequence[MoodEntry],
    now: datetime,
    tz: tzinfo | None = LOCAL_TIMEZONE,
) -> SummaryStats:
    return SummaryStats(
        today_count=today_count(entries, now, tz),
        message=analysis_message(entries),
    )


# ---- day detail ----


def entries_on_day(
    entries: Iterable[MoodEntry],
    day: date | datetime,
    tz: tzinfo | None = LOCAL_TIMEZONE,
) -> list[MoodEntry]:
    """Entries recorded on one local calendar day, in series order.

    A datetime argument is first converted to its own local day.
    """
    if isinstance(day, datetime):
        day = local_day(attach_zone(day, tz), tz)
    return [entry for entry in entries if local_day(entry.timestamp, tz) == day]
