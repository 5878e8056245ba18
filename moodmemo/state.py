"""Recomputation entry point shared by the window and its views."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, tzinfo

from moodmemo import analytics
from moodmemo.constants import LOCAL_TIMEZONE
from moodmemo.models import DerivedState, MonthCursor, MoodEntry, RawEntry


def compute_derived_state(
    raw_entries: Iterable[RawEntry],
    cursor: MonthCursor,
    now: datetime,
    tz: tzinfo | None = LOCAL_TIMEZONE,
) -> DerivedState:
    """Run the whole pipeline over one raw snapshot."""
    raw_list = list(raw_entries)
    entries = analytics.normalize_entries(raw_list, tz)
    averages = analytics.daily_averages(entries, tz)
    return DerivedState(
        entries=tuple(entries),
        day_boundaries=tuple(analytics.day_boundaries(entries, tz)),
        trend=tuple(analytics.trend_line(entries)),
        daily_averages=averages,
        month_grid=analytics.month_grid(cursor, averages),
        summary=analytics.summarize(entries, now, tz),
        dropped_count=len(raw_list) - len(entries),
        computed_at=now,
    )


class MoodState:
    """Holds the raw snapshot and month cursor, and the views derived from them.

    Each mutation recomputes a new DerivedState and replaces the previous one
    in a single assignment, so readers never see a partial update. Must be
    used from one thread (the UI thread).
    """

    def __init__(
        self,
        tz: tzinfo | None = LOCAL_TIMEZONE,
        clock: Callable[[], datetime] | None = None,
        cursor: MonthCursor | None = None,
    ) -> None:
        self._tz = tz
        self._clock = clock or (lambda: datetime.now().astimezone(tz))
        self._raw: list[RawEntry] = []
        self._cursor = cursor or MonthCursor.from_date(
            analytics.local_day(self._clock(), tz)
        )
        self._derived = self._compute()

    @property
    def derived(self) -> DerivedState:
        return self._derived

    @property
    def cursor(self) -> MonthCursor:
        return self._cursor

    @property
    def timezone(self) -> tzinfo | None:
        return self._tz

    def replace_entries(self, raw_entries: Iterable[RawEntry]) -> DerivedState:
        """Adopt a freshly loaded snapshot and recompute."""
        self._raw = list(raw_entries)
        return self.refresh()

    def navigate_month(self, months: int) -> DerivedState:
        self._cursor = self._cursor.shift(months)
        return self.refresh()

    def go_to_month(self, cursor: MonthCursor) -> DerivedState:
        self._cursor = cursor
        return self.refresh()

    def refresh(self) -> DerivedState:
        self._derived = self._compute()
        return self._derived

    def entries_on_day(self, day: date | datetime) -> list[MoodEntry]:
        return analytics.entries_on_day(self._derived.entries, day, self._tz)

    def _compute(self) -> DerivedState:
        derived = compute_derived_state(self._raw, self._cursor, self._clock(), self._tz)
        if derived.dropped_count:
            logging.debug("Skipped %d malformed mood records.", derived.dropped_count)
        return derived
