"""Data models for mood entries, derived views and caching."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


@dataclass
class RawEntry:
    """A mood record exactly as storage hands it over; any field may be missing."""

    id: int
    timestamp: str | datetime | None
    emoji: str | None
    comment: str | None = None


@dataclass(frozen=True)
class MoodEntry:
    """A validated, scored entry with a timezone-aware timestamp."""

    timestamp: datetime
    symbol: str
    score: int
    comment: str = ""
    id: int | None = None


@dataclass(frozen=True)
class TrendPoint:
    date: datetime
    score: float


class AnalysisMessage(Enum):
    """Sentiment category for the most recent entries."""

    VERY_GOOD = "very_good"
    MIXED = "mixed"
    LOW = "low"
    NOT_ENOUGH = "not_enough"
    EMPTY = "empty"


@dataclass(frozen=True)
class SummaryStats:
    today_count: int
    message: AnalysisMessage


@dataclass(frozen=True)
class MonthCursor:
    """The month shown by the calendar view, always pinned to its first day."""

    year: int
    month: int

    @classmethod
    def from_date(cls, value: date | datetime) -> MonthCursor:
        return cls(value.year, value.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def shift(self, months: int) -> MonthCursor:
        """Move by a signed number of months, rolling the year as needed."""
        index = self.year * 12 + (self.month - 1) + months
        return MonthCursor(index // 12, index % 12 + 1)

    def previous(self) -> MonthCursor:
        return self.shift(-1)

    def next(self) -> MonthCursor:
        return self.shift(1)


@dataclass(frozen=True)
class DayCell:
    day_number: int
    date: date
    average: float | None


@dataclass(frozen=True)
class MonthGrid:
    """Calendar cells for one month; column 0 of the grid is Sunday."""

    cursor: MonthCursor
    leading_blanks: int
    cells: tuple[DayCell, ...]


@dataclass(frozen=True)
class DerivedState:
    """Everything the views render, recomputed wholesale from one snapshot."""

    entries: tuple[MoodEntry, ...]
    day_boundaries: tuple[datetime, ...]
    trend: tuple[TrendPoint, ...]
    daily_averages: dict[date, float]
    month_grid: MonthGrid
    summary: SummaryStats
    dropped_count: int = 0
    computed_at: datetime | None = field(default=None, compare=False)

