"""
Calendar helpers: UTC normalisation, the closed month enumeration and the
half-open monthly window used by the aggregator.
"""

from __future__ import annotations

import enum
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalise a potentially-naive timestamp to UTC-aware.

    SQLite hands timestamps back without tzinfo; everything this app
    writes is UTC, so a naive value is read as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in UTC (the attendance record key)."""
    return ensure_utc(moment).date()  # type: ignore[union-attr]


class Month(str, enum.Enum):
    JANUARY = "January"
    FEBRUARY = "February"
    MARCH = "March"
    APRIL = "April"
    MAY = "May"
    JUNE = "June"
    JULY = "July"
    AUGUST = "August"
    SEPTEMBER = "September"
    OCTOBER = "October"
    NOVEMBER = "November"
    DECEMBER = "December"

    @property
    def number(self) -> int:
        """1-based month number."""
        return list(Month).index(self) + 1

    @classmethod
    def from_number(cls, number: int) -> "Month":
        return list(cls)[number - 1]


def month_window(month: Month, year: int) -> tuple[datetime, datetime]:
    """Return ``[start, end)`` for the month: first instant and first instant of the next."""
    start = datetime(year, month.number, 1, tzinfo=timezone.utc)
    if month.number == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month.number + 1, 1, tzinfo=timezone.utc)
    return start, end
