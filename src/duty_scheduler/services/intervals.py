"""Inclusive calendar-date range arithmetic shared by every schedule component."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Literal

RangeKind = Literal["week", "weekend", "week/end"]


class InvalidRangeError(ValueError):
    """Raised when a date range is inverted or too short for the operation."""


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return days_inclusive(self.start, self.end)


def days_inclusive(start: date, end: date) -> int:
    """Return the number of calendar days covered by ``start..end``."""

    if end < start:
        raise InvalidRangeError(f"range end {end.isoformat()} is before start {start.isoformat()}")
    return (end - start).days + 1


def add_days(day: date, n: int) -> date:
    return day + timedelta(days=n)


def contains(date_range: DateRange, day: date) -> bool:
    return date_range.start <= day <= date_range.end


def midpoint_split(date_range: DateRange) -> tuple[DateRange, DateRange | None]:
    """Split *date_range* in two contiguous halves, the second one taking the odd day.

    A single-day range cannot be split: the first half is the range itself and
    the second half is ``None``.
    """

    total = date_range.days
    first_len = total // 2
    if first_len == 0:
        return date_range, None
    first = DateRange(date_range.start, add_days(date_range.start, first_len - 1))
    second = DateRange(add_days(date_range.start, first_len), date_range.end)
    return first, second


def parse_iso_date(value: object) -> date:
    """Coerce a stored or spreadsheet value to a :class:`date`."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()[:10]
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidRangeError(f"not an ISO date: {value!r}") from exc


def is_weekend(day: date) -> bool:
    # Saturday is weekday 5, Sunday is 6
    return day.weekday() >= 5


def range_kind(start: date, end: date) -> RangeKind:
    """Describe which part of the week ``start..end`` covers."""

    total = days_inclusive(start, end)
    has_weekday = False
    has_weekend = False
    # A full week always contains both kinds of day.
    for offset in range(min(total, 7)):
        if is_weekend(add_days(start, offset)):
            has_weekend = True
        else:
            has_weekday = True
    if has_weekday and has_weekend:
        return "week/end"
    if has_weekend:
        return "weekend"
    return "week"


__all__ = [
    "DateRange",
    "InvalidRangeError",
    "RangeKind",
    "add_days",
    "contains",
    "days_inclusive",
    "is_weekend",
    "midpoint_split",
    "parse_iso_date",
    "range_kind",
]
