"""
Calendar Math - weeks and months

Week number <-> calendar date conversion and month bucketing.

Week numbering is a simple offset scheme, NOT ISO-8601: week N of a year
starts on the Monday on or before ``Jan 1 + (N - 1) * 7 days``. Stored week
numbers were produced with this scheme, so every month attribution depends on
reproducing it exactly.

All functions work on naive ``datetime.date`` values (no time zones).
"""

import math
import re
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Tuple

WORKDAYS_PER_WEEK = 5

DAY_NAMES: Tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True)
class WeekRange:
    """Inclusive span of week numbers within one calendar year."""

    year: int
    start_week: int
    end_week: int


# ---------------------------------------------------------------------------
# Week <-> date
# ---------------------------------------------------------------------------


def monday_of(year: int, week_number: int) -> date:
    """
    Return the Monday starting ``week_number`` of ``year``.

    Jan 1 plus (week_number - 1) weeks, rounded back to its Monday.
    Week 14 of 2025 -> 2025-03-31.
    """
    anchor = date(year, 1, 1) + timedelta(days=(week_number - 1) * 7)
    return anchor - timedelta(days=anchor.weekday())


def date_of_weekday(week_start: date, day_index: int) -> date:
    """Monday + 0 .. Friday + 4."""
    return week_start + timedelta(days=day_index)


def week_dates(year: int, week_number: int) -> List[date]:
    """The five working dates (Mon-Fri) of a week."""
    start = monday_of(year, week_number)
    return [date_of_weekday(start, i) for i in range(WORKDAYS_PER_WEEK)]


def is_split_week(year: int, week_number: int) -> bool:
    """True when the week's Monday and Friday fall in different months."""
    dates = week_dates(year, week_number)
    return month_key_of(dates[0]) != month_key_of(dates[-1])


def week_number_of(day: date) -> int:
    """
    Week number the application stores for a date.

    Days elapsed since Jan 1, shifted by Jan 1's Sunday-based weekday,
    divided into 7-day blocks (rounded up). Agrees with ``monday_of`` for
    Monday through Saturday, except in years starting on a Sunday, where
    it runs one week behind.
    """
    first_jan = date(day.year, 1, 1)
    days = (day - first_jan).days
    sunday_based = (first_jan.weekday() + 1) % 7
    return math.ceil((days + sunday_based + 1) / 7)


def week_ranges_between(start: date, end: date) -> List[WeekRange]:
    """
    Split a date window into per-year week number ranges.

    Used to build the persistence query for a date range: one entry per
    calendar year touched, from the start date's week (or week 1) to the
    end date's week (or the last week of that year).
    """
    ranges: List[WeekRange] = []
    for year in range(start.year, end.year + 1):
        start_week = week_number_of(start) if year == start.year else 1
        if year == end.year:
            end_week = week_number_of(end)
        else:
            end_week = week_number_of(date(year, 12, 31))
        ranges.append(WeekRange(year=year, start_week=start_week, end_week=end_week))
    return ranges


# ---------------------------------------------------------------------------
# Month keys
# ---------------------------------------------------------------------------


def month_key_of(day: date) -> str:
    """Canonical ``"YYYY-MM"`` key of the month containing ``day``."""
    return f"{day.year:04d}-{day.month:02d}"


def parse_month_key(month_key: str) -> Tuple[int, int]:
    """
    Parse ``"YYYY-MM"`` into (year, month).

    Raises:
        ValueError: if the key is not zero-padded YYYY-MM with month 1-12
    """
    match = MONTH_KEY_PATTERN.match(month_key or "")
    if not match:
        raise ValueError(f"Invalid month key: {month_key!r} (expected YYYY-MM)")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in key: {month_key!r}")
    return year, month


def month_bounds(month_key: str) -> Tuple[date, date]:
    """First and last calendar day of the month named by ``month_key``."""
    year, month = parse_month_key(month_key)
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])
