"""
Month Aggregator / Status Resolver

Reads split data back out of a WeeklyRecord's month_hours. This is the only
place that decides which month a week's hours belong to; callers must not
derive it from week_number/year alone, which would put all of a split week
in one month.

A record with missing or null month_hours reads as "no data" (0 hours, not
in any month) rather than raising.
"""

from typing import Iterable, List, Optional

from hourbook.timesheets.models import MonthFragment, Status, WeeklyRecord


def _fragment(record: WeeklyRecord, month_key: str) -> Optional[MonthFragment]:
    month_hours = getattr(record, "month_hours", None) or {}
    return month_hours.get(month_key)


def hours_for_month(record: WeeklyRecord, month_key: str) -> float:
    """Sum of the month fragment's five values (2 decimals); 0 if absent."""
    fragment = _fragment(record, month_key)
    if fragment is None:
        return 0.0
    return round(fragment.total_hours, 2)


def is_in_month(record: WeeklyRecord, month_key: str) -> bool:
    """True iff a fragment exists for the month and has a non-zero day."""
    fragment = _fragment(record, month_key)
    return fragment is not None and fragment.has_hours()


def status_for_month(record: WeeklyRecord, month_key: str) -> Optional[Status]:
    """The fragment's own status; None if the record has no such fragment."""
    fragment = _fragment(record, month_key)
    return fragment.status if fragment is not None else None


def effective_status(record: WeeklyRecord, month_key: Optional[str] = None) -> Status:
    """Month status when a fragment exists, otherwise the week-level status."""
    if month_key is not None:
        status = status_for_month(record, month_key)
        if status is not None:
            return status
    return record.status


def months_of(record: WeeklyRecord) -> List[str]:
    """Sorted month keys the record has hours in."""
    month_hours = getattr(record, "month_hours", None) or {}
    return sorted(key for key in month_hours if is_in_month(record, key))


def records_in_month(records: Iterable[WeeklyRecord], month_key: str) -> List[WeeklyRecord]:
    return [r for r in records if is_in_month(r, month_key)]
