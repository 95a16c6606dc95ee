"""
Week Splitter

Attributes a week's Monday-Friday hours to calendar months.
Pure business logic: no CLI imports, no I/O.

Data flow:
    five day values + (week_number, year)
        ↓ monday_of() → date of each weekday
        ↓ month_key_of() per day with hours
        ↓ group by month key
    Dict["YYYY-MM", MonthFragment]

Re-splitting an edited week carries lifecycle state forward per fragment:
a fragment whose five day values are unchanged and which is already
submitted or approved keeps its status and approval fields. Any other
fragment (changed, new, or still draft/rejected) restarts at the status of
the save with approval fields cleared, so editing a day inside an approved
month reverts that month.
"""

from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence

from hourbook.core import get_logger
from hourbook.timesheets.models import (
    DAY_FIELDS,
    MonthFragment,
    Status,
    WeeklyRecord,
    hours_value,
)
from hourbook.timesheets.weeks import date_of_weekday, monday_of, month_key_of

logger = get_logger("hourbook.timesheets.splitter")

CARRIED_STATUSES = (Status.SUBMITTED, Status.APPROVED)


def _carries_forward(existing: Optional[MonthFragment], slots: List[float]) -> bool:
    """Unchanged fragment already in review or approved."""
    return (
        existing is not None
        and existing.days == slots
        and existing.status in CARRIED_STATUSES
    )


def split_week(
    days: Sequence[Any],
    week_number: int,
    year: int,
    *,
    previous: Optional[Mapping[str, MonthFragment]] = None,
    status: Status = Status.DRAFT,
    submitted_at: Optional[str] = None,
) -> Dict[str, MonthFragment]:
    """
    Split five day values into month fragments.

    Args:
        days: Monday..Friday hours (None counts as 0)
        week_number: Stored week number (1-53)
        year: Calendar year of the week number
        previous: Existing month_hours of the record being edited
        status: Status for new or changed fragments
        submitted_at: Timestamp stamped on new or changed fragments

    Returns:
        month_hours mapping, keys sorted; months whose days are all zero are
        absent.
    """
    values = [hours_value(v) for v in days]
    if len(values) != len(DAY_FIELDS):
        raise ValueError(f"Expected {len(DAY_FIELDS)} day values, got {len(values)}")

    week_start = monday_of(year, week_number)
    groups: Dict[str, List[float]] = {}
    for index, hours in enumerate(values):
        if hours <= 0:
            continue
        key = month_key_of(date_of_weekday(week_start, index))
        slots = groups.setdefault(key, [0.0] * len(DAY_FIELDS))
        slots[index] = hours

    prior = previous or {}
    month_hours: Dict[str, MonthFragment] = {}
    for key in sorted(groups):
        slots = groups[key]
        existing = prior.get(key)
        if _carries_forward(existing, slots):
            month_hours[key] = existing.with_days(slots)
        else:
            month_hours[key] = MonthFragment(
                **dict(zip(DAY_FIELDS, slots)),
                status=status,
                submitted_at=submitted_at,
            )

    dropped = sorted(set(prior) - set(month_hours))
    if dropped:
        logger.debug("Week %s/%s: removed emptied fragments %s", week_number, year, dropped)
    logger.debug("Week %s/%s split into %s", week_number, year, list(month_hours))
    return month_hours


def submit_week(
    user_id: str,
    project_id: str,
    week_number: int,
    year: int,
    days: Sequence[Any],
    *,
    previous: Optional[WeeklyRecord] = None,
    submit: bool = True,
    submitted_at: Optional[str] = None,
) -> WeeklyRecord:
    """
    Build the record to persist for a week entry (create or full overwrite).

    When ``previous`` is the stored record for the same week and the day
    values are unchanged, a submitted or approved week keeps its lifecycle,
    so replaying a duplicate write is harmless. Otherwise the week restarts as submitted
    (or draft when ``submit`` is False) with approval fields cleared.
    The previous record is never modified.

    Args:
        user_id, project_id, week_number, year: Record identity
        days: Monday..Friday hours
        previous: Stored record being overwritten, if any
        submit: Submit for approval (True) or save as draft (False)
        submitted_at: Submission timestamp supplied by the caller

    Returns:
        New WeeklyRecord with month_hours populated
    """
    status = Status.SUBMITTED if submit else Status.DRAFT
    stamp = submitted_at if submit else None
    record = WeeklyRecord(
        id=previous.id if previous else None,
        user_id=user_id,
        project_id=project_id,
        week_number=week_number,
        year=year,
        status=status,
        submitted_at=stamp,
    ).with_days(days)

    record.month_hours = split_week(
        record.days,
        week_number,
        year,
        previous=previous.month_hours if previous else None,
        status=status,
        submitted_at=stamp,
    )

    unchanged = previous is not None and previous.days == record.days
    if unchanged and previous.status in CARRIED_STATUSES:
        record.status = previous.status
        record.submitted_at = previous.submitted_at
        record.approved_by = previous.approved_by
        record.approved_at = previous.approved_at
        record.rejection_reason = previous.rejection_reason

    logger.debug(
        "Saved week %s/%s for user %s project %s: %s (%.2f h)",
        week_number, year, user_id, project_id, record.status.value, record.total_hours,
    )
    return record


def refresh_month_hours(record: WeeklyRecord) -> WeeklyRecord:
    """
    Recompute month_hours from the record's own day values.

    Repairs legacy rows stored without (or with inconsistent) fragments.
    Fragments whose values already match keep their lifecycle; the rest take
    the week-level status.
    """
    month_hours = split_week(
        record.days,
        record.week_number,
        record.year,
        previous=record.month_hours,
        status=record.status,
        submitted_at=record.submitted_at,
    )
    return replace(record, month_hours=month_hours)
