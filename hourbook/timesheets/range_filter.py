"""
Range Filter

Re-slices weekly records to an arbitrary [start, end] date window for
custom-range reports and exports. Works from day-level dates rebuilt with
monday_of(), independent of month bucketing.

Returns new records; inputs are never modified because the unfiltered
versions feed other views.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from hourbook.core import get_logger
from hourbook.timesheets.models import DAY_FIELDS, MonthFragment, WeeklyRecord
from hourbook.timesheets.weeks import date_of_weekday, monday_of, month_key_of

logger = get_logger("hourbook.timesheets.range_filter")


def _in_range(day: date, start: date, end: date) -> bool:
    return start <= day <= end


def filter_record(record: WeeklyRecord, start: date, end: date) -> Optional[WeeklyRecord]:
    """
    Restrict one record to the window.

    Day values outside [start, end] become 0 in the week and in every
    fragment; a fragment survives only with a non-zero day left (its
    lifecycle fields are kept). Returns None when nothing survives.
    """
    week_start = monday_of(record.year, record.week_number)
    dates = [date_of_weekday(week_start, i) for i in range(len(DAY_FIELDS))]
    keep = [_in_range(d, start, end) for d in dates]

    days = [h if k else 0.0 for h, k in zip(record.days, keep)]

    month_hours: Dict[str, MonthFragment] = {}
    for month_key, fragment in (record.month_hours or {}).items():
        filtered = [
            h if keep[i] and month_key_of(dates[i]) == month_key else 0.0
            for i, h in enumerate(fragment.days)
        ]
        if any(h > 0 for h in filtered):
            month_hours[month_key] = fragment.with_days(filtered)

    result = record.with_days(days)
    result.month_hours = month_hours
    if result.total_hours == 0 and not month_hours:
        return None
    return result


def filter_by_date_range(
    records: Iterable[WeeklyRecord], start: date, end: date
) -> List[WeeklyRecord]:
    """
    Filter records to [start, end] inclusive, dropping records left empty.

    ``start > end`` is a valid, vacuous window and yields an empty list.
    """
    result = []
    dropped = 0
    for record in records:
        filtered = filter_record(record, start, end)
        if filtered is None:
            dropped += 1
        else:
            result.append(filtered)
    logger.debug(
        "Range %s..%s: kept %d record(s), dropped %d", start, end, len(result), dropped
    )
    return result
