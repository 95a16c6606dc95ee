"""
Timesheets - week-to-month splitting and reporting engine.

Usage:
    from hourbook.timesheets import split_week, hours_for_month, filter_by_date_range
"""

from hourbook.timesheets.models import MonthFragment, Project, Status, User, WeeklyRecord
from hourbook.timesheets.months import (
    hours_for_month,
    is_in_month,
    months_of,
    status_for_month,
)
from hourbook.timesheets.range_filter import filter_by_date_range
from hourbook.timesheets.rollup import View, utilization
from hourbook.timesheets.splitter import split_week, submit_week
from hourbook.timesheets.weeks import date_of_weekday, monday_of, month_key_of

__all__ = [
    "MonthFragment",
    "Project",
    "Status",
    "User",
    "WeeklyRecord",
    "hours_for_month",
    "is_in_month",
    "months_of",
    "status_for_month",
    "filter_by_date_range",
    "View",
    "utilization",
    "split_week",
    "submit_week",
    "date_of_weekday",
    "monday_of",
    "month_key_of",
]
