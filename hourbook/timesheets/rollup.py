"""
Aggregation / Rollup Engine

Combines many weekly records into per-user, per-project, per-week and
per-month totals and utilization for dashboards and exports.
Pure functions: no I/O, no state kept between calls.

Every reducer reads hours through a View:
    View.all()              → the record's full week total
    View.month("2025-04")   → the record's fragment for that month
    View.range(start, end)  → total of filter_record() over the window
so a split week is never counted whole in a month or range report.

Totals accumulate at full precision and are rounded once, on output.
"""

import locale
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from hourbook.core import get_config_value
from hourbook.timesheets.models import Project, Status, User, WeeklyRecord
from hourbook.timesheets.months import effective_status, is_in_month
from hourbook.timesheets.range_filter import filter_record


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class View:
    mode: str = "all"
    month_key: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def all(cls) -> "View":
        return cls()

    @classmethod
    def month(cls, month_key: str) -> "View":
        return cls(mode="month", month_key=month_key)

    @classmethod
    def range(cls, start: date, end: date) -> "View":
        return cls(mode="range", start=start, end=end)

    @property
    def label(self) -> str:
        if self.mode == "month":
            return self.month_key
        if self.mode == "range":
            return f"{self.start.isoformat()} to {self.end.isoformat()}"
        return "All Data (Full History)"


def view_entries(
    records: Iterable[WeeklyRecord], view: View
) -> List[Tuple[WeeklyRecord, float]]:
    """
    Records visible in ``view`` paired with their unrounded hours.

    Range views return the filtered copy of each record, so day values and
    month_hours already match the window.
    """
    entries: List[Tuple[WeeklyRecord, float]] = []
    for record in records:
        if view.mode == "month":
            if is_in_month(record, view.month_key):
                entries.append((record, record.month_hours[view.month_key].total_hours))
        elif view.mode == "range":
            filtered = filter_record(record, view.start, view.end)
            if filtered is not None:
                entries.append((filtered, filtered.total_hours))
        else:
            entries.append((record, record.total_hours))
    return entries


def select(records: Iterable[WeeklyRecord], view: View) -> List[WeeklyRecord]:
    return [record for record, _ in view_entries(records, view)]


def hours_in_view(record: WeeklyRecord, view: View) -> float:
    entries = view_entries([record], view)
    return entries[0][1] if entries else 0.0


# ---------------------------------------------------------------------------
# Rounding, ratios, ordering
# ---------------------------------------------------------------------------


def round_hours(value: float) -> float:
    places = get_config_value("timesheets", "rounding_places", default=2)
    return round(value, places)


def utilization(used_hours: float, allocated_hours: Optional[float]) -> float:
    """Used / allocated * 100; 0 when nothing is allocated. Not clamped."""
    if not allocated_hours:
        return 0.0
    return round_hours(used_hours / allocated_hours * 100)


def name_key(name: Optional[str]) -> str:
    """Locale-aware, case-insensitive sort key for display names."""
    return locale.strxfrm((name or "").casefold())


def sort_by_name(items: Iterable[Any], name_of: Callable[[Any], str]) -> List[Any]:
    return sorted(items, key=lambda item: name_key(name_of(item)))


def sort_by_hours(
    items: Iterable[Any],
    hours_of: Callable[[Any], float],
    name_of: Callable[[Any], str],
) -> List[Any]:
    """Descending hours; ties broken by name ascending."""
    return sorted(items, key=lambda item: (-hours_of(item), name_key(name_of(item))))


def week_group_key(user_id: str, week_number: int, year: int) -> str:
    return f"{user_id}-{week_number}-{year}"


# ---------------------------------------------------------------------------
# Group-by reducers
# ---------------------------------------------------------------------------


def _total_by(
    records: Iterable[WeeklyRecord], view: View, key_of: Callable[[WeeklyRecord], Any]
) -> Dict[Any, float]:
    totals: Dict[Any, float] = defaultdict(float)
    for record, hours in view_entries(records, view):
        totals[key_of(record)] += hours
    return {key: round_hours(value) for key, value in totals.items()}


def hours_by_user(records: Iterable[WeeklyRecord], view: View = View()) -> Dict[str, float]:
    return _total_by(records, view, lambda r: r.user_id)


def hours_by_project(records: Iterable[WeeklyRecord], view: View = View()) -> Dict[str, float]:
    return _total_by(records, view, lambda r: r.project_id)


def hours_by_project_user(
    records: Iterable[WeeklyRecord], view: View = View()
) -> Dict[Tuple[str, str], float]:
    return _total_by(records, view, lambda r: (r.project_id, r.user_id))


def hours_by_week(
    records: Iterable[WeeklyRecord], view: View = View()
) -> Dict[Tuple[int, int], float]:
    """Totals keyed by (year, week_number)."""
    return _total_by(records, view, lambda r: (r.year, r.week_number))


def total_hours(records: Iterable[WeeklyRecord], view: View = View()) -> float:
    return round_hours(sum(hours for _, hours in view_entries(records, view)))


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


@dataclass
class ProjectHours:
    project_id: str
    name: str
    hours: float


@dataclass
class WeekHours:
    year: int
    week_number: int
    hours: float


@dataclass
class UserSummary:
    user_id: str
    name: str
    total_hours: float
    project_hours: List[ProjectHours] = field(default_factory=list)
    weekly_hours: List[WeekHours] = field(default_factory=list)


@dataclass
class ContributorHours:
    user_id: str
    name: str
    hours: float


@dataclass
class ProjectUtilization:
    project_id: str
    name: str
    allocated_hours: float
    used_hours: float
    remaining_hours: float
    utilization: float
    contributors: List[ContributorHours] = field(default_factory=list)


@dataclass
class WeekGroup:
    key: str
    user_id: str
    week_number: int
    year: int
    total_hours: float
    records: List[WeeklyRecord] = field(default_factory=list)


@dataclass
class DashboardStats:
    total_hours: float = 0.0
    active_projects: int = 0
    pending_submissions: int = 0
    approved_submissions: int = 0


def _user_name(users: Mapping[str, User], user_id: str) -> str:
    user = users.get(user_id)
    return user.display_name if user else user_id


def _project_name(projects: Mapping[str, Project], project_id: str) -> str:
    project = projects.get(project_id)
    return project.name if project else project_id


def user_summaries(
    records: Iterable[WeeklyRecord],
    users: Mapping[str, User],
    projects: Mapping[str, Project],
    view: View = View(),
) -> List[UserSummary]:
    """
    Per-user totals with project and week breakdowns.

    Users sorted by name; each user's projects by hours (desc), weeks by
    (year, week_number).
    """
    totals: Dict[str, float] = defaultdict(float)
    per_project: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    per_week: Dict[str, Dict[Tuple[int, int], float]] = defaultdict(lambda: defaultdict(float))

    for record, hours in view_entries(records, view):
        totals[record.user_id] += hours
        per_project[record.user_id][record.project_id] += hours
        per_week[record.user_id][(record.year, record.week_number)] += hours

    summaries = []
    for user_id, total in totals.items():
        project_hours = [
            ProjectHours(project_id=pid, name=_project_name(projects, pid), hours=round_hours(h))
            for pid, h in per_project[user_id].items()
        ]
        weekly_hours = [
            WeekHours(year=year, week_number=week, hours=round_hours(h))
            for (year, week), h in sorted(per_week[user_id].items())
        ]
        summaries.append(UserSummary(
            user_id=user_id,
            name=_user_name(users, user_id),
            total_hours=round_hours(total),
            project_hours=sort_by_hours(project_hours, lambda p: p.hours, lambda p: p.name),
            weekly_hours=weekly_hours,
        ))
    return sort_by_name(summaries, lambda s: s.name)


def project_utilization(
    records: Iterable[WeeklyRecord],
    projects: Mapping[str, Project],
    users: Mapping[str, User],
    view: View = View(),
    *,
    include_idle: bool = False,
) -> List[ProjectUtilization]:
    """
    Used vs. allocated hours per project, with contributor breakdown.

    Projects without hours in the view are left out unless ``include_idle``.
    Sorted by utilization (desc), then name.
    """
    used: Dict[str, float] = defaultdict(float)
    per_user: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    for record, hours in view_entries(records, view):
        used[record.project_id] += hours
        per_user[record.project_id][record.user_id] += hours

    project_ids = set(used)
    if include_idle:
        project_ids |= set(projects)

    results = []
    for pid in project_ids:
        project = projects.get(pid)
        allocated = (project.allocated_hours if project else None) or 0.0
        used_hours = used.get(pid, 0.0)
        if not include_idle and used_hours <= 0:
            continue
        contributors = [
            ContributorHours(user_id=uid, name=_user_name(users, uid), hours=round_hours(h))
            for uid, h in per_user[pid].items()
        ]
        results.append(ProjectUtilization(
            project_id=pid,
            name=_project_name(projects, pid),
            allocated_hours=allocated,
            used_hours=round_hours(used_hours),
            remaining_hours=round_hours(allocated - used_hours),
            utilization=utilization(used_hours, allocated),
            contributors=sort_by_hours(contributors, lambda c: c.hours, lambda c: c.name),
        ))
    return sort_by_hours(results, lambda p: p.utilization, lambda p: p.name)


def week_groups(records: Iterable[WeeklyRecord], view: View = View()) -> List[WeekGroup]:
    """
    Group records sharing (user, week, year), e.g. for the approval queue.

    Ordered by year, week_number, then user_id.
    """
    groups: Dict[str, WeekGroup] = {}
    totals: Dict[str, float] = defaultdict(float)
    for record, hours in view_entries(records, view):
        key = week_group_key(record.user_id, record.week_number, record.year)
        group = groups.get(key)
        if group is None:
            group = groups[key] = WeekGroup(
                key=key,
                user_id=record.user_id,
                week_number=record.week_number,
                year=record.year,
                total_hours=0.0,
            )
        group.records.append(record)
        totals[key] += hours

    for key, group in groups.items():
        group.total_hours = round_hours(totals[key])
    return sorted(groups.values(), key=lambda g: (g.year, g.week_number, g.user_id))


def weekly_series(
    records: Iterable[WeeklyRecord],
    view: View = View(),
    *,
    projects: Optional[Mapping[str, Project]] = None,
    by_project: bool = False,
) -> List[Dict[str, Any]]:
    """
    Chart rows, one per week in (year, week) order.

    Each row has "week" ("Week 14"), "year", "week_number" and either
    "hours" or, with ``by_project``, one column per project name (0 where
    a project has no hours that week).
    """
    cells: Dict[Tuple[int, int], Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    names = set()
    for record, hours in view_entries(records, view):
        column = _project_name(projects or {}, record.project_id) if by_project else "hours"
        names.add(column)
        cells[(record.year, record.week_number)][column] += hours

    rows = []
    for (year, week), values in sorted(cells.items()):
        row: Dict[str, Any] = {"week": f"Week {week}", "year": year, "week_number": week}
        for column in sorted(names, key=name_key):
            row[column] = round_hours(values.get(column, 0.0))
        rows.append(row)
    return rows


def dashboard_stats(records: Iterable[WeeklyRecord], view: View = View()) -> DashboardStats:
    """
    Headline numbers: total hours, projects with hours, and submission
    counts (month views count each record's status for that month).
    """
    entries = view_entries(records, view)
    if not entries:
        return DashboardStats()

    month_key = view.month_key if view.mode == "month" else None
    statuses = [effective_status(record, month_key) for record, _ in entries]
    project_hours: Dict[str, float] = defaultdict(float)
    for record, hours in entries:
        project_hours[record.project_id] += hours

    return DashboardStats(
        total_hours=round_hours(sum(hours for _, hours in entries)),
        active_projects=sum(1 for h in project_hours.values() if h > 0),
        pending_submissions=statuses.count(Status.SUBMITTED),
        approved_submissions=statuses.count(Status.APPROVED),
    )


# ---------------------------------------------------------------------------
# Filtering and sorting of record lists
# ---------------------------------------------------------------------------


def filter_records(
    records: Iterable[WeeklyRecord],
    *,
    user_ids: Optional[Sequence[str]] = None,
    project_ids: Optional[Sequence[str]] = None,
) -> List[WeeklyRecord]:
    """Keep records of the given users/projects; empty or None means any."""
    return [
        r for r in records
        if (not user_ids or r.user_id in user_ids)
        and (not project_ids or r.project_id in project_ids)
    ]


SORT_FIELDS = ("user", "project", "week", "total_hours")


def sort_records(
    records: Iterable[WeeklyRecord],
    field_name: str = "week",
    *,
    descending: bool = False,
    users: Optional[Mapping[str, User]] = None,
    projects: Optional[Mapping[str, Project]] = None,
) -> List[WeeklyRecord]:
    """
    Sort records by "user" (display name), "project" (name), "week"
    ((year, week_number)), "total_hours", or any other record attribute.
    Stable, so equal keys keep their input order.
    """
    users = users or {}
    projects = projects or {}

    if field_name == "user":
        key = lambda r: name_key(_user_name(users, r.user_id))  # noqa: E731
    elif field_name == "project":
        key = lambda r: name_key(_project_name(projects, r.project_id))  # noqa: E731
    elif field_name == "week":
        key = lambda r: (r.year, r.week_number)  # noqa: E731
    elif field_name == "total_hours":
        key = lambda r: r.total_hours  # noqa: E731
    else:
        def key(r):
            value = getattr(r, field_name)
            # None sorts after any value
            return (value is None, value if value is not None else 0)

    return sorted(records, key=key, reverse=descending)
