"""
Export Serializer

Turns timesheet records into a spreadsheet-like structure: a Summary sheet
with one row per entity plus one sheet per entity holding merged weekly
rows (five day rows, a bold "Weekly Total" row) and a grand total.

No file format here. Cells carry values and styling intent (bold, size,
fill colour, alignment); hourbook.timesheets.excel renders them with
openpyxl.

Day dates shown on every row are rebuilt with monday_of(), the same
calendar math the month split uses, so an export never disagrees with the
month reports about which date (and month) an hour belongs to.
"""

import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from hourbook.core import get_config_value, get_logger
from hourbook.timesheets.models import Project, User, WeeklyRecord
from hourbook.timesheets.rollup import name_key, round_hours
from hourbook.timesheets.weeks import DAY_NAMES, week_dates

logger = get_logger("hourbook.timesheets.export")

DateRange = Optional[Tuple[date, date]]

WEEK_TABLE_HEADERS = ["Week Number", "Year", "Date", "Day", "Hours", "Month"]
ALL_DATA_LABEL = "All Data (Full History)"
INVALID_SHEET_CHARS = re.compile(r"[:\\/?*\[\]]")


# ---------------------------------------------------------------------------
# Tabular structure
# ---------------------------------------------------------------------------


@dataclass
class Cell:
    value: Any = ""
    bold: bool = False
    size: Optional[int] = None
    fill: Optional[str] = None
    align: Optional[str] = None


Row = List[Optional[Cell]]


@dataclass
class Sheet:
    name: str
    rows: List[Row] = field(default_factory=list)
    column_widths: List[int] = field(default_factory=list)
    freeze_rows: int = 0

    def append(self, *cells: Any) -> None:
        """Append a row; plain values become unstyled cells, None stays empty."""
        self.rows.append([c if isinstance(c, Cell) or c is None else Cell(c) for c in cells])

    def blank(self) -> None:
        self.rows.append([])

    def values(self) -> List[List[Any]]:
        """Cell values only (empty cells as "")."""
        return [[c.value if c is not None else "" for c in row] for row in self.rows]


@dataclass
class Workbook:
    filename: str
    sheets: List[Sheet] = field(default_factory=list)

    def sheet(self, name: str) -> Sheet:
        for s in self.sheets:
            if s.name == name:
                return s
        raise KeyError(name)


def _fill(kind: str) -> str:
    defaults = {"header": "FFD966", "table_header": "BDD7EE", "alternate_row": "F2F2F2"}
    return get_config_value("export", "fills", kind, default=defaults[kind])


def _bold(value: Any, **style: Any) -> Cell:
    return Cell(value, bold=True, **style)


# ---------------------------------------------------------------------------
# Labels and names
# ---------------------------------------------------------------------------


def date_range_label(date_range: DateRange) -> str:
    """Label like "31-Mar-25 to 04-Apr-25"; the full-history label for no range."""
    if not date_range:
        return ALL_DATA_LABEL
    fmt = get_config_value("export", "date_label_format", default="%d-%b-%y")
    start, end = date_range
    return f"{start.strftime(fmt)} to {end.strftime(fmt)}"


def export_filename(
    prefix: str, date_range: DateRange, generated_at: Optional[datetime] = None
) -> str:
    """
    Workbook file name; the timestamp is appended only when supplied.

    Path separators and the other characters sheet names reject become
    spaces, so an entity name never turns into a directory.
    """
    label = date_range_label(date_range) if date_range else "All Data"
    stem = " ".join(INVALID_SHEET_CHARS.sub(" ", prefix or "Export").split()) or "Export"
    name = f"{stem}-{label}"
    if generated_at is not None:
        fmt = get_config_value("export", "file_stamp_format", default="%d%m%y-%H%M%S")
        name += f" ({generated_at.strftime(fmt)})"
    return f"{name}.xlsx"


def safe_sheet_name(name: str, used: Set[str]) -> str:
    """
    Spreadsheet-safe, unique sheet name.

    Replaces : \\ / ? * [ ] with spaces, truncates to the configured limit
    (31) and appends " (2)", " (3)" ... on collisions.
    """
    limit = get_config_value("export", "max_sheet_name", default=31)
    base = INVALID_SHEET_CHARS.sub(" ", name or "Sheet").strip()[:limit] or "Sheet"
    candidate = base
    counter = 2
    while candidate.lower() in {u.lower() for u in used}:
        suffix = f" ({counter})"
        candidate = base[: limit - len(suffix)] + suffix
        counter += 1
    used.add(candidate)
    return candidate


def auto_widths(sheet: Sheet, *, narrow: Optional[Dict[int, int]] = None) -> List[int]:
    """Column widths from the longest value (min 10) plus padding."""
    columns = max((len(r) for r in sheet.rows), default=0)
    widths = []
    for col in range(columns):
        if narrow and col in narrow:
            widths.append(narrow[col])
            continue
        longest = 10
        for row in sheet.rows:
            if col < len(row) and row[col] is not None:
                longest = max(longest, len(str(row[col].value)))
        widths.append(longest + 2)
    return widths


# ---------------------------------------------------------------------------
# Merged week rows
# ---------------------------------------------------------------------------


@dataclass
class MergedWeek:
    year: int
    week_number: int
    hours: List[float] = field(default_factory=lambda: [0.0] * len(DAY_NAMES))
    dates: List[Optional[date]] = field(default_factory=lambda: [None] * len(DAY_NAMES))

    @property
    def total(self) -> float:
        return sum(self.hours)


def merge_weeks(records: Iterable[WeeklyRecord], date_range: DateRange = None) -> List[MergedWeek]:
    """
    Merge the month fragments of records into one row set per week.

    Each fragment day inside ``date_range`` (all days when None) adds its
    hours to that weekday and fixes its date. Weeks are keyed by
    (year, week_number) and returned in that order.
    """
    merged: Dict[Tuple[int, int], MergedWeek] = {}
    for record in records:
        dates = week_dates(record.year, record.week_number)
        for month_key in sorted(record.month_hours or {}):
            fragment = record.month_hours[month_key]
            for i, hours in enumerate(fragment.days):
                day = dates[i]
                if date_range and not (date_range[0] <= day <= date_range[1]):
                    continue
                key = (record.year, record.week_number)
                week = merged.get(key)
                if week is None:
                    week = merged[key] = MergedWeek(year=record.year, week_number=record.week_number)
                week.hours[i] += hours
                week.dates[i] = day
    return [merged[k] for k in sorted(merged)]


def _append_week_table(sheet: Sheet, weeks: List[MergedWeek]) -> float:
    """Write the week table; returns the total hours written."""
    header_fill = _fill("table_header")
    sheet.append(*[_bold(h, fill=header_fill) for h in WEEK_TABLE_HEADERS])

    grand_total = 0.0
    for week in weeks:
        for i, day in enumerate(week.dates):
            if day is None:
                continue
            fill = _fill("alternate_row") if len(sheet.rows) % 2 == 1 else None
            sheet.append(
                Cell(week.week_number, fill=fill),
                Cell(day.year, fill=fill, align="center"),
                Cell(day.isoformat(), fill=fill),
                Cell(DAY_NAMES[i], fill=fill),
                Cell(round_hours(week.hours[i]), fill=fill),
                Cell(day.strftime("%B"), fill=fill),
            )
        sheet.append(None, None, None, _bold("Weekly Total"), _bold(round_hours(week.total)), None)
        sheet.blank()
        grand_total += week.total
    return grand_total


def _group(records: Iterable[WeeklyRecord], attr: str) -> Dict[str, List[WeeklyRecord]]:
    groups: Dict[str, List[WeeklyRecord]] = defaultdict(list)
    for r in records:
        groups[getattr(r, attr)].append(r)
    return groups


def _hours(records: Iterable[WeeklyRecord], date_range: DateRange) -> float:
    return sum(w.total for w in merge_weeks(records, date_range))


def _user_label(users: Mapping[str, User], user_id: str) -> str:
    user = users.get(user_id)
    return user.display_name if user else user_id


def _project(projects: Mapping[str, Project], project_id: str) -> Project:
    return projects.get(project_id) or Project(id=project_id, name=project_id)


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------


def export_projects(
    records: Iterable[WeeklyRecord],
    projects: Mapping[str, Project],
    users: Mapping[str, User],
    date_range: DateRange = None,
    *,
    generated_at: Optional[datetime] = None,
) -> Workbook:
    """
    All projects: Summary sheet plus one sheet per project with a week table
    per contributing user.
    """
    records = list(records)
    by_project = _group(records, "project_id")
    project_ids = sorted(
        set(projects) | set(by_project),
        key=lambda pid: name_key(_project(projects, pid).name),
    )

    workbook = Workbook(filename=export_filename("Projects", date_range, generated_at))
    used_names: Set[str] = set()

    summary = Sheet(name=safe_sheet_name("Summary", used_names))
    summary.append(_bold("Summary", size=14))
    summary.append(_bold("Date Range"), date_range_label(date_range))
    header_fill = _fill("header")
    summary.append(*[
        _bold(h, fill=header_fill)
        for h in ["Project Name", "Description", "Allocated Hours", "Status", "Client",
                  "Total Hours Worked"]
    ])
    workbook.sheets.append(summary)

    for pid in project_ids:
        project = _project(projects, pid)
        project_records = by_project.get(pid, [])
        summary.append(
            project.name,
            project.description or "N/A",
            project.allocated_hours if project.allocated_hours is not None else 0,
            project.status,
            project.client_name or "N/A",
            round_hours(_hours(project_records, date_range)),
        )

        sheet = Sheet(name=safe_sheet_name(project.name, used_names))
        sheet.append(_bold("Project Name", size=12, fill=_fill("table_header")), _bold(project.name))
        sheet.append(_bold("Description"), project.description or "N/A")
        sheet.append(_bold("Allocated Hours"), project.allocated_hours or 0)
        sheet.append(_bold("Status"), project.status)
        sheet.append(_bold("Client"), project.client_name or "N/A")
        sheet.blank()

        project_total = 0.0
        by_user = _group(project_records, "user_id")
        for uid in sorted(by_user, key=lambda u: name_key(_user_label(users, u))):
            user = users.get(uid)
            sheet.append(_bold("User Name", fill=header_fill),
                         _bold(_user_label(users, uid), fill=header_fill))
            sheet.append(_bold("Email", fill=header_fill),
                         _bold((user.email if user else None) or "N/A", fill=header_fill))
            project_total += _append_week_table(sheet, merge_weeks(by_user[uid], date_range))
            sheet.blank()

        sheet.append(None, None, None, _bold("Total Hours Worked"),
                     _bold(round_hours(project_total)), None)
        sheet.column_widths = auto_widths(sheet, narrow={1: 6})
        workbook.sheets.append(sheet)

    summary.column_widths = auto_widths(summary)
    logger.info("Built project export %s (%d sheets)", workbook.filename, len(workbook.sheets))
    return workbook


def export_project_by_users(
    project: Project,
    records: Iterable[WeeklyRecord],
    users: Mapping[str, User],
    date_range: DateRange = None,
    *,
    generated_at: Optional[datetime] = None,
) -> Workbook:
    """
    One project: Summary of contributors (by hours, desc) plus one sheet per
    user.
    """
    records = [r for r in records if r.project_id == project.id]
    by_user = _group(records, "user_id")
    user_hours = {uid: _hours(rs, date_range) for uid, rs in by_user.items()}
    user_ids = [uid for uid in by_user if user_hours[uid] > 0]
    user_ids.sort(key=lambda u: (-user_hours[u], name_key(_user_label(users, u))))
    total = sum(user_hours[u] for u in user_ids)

    workbook = Workbook(
        filename=export_filename(f"{project.name} - Users", date_range, generated_at)
    )
    used_names: Set[str] = set()

    summary = Sheet(name=safe_sheet_name("Summary", used_names), freeze_rows=7)
    summary.append(_bold("Project Name"), project.name)
    summary.append(_bold("Total Allocated Hours"), project.allocated_hours or 0)
    summary.append(_bold("Date Range"), date_range_label(date_range))
    summary.append(_bold("Total Users Worked"), len(user_ids))
    summary.append(_bold("Total Hours Worked"), round_hours(total))
    summary.blank()
    header_fill = _fill("header")
    summary.append(*[_bold(h, fill=header_fill)
                     for h in ["Name", "Email", "Designation", "Hours Worked"]])
    for uid in user_ids:
        user = users.get(uid)
        summary.append(
            _user_label(users, uid),
            (user.email if user else None) or "",
            (user.designation if user else None) or "",
            round_hours(user_hours[uid]),
        )
    summary.column_widths = auto_widths(summary)
    workbook.sheets.append(summary)

    for uid in user_ids:
        user = users.get(uid)
        sheet = Sheet(name=safe_sheet_name(_user_label(users, uid), used_names))
        sheet.append(_bold("Project Name"), project.name)
        sheet.append(_bold("Name"), _user_label(users, uid))
        sheet.append(_bold("Email"), (user.email if user else None) or "")
        sheet.append(_bold("Designation"), (user.designation if user else None) or "")
        sheet.append(_bold("Total Hours"), round_hours(user_hours[uid]))
        sheet.blank()
        _append_week_table(sheet, merge_weeks(by_user[uid], date_range))
        sheet.column_widths = auto_widths(sheet, narrow={1: 6})
        workbook.sheets.append(sheet)

    logger.info("Built project/users export %s (%d users)", workbook.filename, len(user_ids))
    return workbook


def export_user_by_projects(
    user: User,
    records: Iterable[WeeklyRecord],
    projects: Mapping[str, Project],
    date_range: DateRange = None,
    *,
    generated_at: Optional[datetime] = None,
) -> Workbook:
    """One user: Summary of projects plus one sheet per project."""
    records = [r for r in records if r.user_id == user.id]
    by_project = _group(records, "project_id")
    project_hours = {pid: _hours(rs, date_range) for pid, rs in by_project.items()}
    project_ids = [pid for pid in by_project if project_hours[pid] > 0]
    project_ids.sort(key=lambda p: name_key(_project(projects, p).name))

    workbook = Workbook(
        filename=export_filename(user.display_name, date_range, generated_at)
    )
    used_names: Set[str] = set()

    summary = Sheet(name=safe_sheet_name("Summary", used_names))
    summary.append(_bold("Name"), user.display_name)
    summary.append(_bold("Email"), user.email or "")
    summary.append(_bold("Date Range"), date_range_label(date_range))
    summary.append(_bold("Total Projects"), len(project_ids))
    summary.append(_bold("Total Hours Worked"),
                   round_hours(sum(project_hours[p] for p in project_ids)))
    summary.blank()
    header_fill = _fill("header")
    summary.append(*[_bold(h, fill=header_fill)
                     for h in ["Project Name", "Client", "Allocated Hours", "Hours Worked"]])
    for pid in project_ids:
        project = _project(projects, pid)
        summary.append(
            project.name,
            project.client_name or "N/A",
            project.allocated_hours or 0,
            round_hours(project_hours[pid]),
        )
    summary.column_widths = auto_widths(summary)
    workbook.sheets.append(summary)

    for pid in project_ids:
        project = _project(projects, pid)
        sheet = Sheet(name=safe_sheet_name(project.name, used_names))
        sheet.append(_bold("Project ID"), project.id)
        sheet.append(_bold("Project Name"), project.name)
        sheet.append(_bold("Total Hours"), round_hours(project_hours[pid]))
        sheet.blank()
        _append_week_table(sheet, merge_weeks(by_project[pid], date_range))
        sheet.column_widths = auto_widths(sheet, narrow={1: 6})
        workbook.sheets.append(sheet)

    logger.info("Built user export %s (%d projects)", workbook.filename, len(project_ids))
    return workbook
