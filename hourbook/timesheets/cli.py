"""Timesheets CLI sub-commands."""

from datetime import date
from pathlib import Path
from typing import List, Optional

import typer

from hourbook.core.output import OutputFormat, format_result, format_table

app = typer.Typer(no_args_is_help=True)

DAY_COLUMNS = ["monday_hours", "tuesday_hours", "wednesday_hours", "thursday_hours", "friday_hours"]


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}")
    raise typer.Exit(1)


def _load(path: Path):
    from hourbook.timesheets.dataset import load_dataset

    try:
        return load_dataset(path)
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))


def _parse_date(value: Optional[str], option: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        _fail(f"{option} must be YYYY-MM-DD, got {value!r}")


def _view(month: Optional[str], start: Optional[str], end: Optional[str]):
    """--month, or --start with --end, or neither (all data)."""
    from hourbook.timesheets.rollup import View
    from hourbook.timesheets.weeks import parse_month_key

    sd = _parse_date(start, "--start")
    ed = _parse_date(end, "--end")
    if month and (sd or ed):
        _fail("Use either --month or --start/--end, not both.")
    if month:
        try:
            parse_month_key(month)
        except ValueError as exc:
            _fail(str(exc))
        return View.month(month)
    if sd or ed:
        if sd is None or ed is None:
            _fail("Provide both --start and --end.")
        return View.range(sd, ed)
    return View.all()


def _split_ids(value: Optional[str]) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()] if value else []


@app.command("split")
def split(
    week: int = typer.Option(..., "--week", "-w", min=1, max=53, help="Week number (1-53)"),
    year: int = typer.Option(..., "--year", "-y", help="Year of the week number"),
    hours: str = typer.Option(..., "--hours", help="Mon-Fri hours, comma separated: 8,8,8,8,8"),
    output_format: OutputFormat = typer.Option(OutputFormat.HUMAN, "--format", "-f"),
):
    """Show how a week's hours split across calendar months."""
    from hourbook.timesheets.splitter import split_week
    from hourbook.timesheets.weeks import week_dates

    try:
        days = [float(h) for h in hours.split(",")]
    except ValueError:
        _fail("--hours must be five numbers separated by commas")
    if len(days) != 5:
        _fail(f"--hours needs 5 values (Mon-Fri), got {len(days)}")

    month_hours = split_week(days, week, year)
    rows = []
    for key, fragment in month_hours.items():
        row = {"month": key}
        row.update(fragment.to_dict())
        row["total_hours"] = round(fragment.total_hours, 2)
        rows.append(row)

    dates = week_dates(year, week)
    title = f"Week {week}, {year}: {dates[0].isoformat()} to {dates[-1].isoformat()}"
    typer.echo(format_table(rows, ["month"] + DAY_COLUMNS + ["total_hours"], output_format, title))


@app.command("month")
def month_report(
    dataset: Path = typer.Argument(..., help="Dataset JSON file"),
    month: str = typer.Option(..., "--month", "-m", help="Month key YYYY-MM"),
    users: str = typer.Option(None, "--users", help="Comma-separated user ids"),
    projects: str = typer.Option(None, "--projects", help="Comma-separated project ids"),
    output_format: OutputFormat = typer.Option(OutputFormat.HUMAN, "--format", "-f"),
):
    """List timesheets with hours in a month, with that month's status."""
    from hourbook.timesheets.months import hours_for_month, status_for_month
    from hourbook.timesheets.rollup import filter_records, select, sort_records, total_hours

    data = _load(dataset)
    view = _view(month, None, None)
    records = filter_records(
        data.records, user_ids=_split_ids(users), project_ids=_split_ids(projects)
    )
    selected = sort_records(select(records, view), "week")

    rows = []
    for r in selected:
        rows.append({
            "user": data.users[r.user_id].display_name if r.user_id in data.users else r.user_id,
            "project": data.projects[r.project_id].name if r.project_id in data.projects else r.project_id,
            "week": r.week_number,
            "year": r.year,
            "hours": hours_for_month(r, month),
            "status": status_for_month(r, month),
            "split": "yes" if r.is_split_week else "",
        })
    title = f"{month}: {total_hours(selected, view):.2f} hours"
    typer.echo(format_table(
        rows, ["user", "project", "week", "year", "hours", "status", "split"], output_format, title
    ))


@app.command("range")
def range_report(
    dataset: Path = typer.Argument(..., help="Dataset JSON file"),
    start: str = typer.Option(..., "--start", help="Start date YYYY-MM-DD"),
    end: str = typer.Option(..., "--end", help="End date YYYY-MM-DD (inclusive)"),
    output_format: OutputFormat = typer.Option(OutputFormat.HUMAN, "--format", "-f"),
):
    """Timesheets re-sliced to a custom date range."""
    from hourbook.timesheets.months import months_of
    from hourbook.timesheets.range_filter import filter_by_date_range
    from hourbook.timesheets.rollup import total_hours

    data = _load(dataset)
    sd = _parse_date(start, "--start")
    ed = _parse_date(end, "--end")
    filtered = filter_by_date_range(data.records, sd, ed)

    if output_format == OutputFormat.JSON:
        import json

        typer.echo(json.dumps([r.to_dict() for r in filtered], indent=2))
        return

    rows = [{
        "user": data.users[r.user_id].display_name if r.user_id in data.users else r.user_id,
        "project": data.projects[r.project_id].name if r.project_id in data.projects else r.project_id,
        "week": r.week_number,
        "year": r.year,
        "total_hours": round(r.total_hours, 2),
        "months": ", ".join(months_of(r)),
    } for r in filtered]
    title = f"{sd.isoformat()} to {ed.isoformat()}: {total_hours(filtered):.2f} hours"
    typer.echo(format_table(
        rows, ["user", "project", "week", "year", "total_hours", "months"], output_format, title
    ))


@app.command("summary")
def summary(
    dataset: Path = typer.Argument(..., help="Dataset JSON file"),
    month: str = typer.Option(None, "--month", "-m", help="Month key YYYY-MM"),
    start: str = typer.Option(None, "--start", help="Start date YYYY-MM-DD"),
    end: str = typer.Option(None, "--end", help="End date YYYY-MM-DD"),
    output_format: OutputFormat = typer.Option(OutputFormat.HUMAN, "--format", "-f"),
):
    """Dashboard totals and hours per user."""
    from hourbook.timesheets.rollup import dashboard_stats, user_summaries

    data = _load(dataset)
    view = _view(month, start, end)
    stats = dashboard_stats(data.records, view)
    users = user_summaries(data.records, data.users, data.projects, view)

    if output_format == OutputFormat.JSON:
        import json
        from dataclasses import asdict

        typer.echo(json.dumps(
            {"view": view.label, "stats": asdict(stats), "users": [asdict(u) for u in users]},
            indent=2,
        ))
        return

    typer.echo(format_result(stats, output_format, title=f"Summary: {view.label}"))
    typer.echo("")
    rows = [{
        "user": u.name,
        "total_hours": u.total_hours,
        "top_project": u.project_hours[0].name if u.project_hours else None,
        "weeks": len(u.weekly_hours),
    } for u in users]
    typer.echo(format_table(rows, ["user", "total_hours", "top_project", "weeks"], output_format))


@app.command("utilization")
def utilization_report(
    dataset: Path = typer.Argument(..., help="Dataset JSON file"),
    month: str = typer.Option(None, "--month", "-m", help="Month key YYYY-MM"),
    start: str = typer.Option(None, "--start", help="Start date YYYY-MM-DD"),
    end: str = typer.Option(None, "--end", help="End date YYYY-MM-DD"),
    include_idle: bool = typer.Option(False, "--include-idle", help="Show projects without hours"),
    output_format: OutputFormat = typer.Option(OutputFormat.HUMAN, "--format", "-f"),
):
    """Used vs. allocated hours per project."""
    from hourbook.timesheets.rollup import project_utilization

    data = _load(dataset)
    view = _view(month, start, end)
    results = project_utilization(
        data.records, data.projects, data.users, view, include_idle=include_idle
    )
    typer.echo(format_table(
        results,
        ["name", "allocated_hours", "used_hours", "remaining_hours", "utilization"],
        output_format,
        title=f"Project utilization: {view.label}",
    ))


@app.command("export")
def export(
    dataset: Path = typer.Argument(..., help="Dataset JSON file"),
    by: str = typer.Option("projects", "--by", help="projects | project | user"),
    entity_id: str = typer.Option(None, "--id", help="Project id (--by project) or user id (--by user)"),
    month: str = typer.Option(None, "--month", "-m", help="Month key YYYY-MM"),
    start: str = typer.Option(None, "--start", help="Start date YYYY-MM-DD"),
    end: str = typer.Option(None, "--end", help="End date YYYY-MM-DD"),
    out: Path = typer.Option(None, "--out", "-o", help="Output .xlsx path"),
    output_dir: Path = typer.Option(None, "--output-dir", help="Directory for the generated file name"),
):
    """Write a timesheet workbook (.xlsx)."""
    from datetime import datetime

    from hourbook.timesheets.excel import save_workbook
    from hourbook.timesheets.export import (
        export_project_by_users,
        export_projects,
        export_user_by_projects,
    )
    from hourbook.timesheets.weeks import month_bounds

    data = _load(dataset)
    view = _view(month, start, end)
    if view.mode == "month":
        date_range = month_bounds(view.month_key)
    elif view.mode == "range":
        date_range = (view.start, view.end)
    else:
        date_range = None
    stamp = datetime.now()

    if by == "projects":
        workbook = export_projects(
            data.records, data.projects, data.users, date_range, generated_at=stamp
        )
    elif by == "project":
        if not entity_id or entity_id not in data.projects:
            _fail("--by project needs --id of a project in the dataset")
        workbook = export_project_by_users(
            data.projects[entity_id], data.records, data.users, date_range, generated_at=stamp
        )
    elif by == "user":
        if not entity_id or entity_id not in data.users:
            _fail("--by user needs --id of a user in the dataset")
        workbook = export_user_by_projects(
            data.users[entity_id], data.records, data.projects, date_range, generated_at=stamp
        )
    else:
        _fail(f"--by must be projects, project or user (got {by!r})")

    path = save_workbook(workbook, out, output_dir=output_dir)
    typer.echo(f"Wrote {path} ({len(workbook.sheets)} sheets)")
