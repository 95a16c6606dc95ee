"""
Dataset loading for the command line.

The engine never queries storage; the CLI feeds it a JSON export of the
rows the application already holds:

    {
      "users":      [{"id": "u1", "username": "asha", ...}],
      "projects":   [{"id": "p1", "name": "Atlas", "allocated_hours": 120}],
      "timesheets": [{"user_id": "u1", "project_id": "p1", "week_number": 14,
                      "year": 2025, "monday_hours": 8, ..., "month_hours": {...}}]
    }

Rows without month_hours (legacy) are split on load.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from hourbook.core import get_logger
from hourbook.timesheets.models import Project, User, WeeklyRecord
from hourbook.timesheets.splitter import refresh_month_hours

logger = get_logger("hourbook.timesheets.dataset")


@dataclass
class Dataset:
    users: Dict[str, User] = field(default_factory=dict)
    projects: Dict[str, Project] = field(default_factory=dict)
    records: List[WeeklyRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": [u.__dict__.copy() for u in self.users.values()],
            "projects": [p.__dict__.copy() for p in self.projects.values()],
            "timesheets": [r.to_dict() for r in self.records],
        }


def parse_dataset(data: Dict[str, Any]) -> Dataset:
    """
    Build a Dataset from already-decoded JSON.

    Raises:
        ValueError: top level is not an object, a section is not a list, or a
            row lacks its identity fields
    """
    if not isinstance(data, dict):
        raise ValueError("Dataset must be a JSON object")

    sections = {}
    for name in ("users", "projects", "timesheets"):
        rows = data.get(name) or []
        if not isinstance(rows, list):
            raise ValueError(f"Dataset section '{name}' must be a list")
        sections[name] = rows

    try:
        users = [User.from_dict(row) for row in sections["users"]]
        projects = [Project.from_dict(row) for row in sections["projects"]]
        records = [WeeklyRecord.from_dict(row) for row in sections["timesheets"]]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed dataset row: missing or invalid {exc}") from exc

    repaired = 0
    for i, (row, record) in enumerate(zip(sections["timesheets"], records)):
        if not row.get("month_hours"):
            records[i] = refresh_month_hours(record)
            repaired += 1
    if repaired:
        logger.warning("Split %d timesheet row(s) stored without month_hours", repaired)

    return Dataset(
        users={u.id: u for u in users},
        projects={p.id: p for p in projects},
        records=records,
    )


def load_dataset(path: Union[str, Path]) -> Dataset:
    """
    Read a dataset JSON file.

    Raises:
        FileNotFoundError: path does not exist
        ValueError: invalid JSON or structure
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    dataset = parse_dataset(data)
    logger.debug(
        "Loaded %s: %d users, %d projects, %d timesheets",
        path, len(dataset.users), len(dataset.projects), len(dataset.records),
    )
    return dataset
