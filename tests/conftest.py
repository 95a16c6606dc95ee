"""
Shared test fixtures for Hourbook.

Provides a small set of users, projects and weekly records (including a
week split across March/April 2025), a dataset JSON file, and a CLI runner.
"""

import json

import pytest

# Import logging modules up front so their handlers bind to the test
# session's stdout rather than a CliRunner buffer.
import hourbook.timesheets.dataset  # noqa: F401
import hourbook.timesheets.excel  # noqa: F401
import hourbook.timesheets.export  # noqa: F401
from hourbook.timesheets.approvals import approve
from hourbook.timesheets.dataset import Dataset
from hourbook.timesheets.models import Project, User
from hourbook.timesheets.splitter import submit_week


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def split_record():
    """Week 14 of 2025 (Mon 31 Mar - Fri 4 Apr), 8h a day, submitted."""
    return submit_week(
        "u1", "p1", 14, 2025, [8, 8, 8, 8, 8], submitted_at="2025-04-04T17:00:00"
    )


@pytest.fixture
def users():
    return {
        "u1": User(id="u1", username="asha", full_name="Asha Rao",
                   email="asha@example.com", designation="Engineer"),
        "u2": User(id="u2", username="ben", email="ben@example.com"),
        "u9": User(id="u9", username="mgr", full_name="Morgan Lee", role="admin"),
    }


@pytest.fixture
def projects():
    return {
        "p1": Project(id="p1", name="Atlas", allocated_hours=120.0),
        "p2": Project(id="p2", name="Borealis", allocated_hours=0.0, client_name="Northwind"),
    }


@pytest.fixture
def records(split_record):
    """
    u1/p1 week 14: 8 (Mar) + 32 (Apr), submitted
    u2/p1 week 15: 30 (Apr), approved
    u1/p2 week 14: Wed+Thu 4h (Apr), draft
    """
    approved = approve(
        submit_week("u2", "p1", 15, 2025, [6, 6, 6, 6, 6], submitted_at="2025-04-11T16:00:00"),
        "u9",
        approved_at="2025-04-14T09:00:00",
    )
    draft = submit_week("u1", "p2", 14, 2025, [0, 0, 4, 4, 0], submit=False)
    return [split_record, approved, draft]


@pytest.fixture
def dataset_file(tmp_path, users, projects, records):
    """The fixture records written as a dataset JSON file."""
    path = tmp_path / "hours.json"
    data = Dataset(users=users, projects=projects, records=records).to_dict()
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
