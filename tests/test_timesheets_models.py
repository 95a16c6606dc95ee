"""Tests for timesheets.models — records, fragments and status parsing."""

import pytest

from hourbook.timesheets.models import (
    MonthFragment,
    Project,
    Status,
    User,
    WeeklyRecord,
    hours_value,
)


class TestStatus:
    def test_legacy_pending_reads_as_submitted(self):
        assert Status.coerce("pending") is Status.SUBMITTED

    def test_case_insensitive(self):
        assert Status.coerce("Approved") is Status.APPROVED

    def test_empty_uses_default(self):
        assert Status.coerce(None) is None
        assert Status.coerce("", default=Status.DRAFT) is Status.DRAFT

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            Status.coerce("archived")

    def test_is_a_string(self):
        assert Status.REJECTED == "rejected"


def test_hours_value_none_is_zero():
    assert hours_value(None) == 0.0
    assert hours_value("7.5") == 7.5


# ---------------------------------------------------------------------------
# TestMonthFragment
# ---------------------------------------------------------------------------


class TestMonthFragment:
    def test_total_and_has_hours(self):
        fragment = MonthFragment(monday_hours=8, tuesday_hours=1.5)
        assert fragment.total_hours == 9.5
        assert fragment.has_hours()
        assert not MonthFragment().has_hours()

    def test_with_days_keeps_lifecycle(self):
        fragment = MonthFragment(monday_hours=8, status=Status.APPROVED, approved_by="u9")
        changed = fragment.with_days([4, 0, 0, 0, 0])
        assert changed.monday_hours == 4
        assert changed.status is Status.APPROVED
        assert changed.approved_by == "u9"
        assert fragment.monday_hours == 8

    def test_with_days_needs_five_values(self):
        with pytest.raises(ValueError):
            MonthFragment().with_days([1, 2, 3])

    def test_from_dict_defaults(self):
        fragment = MonthFragment.from_dict({"monday_hours": None, "status": "pending"})
        assert fragment.monday_hours == 0.0
        assert fragment.status is Status.SUBMITTED

    def test_to_dict_status_is_plain_value(self):
        assert MonthFragment(status=Status.REJECTED).to_dict()["status"] == "rejected"


# ---------------------------------------------------------------------------
# TestWeeklyRecord
# ---------------------------------------------------------------------------


class TestWeeklyRecord:
    def test_total_is_derived(self):
        record = WeeklyRecord.from_dict({
            "user_id": "u1", "project_id": "p1", "week_number": 14, "year": 2025,
            "monday_hours": 8, "tuesday_hours": 8, "total_hours": 999,
        })
        assert record.total_hours == 16

    def test_legacy_row_without_month_hours(self):
        record = WeeklyRecord.from_dict({
            "user_id": "u1", "project_id": "p1", "week_number": 14, "year": 2025,
            "month_hours": None,
        })
        assert record.month_hours == {}
        assert record.status is Status.DRAFT

    def test_malformed_month_hours_ignored(self):
        record = WeeklyRecord.from_dict({
            "user_id": "u1", "project_id": "p1", "week_number": 14, "year": 2025,
            "month_hours": "not-a-map",
        })
        assert record.month_hours == {}

    def test_missing_identity_raises(self):
        with pytest.raises(KeyError):
            WeeklyRecord.from_dict({"user_id": "u1", "week_number": 14, "year": 2025})

    def test_week_key(self, split_record):
        assert split_record.week_key == "u1-14-2025"

    def test_is_split_week(self, split_record):
        assert split_record.is_split_week is True

    def test_dict_round_trip(self, split_record):
        data = split_record.to_dict()
        assert data["total_hours"] == 40
        assert list(data["month_hours"]) == ["2025-03", "2025-04"]
        assert data["month_hours"]["2025-04"]["status"] == "submitted"
        assert WeeklyRecord.from_dict(data) == split_record


# ---------------------------------------------------------------------------
# Reference records
# ---------------------------------------------------------------------------


class TestReferenceRecords:
    def test_display_name_falls_back_to_username(self):
        assert User(id="u2", username="ben").display_name == "ben"
        assert User(id="u1", username="asha", full_name="Asha Rao").display_name == "Asha Rao"

    def test_project_client_nested(self):
        project = Project.from_dict({
            "id": 7, "name": "Atlas", "allocated_hours": "120", "client": {"name": "Northwind"},
        })
        assert project.id == "7"
        assert project.allocated_hours == 120.0
        assert project.client_name == "Northwind"

    def test_project_without_allocation(self):
        assert Project.from_dict({"id": "p3", "name": "Cobalt"}).allocated_hours is None
