"""Tests for timesheets.months — reading month fragments back out."""

from hourbook.timesheets.models import Status, WeeklyRecord
from hourbook.timesheets.months import (
    effective_status,
    hours_for_month,
    is_in_month,
    months_of,
    records_in_month,
    status_for_month,
)


def _legacy():
    return WeeklyRecord(user_id="u1", project_id="p1", week_number=14, year=2025,
                        monday_hours=8, status=Status.SUBMITTED)


class TestHoursForMonth:
    def test_split_week(self, split_record):
        assert hours_for_month(split_record, "2025-03") == 8
        assert hours_for_month(split_record, "2025-04") == 32

    def test_absent_month(self, split_record):
        assert hours_for_month(split_record, "2025-05") == 0

    def test_legacy_record_reads_zero(self):
        assert hours_for_month(_legacy(), "2025-03") == 0


class TestIsInMonth:
    def test_both_months(self, split_record):
        assert is_in_month(split_record, "2025-03")
        assert is_in_month(split_record, "2025-04")
        assert not is_in_month(split_record, "2025-02")

    def test_legacy_record_in_no_month(self):
        assert not is_in_month(_legacy(), "2025-03")

    def test_records_in_month(self, records):
        assert len(records_in_month(records, "2025-03")) == 1
        assert len(records_in_month(records, "2025-04")) == 3


class TestStatus:
    def test_fragment_status(self, records):
        approved = records[1]
        assert status_for_month(approved, "2025-04") is Status.APPROVED
        assert status_for_month(approved, "2025-03") is None

    def test_effective_status_falls_back_to_week(self, split_record):
        split_record.month_hours["2025-03"].status = Status.APPROVED
        assert effective_status(split_record, "2025-03") is Status.APPROVED
        assert effective_status(split_record, "2025-09") is Status.SUBMITTED
        assert effective_status(split_record) is Status.SUBMITTED


def test_months_of(split_record, records):
    assert months_of(split_record) == ["2025-03", "2025-04"]
    assert months_of(records[2]) == ["2025-04"]
    assert months_of(_legacy()) == []
