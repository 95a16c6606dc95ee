"""Tests for timesheets.approvals — week and month-level review."""

import pytest

from hourbook.timesheets.approvals import (
    APPROVAL_EXPORT_HEADERS,
    approval_rows,
    approve,
    pending_months,
    reject,
)
from hourbook.timesheets.models import Status
from hourbook.timesheets.splitter import submit_week


# ---------------------------------------------------------------------------
# Week-level
# ---------------------------------------------------------------------------


class TestWeekLevel:
    def test_approve_cascades_to_fragments(self, split_record):
        approved = approve(split_record, "u9", approved_at="2025-04-07T09:00:00")
        assert approved.status is Status.APPROVED
        assert approved.approved_by == "u9"
        for fragment in approved.month_hours.values():
            assert fragment.status is Status.APPROVED
            assert fragment.approved_at == "2025-04-07T09:00:00"

    def test_input_not_modified(self, split_record):
        approve(split_record, "u9")
        assert split_record.status is Status.SUBMITTED
        assert split_record.month_hours["2025-03"].status is Status.SUBMITTED

    def test_reject_cascades_with_reason(self, split_record):
        rejected = reject(split_record, "u9", "  Wrong project  ")
        assert rejected.status is Status.REJECTED
        assert rejected.rejection_reason == "Wrong project"
        assert all(f.status is Status.REJECTED for f in rejected.month_hours.values())

    def test_reject_needs_reason(self, split_record):
        with pytest.raises(ValueError):
            reject(split_record, "u9", "   ")

    def test_draft_not_reviewable(self):
        draft = submit_week("u1", "p1", 14, 2025, [8, 8, 8, 8, 8], submit=False)
        with pytest.raises(ValueError):
            approve(draft, "u9")

    def test_record_without_fragments(self, split_record):
        split_record.month_hours = None
        approved = approve(split_record, "u9")
        assert approved.status is Status.APPROVED
        assert pending_months(approved) == []
        with pytest.raises(KeyError):
            approve(split_record, "u9", month_key="2025-03")

    def test_already_approved_not_reviewable(self, split_record):
        approved = approve(split_record, "u9")
        with pytest.raises(ValueError):
            approve(approved, "u9")


# ---------------------------------------------------------------------------
# Month-level
# ---------------------------------------------------------------------------


class TestMonthLevel:
    def test_approve_one_month_only(self, split_record):
        updated = approve(split_record, "u9", month_key="2025-03")
        assert updated.month_hours["2025-03"].status is Status.APPROVED
        assert updated.month_hours["2025-04"].status is Status.SUBMITTED
        assert updated.status is Status.SUBMITTED
        assert pending_months(updated) == ["2025-04"]

    def test_week_follows_when_all_months_agree(self, split_record):
        updated = approve(split_record, "u9", month_key="2025-03")
        updated = approve(updated, "u9", month_key="2025-04", approved_at="2025-05-02")
        assert updated.status is Status.APPROVED
        assert updated.approved_at == "2025-05-02"
        assert pending_months(updated) == []

    def test_reject_one_month(self, split_record):
        updated = reject(split_record, "u9", "Check Monday", month_key="2025-03")
        assert updated.month_hours["2025-03"].status is Status.REJECTED
        assert updated.month_hours["2025-03"].rejection_reason == "Check Monday"
        assert updated.status is Status.SUBMITTED

    def test_mixed_months_reject_the_week(self, split_record):
        updated = reject(split_record, "u9", "Check Monday", month_key="2025-03")
        updated = approve(updated, "u9", month_key="2025-04")
        assert updated.status is Status.REJECTED
        assert updated.rejection_reason == "Check Monday"
        assert updated.month_hours["2025-04"].status is Status.APPROVED
        assert pending_months(updated) == []

    def test_week_action_keeps_reviewed_months(self, split_record):
        updated = reject(split_record, "u9", "Check Monday", month_key="2025-03")
        updated = approve(updated, "u9", approved_at="2025-05-02")
        assert updated.month_hours["2025-03"].status is Status.REJECTED
        assert updated.month_hours["2025-03"].rejection_reason == "Check Monday"
        assert updated.month_hours["2025-04"].status is Status.APPROVED
        assert updated.month_hours["2025-04"].approved_at == "2025-05-02"
        assert updated.status is Status.REJECTED
        assert updated.rejection_reason == "Check Monday"

    def test_missing_month(self, split_record):
        with pytest.raises(KeyError):
            approve(split_record, "u9", month_key="2025-06")

    def test_month_already_reviewed(self, split_record):
        updated = approve(split_record, "u9", month_key="2025-03")
        with pytest.raises(ValueError):
            reject(updated, "u9", "late", month_key="2025-03")


def test_approval_rows(records, users, projects):
    rows = approval_rows(records[1:2], users, projects)
    assert list(rows[0]) == APPROVAL_EXPORT_HEADERS
    assert rows[0]["Employee"] == "ben"
    assert rows[0]["Project"] == "Atlas"
    assert rows[0]["Total Hours"] == 30
    assert rows[0]["Status"] == "approved"
    assert rows[0]["Approved By"] == "Morgan Lee"
    assert rows[0]["Approved Date"] == "2025-04-14"
