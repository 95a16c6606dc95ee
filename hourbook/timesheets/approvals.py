"""
Approval lifecycle

draft → submitted → approved / rejected, at week level or for one month
fragment of a week. Every function returns a new record; the input is left
untouched for the caller to persist or discard.

Week-level actions (weekly approval queue) apply to the week and cascade to
every month fragment. Month-level actions (monthly view) change only that
fragment. The week-level status follows once every fragment is reviewed:
the shared status when they agree, rejected when approved and rejected
months are mixed. A week-level action never overrides a month that was
already reviewed on its own.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional

from hourbook.core import get_logger
from hourbook.timesheets.models import Project, Status, User, WeeklyRecord
from hourbook.timesheets.months import months_of

logger = get_logger("hourbook.timesheets.approvals")

REVIEWABLE = (Status.SUBMITTED,)

APPROVAL_EXPORT_HEADERS = [
    "Employee",
    "Project",
    "Week",
    "Year",
    "Total Hours",
    "Status",
    "Approved By",
    "Approved Date",
]


def _check_reviewable(current: Status, target: str) -> None:
    if current not in REVIEWABLE:
        raise ValueError(f"Cannot review {target} with status '{current.value}'")


def _week_outcome(record: WeeklyRecord) -> Optional[Status]:
    """
    Week-level status implied by the fragments, or None while undecided.

    Fragments that all agree give that status. Once nothing is left to
    review, a mix of approved and rejected months rejects the week.
    """
    statuses = {record.month_hours[k].status for k in months_of(record)}
    if len(statuses) == 1:
        return next(iter(statuses))
    if Status.SUBMITTED not in statuses and Status.REJECTED in statuses:
        return Status.REJECTED
    return None


def _apply(
    record: WeeklyRecord,
    status: Status,
    reviewer_id: str,
    reviewed_at: Optional[str],
    reason: Optional[str],
    month_key: Optional[str],
) -> WeeklyRecord:
    updated = copy.deepcopy(record)
    month_hours = updated.month_hours or {}

    if month_key is None:
        _check_reviewable(updated.status, f"week {record.week_key}")
        # months already reviewed on their own keep their outcome
        targets = [updated] + [f for f in month_hours.values() if f.status in REVIEWABLE]
    else:
        fragment = month_hours.get(month_key)
        if fragment is None:
            raise KeyError(f"Week {record.week_key} has no hours in {month_key}")
        _check_reviewable(fragment.status, f"{month_key} of week {record.week_key}")
        targets = [fragment]

    for target in targets:
        target.status = status
        target.approved_by = reviewer_id
        target.approved_at = reviewed_at
        target.rejection_reason = reason

    outcome = _week_outcome(updated)
    if outcome is not None:
        if outcome != status:
            reason = next(
                (month_hours[k].rejection_reason for k in months_of(updated)
                 if month_hours[k].status is Status.REJECTED),
                None,
            )
        updated.status = outcome
        updated.approved_by = reviewer_id
        updated.approved_at = reviewed_at
        updated.rejection_reason = reason

    logger.info(
        "%s %s%s by %s",
        status.value.title(),
        record.week_key,
        f" [{month_key}]" if month_key else "",
        reviewer_id,
    )
    return updated


def approve(
    record: WeeklyRecord,
    approver_id: str,
    *,
    approved_at: Optional[str] = None,
    month_key: Optional[str] = None,
) -> WeeklyRecord:
    """
    Approve a submitted week, or one month of it.

    Raises:
        KeyError: month_key given but the record has no fragment for it
        ValueError: the week (or fragment) is not awaiting review
    """
    return _apply(record, Status.APPROVED, approver_id, approved_at, None, month_key)


def reject(
    record: WeeklyRecord,
    approver_id: str,
    reason: str,
    *,
    rejected_at: Optional[str] = None,
    month_key: Optional[str] = None,
) -> WeeklyRecord:
    """
    Reject a submitted week, or one month of it. A reason is required.

    Raises:
        ValueError: empty reason, or nothing awaiting review
        KeyError: month_key given but the record has no fragment for it
    """
    if not reason or not reason.strip():
        raise ValueError("A rejection reason is required")
    return _apply(record, Status.REJECTED, approver_id, rejected_at, reason.strip(), month_key)


def pending_months(record: WeeklyRecord) -> List[str]:
    """Month keys of the record still awaiting review."""
    return [k for k in months_of(record) if record.month_hours[k].status == Status.SUBMITTED]


def approval_rows(
    records: Iterable[WeeklyRecord],
    users: Mapping[str, User],
    projects: Mapping[str, Project],
) -> List[Dict[str, Any]]:
    """Rows for the approved-timesheets download (one per record)."""
    rows = []
    for r in records:
        user = users.get(r.user_id)
        project = projects.get(r.project_id)
        approver = users.get(r.approved_by) if r.approved_by else None
        rows.append({
            "Employee": user.display_name if user else r.user_id,
            "Project": project.name if project else r.project_id,
            "Week": r.week_number,
            "Year": r.year,
            "Total Hours": round(r.total_hours, 2),
            "Status": r.status.value,
            "Approved By": approver.display_name if approver else (r.approved_by or ""),
            "Approved Date": (r.approved_at or "")[:10],
        })
    return rows
