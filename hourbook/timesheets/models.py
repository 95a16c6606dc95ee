"""
Timesheet data model.

WeeklyRecord holds one user's Monday-Friday hours for one project and week;
MonthFragment holds the part of that week falling in one calendar month,
with its own approval lifecycle. User and Project are the reference records
the reports need for names and allocated hours.

Records are plain dataclasses built from and serialized to the row dicts the
persistence layer exchanges (month_hours keyed by "YYYY-MM").
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from hourbook.timesheets.weeks import is_split_week

DAY_FIELDS = (
    "monday_hours",
    "tuesday_hours",
    "wednesday_hours",
    "thursday_hours",
    "friday_hours",
)

LIFECYCLE_FIELDS = (
    "status",
    "submitted_at",
    "approved_by",
    "approved_at",
    "rejection_reason",
)


class Status(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def coerce(cls, value: Any, default: Optional["Status"] = None) -> Optional["Status"]:
        """Parse a stored status; legacy "pending" reads as submitted."""
        if value is None or value == "":
            return default
        if isinstance(value, Status):
            return value
        text = str(value).strip().lower()
        if text == "pending":
            return cls.SUBMITTED
        return cls(text)


def hours_value(value: Any) -> float:
    """Day value as float; missing (None) counts as zero."""
    if value is None:
        return 0.0
    return float(value)


def _day_kwargs(values: Sequence[Any]) -> Dict[str, float]:
    if len(values) != len(DAY_FIELDS):
        raise ValueError(f"Expected {len(DAY_FIELDS)} day values, got {len(values)}")
    return {name: hours_value(v) for name, v in zip(DAY_FIELDS, values)}


# ---------------------------------------------------------------------------
# MonthFragment
# ---------------------------------------------------------------------------


@dataclass
class MonthFragment:
    monday_hours: float = 0.0
    tuesday_hours: float = 0.0
    wednesday_hours: float = 0.0
    thursday_hours: float = 0.0
    friday_hours: float = 0.0
    status: Status = Status.DRAFT
    submitted_at: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None
    rejection_reason: Optional[str] = None

    @property
    def days(self) -> List[float]:
        return [hours_value(getattr(self, name)) for name in DAY_FIELDS]

    @property
    def total_hours(self) -> float:
        return sum(self.days)

    def has_hours(self) -> bool:
        return any(h > 0 for h in self.days)

    def with_days(self, values: Sequence[Any]) -> "MonthFragment":
        """Copy with new day values and the same lifecycle."""
        return replace(self, **_day_kwargs(values))

    def lifecycle(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in LIFECYCLE_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        d = {name: getattr(self, name) for name in DAY_FIELDS}
        d.update(self.lifecycle())
        d["status"] = self.status.value if self.status else None
        return d

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MonthFragment":
        data = data or {}
        return cls(
            **{name: hours_value(data.get(name)) for name in DAY_FIELDS},
            status=Status.coerce(data.get("status"), default=Status.DRAFT),
            submitted_at=data.get("submitted_at"),
            approved_by=data.get("approved_by"),
            approved_at=data.get("approved_at"),
            rejection_reason=data.get("rejection_reason"),
        )


# ---------------------------------------------------------------------------
# WeeklyRecord
# ---------------------------------------------------------------------------


@dataclass
class WeeklyRecord:
    user_id: str
    project_id: str
    week_number: int
    year: int
    monday_hours: float = 0.0
    tuesday_hours: float = 0.0
    wednesday_hours: float = 0.0
    thursday_hours: float = 0.0
    friday_hours: float = 0.0
    status: Status = Status.DRAFT
    submitted_at: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    month_hours: Dict[str, MonthFragment] = field(default_factory=dict)
    id: Optional[str] = None

    @property
    def days(self) -> List[float]:
        return [hours_value(getattr(self, name)) for name in DAY_FIELDS]

    @property
    def total_hours(self) -> float:
        """Always derived from the five day values."""
        return sum(self.days)

    @property
    def is_split_week(self) -> bool:
        return is_split_week(self.year, self.week_number)

    @property
    def week_key(self) -> str:
        """Composite approval-queue key: user_id-week_number-year."""
        return f"{self.user_id}-{self.week_number}-{self.year}"

    def with_days(self, values: Sequence[Any]) -> "WeeklyRecord":
        return replace(self, **_day_kwargs(values))

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "user_id": self.user_id,
            "project_id": self.project_id,
            "week_number": self.week_number,
            "year": self.year,
        }
        d.update({name: getattr(self, name) for name in DAY_FIELDS})
        d["total_hours"] = round(self.total_hours, 2)
        d["status"] = self.status.value if self.status else None
        d["submitted_at"] = self.submitted_at
        d["approved_by"] = self.approved_by
        d["approved_at"] = self.approved_at
        d["rejection_reason"] = self.rejection_reason
        d["month_hours"] = {
            key: frag.to_dict() for key, frag in sorted((self.month_hours or {}).items())
        }
        d["is_split_week"] = self.is_split_week
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeeklyRecord":
        """
        Build a record from a stored row.

        Tolerates legacy rows: missing or null month_hours becomes an empty
        mapping, null day values become 0. The stored total_hours is ignored
        (it is always re-derived).
        """
        raw_months = data.get("month_hours") or {}
        if not isinstance(raw_months, dict):
            raw_months = {}
        return cls(
            id=data.get("id"),
            user_id=str(data["user_id"]),
            project_id=str(data["project_id"]),
            week_number=int(data["week_number"]),
            year=int(data["year"]),
            **{name: hours_value(data.get(name)) for name in DAY_FIELDS},
            status=Status.coerce(data.get("status"), default=Status.DRAFT),
            submitted_at=data.get("submitted_at"),
            approved_by=data.get("approved_by"),
            approved_at=data.get("approved_at"),
            rejection_reason=data.get("rejection_reason"),
            month_hours={
                str(key): MonthFragment.from_dict(value)
                for key, value in raw_months.items()
            },
        )


# ---------------------------------------------------------------------------
# Reference records
# ---------------------------------------------------------------------------


@dataclass
class User:
    id: str
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    designation: Optional[str] = None
    role: str = "user"

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=str(data["id"]),
            username=data.get("username") or str(data["id"]),
            full_name=data.get("full_name"),
            email=data.get("email"),
            designation=data.get("designation"),
            role=data.get("role") or "user",
        )


@dataclass
class Project:
    id: str
    name: str
    description: Optional[str] = None
    allocated_hours: Optional[float] = None
    status: str = "active"
    client_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        client = data.get("client")
        client_name = data.get("client_name")
        if client_name is None and isinstance(client, dict):
            client_name = client.get("name")
        allocated = data.get("allocated_hours")
        return cls(
            id=str(data["id"]),
            name=data.get("name") or str(data["id"]),
            description=data.get("description"),
            allocated_hours=float(allocated) if allocated is not None else None,
            status=data.get("status") or "active",
            client_name=client_name,
        )
