"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create  → payloads sent to the backend (write)
  - *Update  → status-transition payloads
  - *In      → gateway request bodies
  - plain    → entities as returned by the backend (read)

Attributes are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from leave_portal.common.constants import (
    PERIODS,
    LeaveSession,
    LeaveStatus,
    LeaveType,
)
from leave_portal.common.normalize import (
    normalize_day_schedule,
    normalize_faculty_payload,
    normalize_leave_payload,
    normalize_period,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═════════════════════════════════════════════════════════════════════
# Alternate schedule
# ═════════════════════════════════════════════════════════════════════


class PeriodAssignment(_WireModel):
    """One substitute-faculty assignment for a single period."""

    period_number: int = Field(..., ge=min(PERIODS), le=max(PERIODS))
    substitute_faculty: str = Field(..., min_length=1)
    assigned_class: str = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return normalize_period(data)


class DaySchedule(_WireModel):
    """Substitute assignments for one calendar day of the leave."""

    date: dt.date
    periods: list[PeriodAssignment] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return normalize_day_schedule(data)

    @field_validator("periods")
    @classmethod
    def _unique_periods(cls, v: list[PeriodAssignment]) -> list[PeriodAssignment]:
        numbers = [p.period_number for p in v]
        if len(set(numbers)) != len(numbers):
            raise ValueError("Duplicate periods found in schedule")
        return v

    def period_numbers(self) -> set[int]:
        return {p.period_number for p in self.periods}

    def has_period(self, period_number: int) -> bool:
        return any(p.period_number == period_number for p in self.periods)


# ═════════════════════════════════════════════════════════════════════
# Leave Request: create / entity
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(_WireModel):
    """Payload for submitLeaveRequest, produced by LeaveRequestBuilder.build()."""

    employee_id: str
    department: Optional[str] = None
    campus: str
    leave_type: LeaveType
    is_half_day: bool = False
    session: Optional[LeaveSession] = None
    start_date: date
    end_date: date
    number_of_days: float
    reason: str = Field(..., min_length=1)
    alternate_schedule: list[DaySchedule] = Field(default_factory=list)
    status: LeaveStatus = LeaveStatus.pending


class LeaveRequest(_WireModel):
    """A leave request as held by the backend."""

    id: str
    employee_id: str
    department: Optional[str] = None
    campus: str
    leave_type: LeaveType
    is_half_day: bool = False
    session: Optional[LeaveSession] = None
    start_date: date
    end_date: date
    number_of_days: float
    reason: str
    alternate_schedule: list[DaySchedule] = Field(default_factory=list)
    status: LeaveStatus = LeaveStatus.pending

    hod_remarks: Optional[str] = None
    hod_approval_date: Optional[datetime] = None
    principal_remarks: Optional[str] = None
    principal_approval_date: Optional[datetime] = None

    approved_start_date: Optional[date] = None
    approved_end_date: Optional[date] = None
    approved_number_of_days: Optional[float] = None
    principal_modification_reason: Optional[str] = None
    principal_modification_date: Optional[datetime] = None
    is_modified_by_principal: bool = False

    applied_on: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return normalize_leave_payload(data)

    @model_validator(mode="after")
    def _check_half_day(self) -> "LeaveRequest":
        if self.is_half_day and self.start_date != self.end_date:
            raise ValueError("For half-day leave, start and end date must be the same")
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    @property
    def effective_days(self) -> float:
        """Days actually granted: the approver's count when dates were modified."""
        if self.is_modified_by_principal and self.approved_number_of_days is not None:
            return self.approved_number_of_days
        return self.number_of_days


class LeaveStatusUpdate(_WireModel):
    """Payload for updateLeaveStatus."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True,
    )

    status: LeaveStatus
    remarks: str
    approved_start_date: Optional[date] = None
    approved_end_date: Optional[date] = None
    approved_number_of_days: Optional[float] = None
    principal_modification_reason: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Faculty directory / availability
# ═════════════════════════════════════════════════════════════════════


class FacultyMember(_WireModel):
    """Entry of getFacultyList(campus)."""

    id: str
    name: str
    department: Optional[str] = None
    campus: str
    employee_code: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return normalize_faculty_payload(data)


class AvailabilityResult(_WireModel):
    """Outcome of checkFacultyAvailability: ok, or conflict with a message."""

    is_available: bool
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.is_available


# ═════════════════════════════════════════════════════════════════════
# Gateway bodies
# ═════════════════════════════════════════════════════════════════════


class LeaveBasicDetailsIn(_WireModel):
    """Step 1 of the leave form."""

    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_half_day: bool = False
    session: Optional[LeaveSession] = None
    reason: Optional[str] = None


class LeaveDraftIn(LeaveBasicDetailsIn):
    """Full leave form: basic details plus the alternate schedule."""

    alternate_schedule: list[DaySchedule] = Field(default_factory=list)


class LeavePreviewOut(_WireModel):
    number_of_days: float
    schedule_dates: list[date]
    allowed_periods: list[int]


class LeaveForwardIn(_WireModel):
    remarks: Optional[str] = None


class LeaveRejectIn(_WireModel):
    remarks: str = ""


class LeaveApproveIn(_WireModel):
    remarks: Optional[str] = None
    approved_start_date: Optional[date] = None
    approved_end_date: Optional[date] = None
    principal_modification_reason: Optional[str] = None


class LeaveTransitionOut(_WireModel):
    """Transition response: updated request plus projected balance."""

    leave_request: LeaveRequest
    new_balance: Optional[float] = None
    is_modified: bool = False
