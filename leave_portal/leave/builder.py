"""Leave request builder — the two-step leave form as a state machine.

Step 1 collects the basic details (type, dates, half-day session, reason).
Step 2 assembles the alternate schedule one day at a time: for every
calendar day of the leave the requester must cover at least one period with
an available substitute from the same campus.

Every operation either succeeds completely or raises and leaves the draft
untouched.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any, Optional, Sequence

from leave_portal.auth.context import ActorContext
from leave_portal.balance.ledger import ensure_sufficient_balance
from leave_portal.balance.schemas import BalanceSnapshot
from leave_portal.common.constants import (
    PERIODS,
    SESSION_PERIODS,
    LeaveSession,
    LeaveStatus,
    LeaveType,
)
from leave_portal.common.exceptions import (
    DuplicatePeriodError,
    FacultyUnavailableError,
    IncompleteDayError,
    IncompleteScheduleError,
    ValidationError,
)
from leave_portal.leave.calculator import (
    count_leave_days,
    iter_leave_dates,
    validate_leave_range,
)
from leave_portal.leave.schemas import (
    DaySchedule,
    FacultyMember,
    LeaveRequest,
    LeaveRequestCreate,
    PeriodAssignment,
)

if TYPE_CHECKING:
    from leave_portal.remote.client import PortalBackendClient

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class LeaveRequestBuilder:
    """Draft of a leave request owned by one requester."""

    def __init__(
        self,
        actor: ActorContext,
        availability: "PortalBackendClient",
        faculty: Optional[Sequence[FacultyMember]] = None,
        today: Optional[date] = None,
        backdate_limit_days: int = 35,
        max_span_days: int = 365,
    ) -> None:
        self.actor = actor
        self._availability = availability
        self._faculty_ids: Optional[set[str]] = (
            {f.id for f in faculty if actor.same_campus(f.campus)}
            if faculty is not None
            else None
        )
        self.today = today or date.today()
        self.backdate_limit_days = backdate_limit_days
        self.max_span_days = max_span_days

        self.leave_type: Optional[LeaveType] = None
        self.start_date: Optional[date] = None
        self.end_date: Optional[date] = None
        self.is_half_day = False
        self.session: Optional[LeaveSession] = None
        self.reason: Optional[str] = None
        self.number_of_days: Optional[float] = None

        self.schedule: list[DaySchedule] = []
        self.current_day_index = 0

    # ── Step 1: basic details ───────────────────────────────────────

    def set_basic_details(
        self,
        leave_type: Optional[LeaveType],
        start_date: Optional[date],
        end_date: Optional[date] = None,
        is_half_day: bool = False,
        session: Optional[LeaveSession] = None,
        reason: Optional[str] = None,
    ) -> None:
        errors: dict[str, list[str]] = {}
        if leave_type is None:
            errors.setdefault("leaveType", []).append("Please select leave type")
        if is_half_day and session is None:
            errors.setdefault("session", []).append("Please select session for half-day leave")
        if _is_blank(reason):
            errors.setdefault("reason", []).append("Please enter reason")

        try:
            validate_leave_range(
                start_date,
                end_date,
                is_half_day=is_half_day,
                today=self.today,
                backdate_limit_days=self.backdate_limit_days,
                max_span_days=self.max_span_days,
            )
        except ValidationError as exc:
            for field, messages in (exc.errors or {}).items():
                errors.setdefault(field, []).extend(messages)

        if errors:
            raise ValidationError(errors)

        self.leave_type = leave_type
        self.start_date = start_date
        self.end_date = start_date if is_half_day else end_date
        self.is_half_day = is_half_day
        self.session = session if is_half_day else None
        self.reason = reason.strip()
        self.number_of_days = None
        self.schedule = []
        self.current_day_index = 0

    @property
    def has_basic_details(self) -> bool:
        return self.leave_type is not None and self.start_date is not None

    @property
    def requested_days(self) -> float:
        if not self.has_basic_details:
            raise ValidationError.single("startDate", "Please fill in the leave details first")
        return count_leave_days(self.start_date, self.end_date, self.is_half_day)

    def allowed_periods(self) -> tuple[int, ...]:
        """Periods a substitute may be assigned: the session's half for half-day leave."""
        if self.is_half_day and self.session is not None:
            return SESSION_PERIODS[self.session]
        return PERIODS

    # ── Step 2: alternate schedule ──────────────────────────────────

    def next_step(self, balance: BalanceSnapshot) -> list[DaySchedule]:
        """Check the balance and lay out one empty day per calendar date of the leave."""
        days = self.requested_days
        ensure_sufficient_balance(balance, self.leave_type, days)

        self.number_of_days = days
        self.schedule = [
            DaySchedule(date=d, periods=[])
            for d in iter_leave_dates(self.start_date, self.end_date)
        ]
        self.current_day_index = 0
        return self.schedule

    def _require_schedule(self) -> None:
        if not self.schedule:
            raise ValidationError.single(
                "alternateSchedule", "Please continue to the alternate schedule first",
            )

    def current_day(self) -> DaySchedule:
        self._require_schedule()
        return self.schedule[self.current_day_index]

    async def add_period(
        self,
        day_index: int,
        period_number: Optional[int],
        substitute_faculty_id: Optional[str],
        assigned_class: Optional[str],
    ) -> DaySchedule:
        """Assign a substitute for one period, after checking the faculty is free."""
        self._require_schedule()

        errors: dict[str, list[str]] = {}
        if period_number is None:
            errors.setdefault("periodNumber", []).append("Please select period")
        if _is_blank(substitute_faculty_id):
            errors.setdefault("substituteFaculty", []).append("Please select faculty")
        if _is_blank(assigned_class):
            errors.setdefault("assignedClass", []).append("Please enter class")
        if errors:
            raise ValidationError(errors)

        if not 0 <= day_index < len(self.schedule):
            raise ValidationError.single("dayIndex", f"Day {day_index} is outside the leave range")
        if period_number not in PERIODS:
            raise ValidationError.single(
                "periodNumber", f"Period must be between {min(PERIODS)} and {max(PERIODS)}",
            )
        if period_number not in self.allowed_periods():
            raise ValidationError.single(
                "periodNumber",
                f"Period {period_number} is outside the {self.session.value} session",
            )
        if substitute_faculty_id == self.actor.employee_id:
            raise ValidationError.single(
                "substituteFaculty", "You cannot assign yourself as the substitute",
            )
        if self._faculty_ids is not None and substitute_faculty_id not in self._faculty_ids:
            raise ValidationError.single(
                "substituteFaculty", "Substitute must be a faculty member of your campus",
            )

        day = self.schedule[day_index]
        if day.has_period(period_number):
            raise DuplicatePeriodError(day.date, period_number)

        result = await self._availability.check_faculty_availability(
            substitute_faculty_id, day.date, [period_number],
        )
        if not result.ok:
            logger.info(
                "Faculty %s unavailable on %s period %s: %s",
                substitute_faculty_id, day.date, period_number, result.message,
            )
            raise FacultyUnavailableError(
                substitute_faculty_id, result.message or "Faculty is not available",
            )

        assignment = PeriodAssignment(
            period_number=period_number,
            substitute_faculty=substitute_faculty_id,
            assigned_class=assigned_class.strip(),
        )
        updated = day.model_copy(
            update={
                "periods": sorted(
                    [*day.periods, assignment], key=lambda p: p.period_number,
                )
            }
        )
        self.schedule[day_index] = updated
        return updated

    def remove_period(self, day_index: int, period_number: int) -> DaySchedule:
        self._require_schedule()
        if not 0 <= day_index < len(self.schedule):
            raise ValidationError.single("dayIndex", f"Day {day_index} is outside the leave range")
        day = self.schedule[day_index]
        updated = day.model_copy(
            update={"periods": [p for p in day.periods if p.period_number != period_number]}
        )
        self.schedule[day_index] = updated
        return updated

    def advance_day(self) -> int:
        """Move focus to the next day; the current one must have a period."""
        day = self.current_day()
        if not day.periods:
            raise IncompleteDayError(day.date)
        if self.current_day_index < len(self.schedule) - 1:
            self.current_day_index += 1
        return self.current_day_index

    def previous_day(self) -> int:
        self._require_schedule()
        if self.current_day_index > 0:
            self.current_day_index -= 1
        return self.current_day_index

    # ── Build / submit ──────────────────────────────────────────────

    def build(self) -> LeaveRequestCreate:
        self._require_schedule()
        missing = [day.date for day in self.schedule if not day.periods]
        if missing:
            raise IncompleteScheduleError(missing)

        return LeaveRequestCreate(
            employee_id=self.actor.employee_id,
            department=self.actor.department,
            campus=self.actor.campus,
            leave_type=self.leave_type,
            is_half_day=self.is_half_day,
            session=self.session,
            start_date=self.start_date,
            end_date=self.end_date,
            number_of_days=self.number_of_days,
            reason=self.reason,
            alternate_schedule=list(self.schedule),
            status=LeaveStatus.pending,
        )

    async def submit(self, submitter: "PortalBackendClient") -> LeaveRequest:
        payload = self.build()
        created = await submitter.submit_leave_request(payload)
        logger.info(
            "Leave request %s submitted by %s (%s, %s day(s))",
            created.id, self.actor.employee_id, payload.leave_type.value, payload.number_of_days,
        )
        return created
