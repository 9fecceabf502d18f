"""Leave approval state machine.

    Pending ──(HOD)──▶ Forwarded by HOD ──(terminal approver)──▶ Approved
       │                     │                                       │
       └──(HOD)──▶ Rejected ◀┘ (terminal approver)                  │
                      ▲                                              │
                      └────────── override (Principal) ◀─────────────┘

The terminal approver of a campus is either the Principal or HR, never both
(``CampusPolicy``). Transitions are pure: the input request is never
mutated; each returns a ``TransitionResult`` carrying the new request, the
payload to send to the backend, and any balance adjustments to signal.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from leave_portal.auth.context import ActorContext
from leave_portal.balance.ledger import (
    debit_for_leave,
    ensure_sufficient_balance,
    restore_for_leave,
)
from leave_portal.balance.schemas import BalanceAdjustment, BalanceSnapshot
from leave_portal.common.constants import ActorRole, LeaveStatus, TerminalApprover
from leave_portal.common.exceptions import (
    AuthorizationError,
    InvalidStateError,
    ValidationError,
)
from leave_portal.config import settings
from leave_portal.leave.calculator import count_leave_days, validate_modified_range
from leave_portal.leave.schemas import LeaveRequest, LeaveStatusUpdate

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Campus policy
# ═════════════════════════════════════════════════════════════════════


class CampusPolicy:
    """Maps each campus to the role that finalizes its leave requests."""

    def __init__(
        self,
        terminal_approvers: Optional[Mapping[str, str]] = None,
        default: TerminalApprover = TerminalApprover.principal,
    ) -> None:
        self.default = TerminalApprover(default)
        self._approvers = {
            campus.strip().lower(): TerminalApprover(role)
            for campus, role in (terminal_approvers or {}).items()
        }

    @classmethod
    def from_settings(cls) -> "CampusPolicy":
        return cls(
            settings.terminal_approvers_map,
            default=TerminalApprover(settings.DEFAULT_TERMINAL_APPROVER.lower()),
        )

    def terminal_approver(self, campus: str) -> TerminalApprover:
        return self._approvers.get(campus.strip().lower(), self.default)

    def is_terminal_approver(self, actor: ActorContext, campus: str) -> bool:
        return (
            actor.same_campus(campus)
            and actor.role.value == self.terminal_approver(campus).value
        )


class TransitionResult(BaseModel):
    """Outcome of one leave transition."""

    model_config = ConfigDict(frozen=True)

    request: LeaveRequest
    update: LeaveStatusUpdate
    adjustments: list[BalanceAdjustment] = Field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(remarks: Optional[str]) -> Optional[str]:
    if remarks is None:
        return None
    remarks = remarks.strip()
    return remarks or None


# ═════════════════════════════════════════════════════════════════════
# LeaveApprovalWorkflow
# ═════════════════════════════════════════════════════════════════════


class LeaveApprovalWorkflow:
    """Forward / reject / approve / revoke for leave requests."""

    def __init__(self, policy: Optional[CampusPolicy] = None) -> None:
        self.policy = policy or CampusPolicy()

    # ── Guards ──────────────────────────────────────────────────────

    @staticmethod
    def _require_not_rejected(request: LeaveRequest, attempted: str) -> None:
        if request.status is LeaveStatus.rejected:
            raise InvalidStateError(request.status, attempted)

    @staticmethod
    def _require_hod(request: LeaveRequest, actor: ActorContext) -> None:
        if not actor.is_hod_of(request.department, request.campus):
            raise AuthorizationError(
                "Only the HOD of the requester's department can act on a pending request."
            )

    def _require_terminal_approver(self, request: LeaveRequest, actor: ActorContext) -> None:
        if not self.policy.is_terminal_approver(actor, request.campus):
            approver = self.policy.terminal_approver(request.campus)
            raise AuthorizationError(
                f"Only the {approver.label} of campus '{request.campus}' can finalize this request."
            )

    @staticmethod
    def _require_status(request: LeaveRequest, expected: LeaveStatus, attempted: str) -> None:
        if request.status is not expected:
            raise InvalidStateError(request.status, attempted)

    def _log(self, request: LeaveRequest, actor: ActorContext, old: LeaveStatus) -> None:
        logger.info(
            "Leave request %s: '%s' -> '%s' by %s (%s)",
            request.id, old.value, request.status.value, actor.employee_id, actor.role.value,
        )

    # ── Transitions ─────────────────────────────────────────────────

    def forward(
        self,
        request: LeaveRequest,
        actor: ActorContext,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        """Pending → Forwarded by HOD."""
        self._require_not_rejected(request, "forward")
        self._require_hod(request, actor)
        self._require_status(request, LeaveStatus.pending, "forward")

        approver = self.policy.terminal_approver(request.campus)
        remarks = _clean(remarks) or f"Forwarded to {approver.label}"
        updated = request.model_copy(
            update={
                "status": LeaveStatus.forwarded_by_hod,
                "hod_remarks": remarks,
                "hod_approval_date": now or _utcnow(),
            }
        )
        self._log(updated, actor, request.status)
        return TransitionResult(
            request=updated,
            update=LeaveStatusUpdate(status=LeaveStatus.forwarded_by_hod, remarks=remarks),
        )

    def reject(
        self,
        request: LeaveRequest,
        actor: ActorContext,
        remarks: Optional[str],
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        """Pending/Forwarded by HOD → Rejected; Approved → Rejected is the override."""
        self._require_not_rejected(request, "reject")
        if request.status is LeaveStatus.approved:
            return self.revoke(request, actor, remarks, now=now)

        if request.status is LeaveStatus.pending:
            self._require_hod(request, actor)
        else:
            self._require_terminal_approver(request, actor)

        remarks = _clean(remarks)
        if remarks is None:
            raise ValidationError.single("remarks", "Please provide remarks for rejection")

        stamp = now or _utcnow()
        if request.status is LeaveStatus.pending:
            fields = {"hod_remarks": remarks, "hod_approval_date": stamp}
        else:
            fields = {"principal_remarks": remarks, "principal_approval_date": stamp}
        updated = request.model_copy(update={"status": LeaveStatus.rejected, **fields})
        self._log(updated, actor, request.status)
        return TransitionResult(
            request=updated,
            update=LeaveStatusUpdate(status=LeaveStatus.rejected, remarks=remarks),
        )

    def revoke(
        self,
        request: LeaveRequest,
        actor: ActorContext,
        remarks: Optional[str],
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        """Administrative override: reject an already-approved request and restore the balance."""
        self._require_not_rejected(request, "revoke")
        if actor.role is not ActorRole.principal or not actor.same_campus(request.campus):
            raise AuthorizationError(
                "Only the Principal of the campus can reject an approved request."
            )
        self._require_status(request, LeaveStatus.approved, "revoke")

        remarks = _clean(remarks)
        if remarks is None:
            raise ValidationError.single("remarks", "Please provide remarks for rejection")

        updated = request.model_copy(
            update={
                "status": LeaveStatus.rejected,
                "principal_remarks": remarks,
                "principal_approval_date": now or _utcnow(),
            }
        )
        restore = restore_for_leave(
            employee_id=request.employee_id,
            leave_type=request.leave_type,
            days=request.effective_days,
            reference=request.id,
            remarks=f"Approved leave rejected: {remarks}",
        )
        logger.warning(
            "Approved leave request %s overridden to Rejected by %s; restoring %.1f day(s)",
            request.id, actor.employee_id, restore.days,
        )
        return TransitionResult(
            request=updated,
            update=LeaveStatusUpdate(status=LeaveStatus.rejected, remarks=remarks),
            adjustments=[restore],
        )

    def approve(
        self,
        request: LeaveRequest,
        actor: ActorContext,
        remarks: Optional[str] = None,
        approved_start_date: Optional[date] = None,
        approved_end_date: Optional[date] = None,
        modification_reason: Optional[str] = None,
        balance: Optional[BalanceSnapshot] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        """Forwarded by HOD → Approved, optionally narrowing or moving the dates.

        When the approver's dates differ from the requested ones the day count
        is recomputed and a modification reason becomes mandatory. The debit
        signalled to the ledger is for the days actually granted.
        """
        self._require_not_rejected(request, "approve")
        self._require_terminal_approver(request, actor)
        self._require_status(request, LeaveStatus.forwarded_by_hod, "approve")

        new_start = approved_start_date or request.start_date
        new_end = approved_end_date or request.end_date
        is_modified = (new_start, new_end) != (request.start_date, request.end_date)

        fields: dict = {}
        days = request.number_of_days
        reason = None
        if is_modified:
            validate_modified_range(new_start, new_end)
            if request.is_half_day and new_start != new_end:
                raise ValidationError.single(
                    "approvedEndDate", "Half-day leave can only be moved to a single date",
                )
            reason = _clean(modification_reason)
            if reason is None:
                raise ValidationError.single(
                    "principalModificationReason", "Please provide reason for date modification",
                )
            days = count_leave_days(new_start, new_end, request.is_half_day)

        if balance is not None:
            ensure_sufficient_balance(balance, request.leave_type, days)

        approver = self.policy.terminal_approver(request.campus)
        remarks = _clean(remarks) or f"Approved by {approver.label}"
        stamp = now or _utcnow()
        fields.update(
            status=LeaveStatus.approved,
            principal_remarks=remarks,
            principal_approval_date=stamp,
        )
        if is_modified:
            fields.update(
                approved_start_date=new_start,
                approved_end_date=new_end,
                approved_number_of_days=days,
                principal_modification_reason=reason,
                principal_modification_date=stamp,
                is_modified_by_principal=True,
            )
        updated = request.model_copy(update=fields)

        debit = debit_for_leave(
            employee_id=request.employee_id,
            leave_type=request.leave_type,
            days=days,
            reference=request.id,
            remarks=f"{request.leave_type.value} leave approved by {approver.label}",
        )
        self._log(updated, actor, request.status)
        return TransitionResult(
            request=updated,
            update=LeaveStatusUpdate(
                status=LeaveStatus.approved,
                remarks=remarks,
                approved_start_date=new_start if is_modified else None,
                approved_end_date=new_end if is_modified else None,
                approved_number_of_days=days if is_modified else None,
                principal_modification_reason=reason,
            ),
            adjustments=[debit],
        )
