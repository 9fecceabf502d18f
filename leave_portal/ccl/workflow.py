"""CCL work request approval chain.

Pending ──(HOD)──▶ Forwarded to Principal ──(Principal)──▶ Approved
   └──(HOD)──▶ Rejected ◀──(Principal)──┘

No date modification and no schedule. An approved work request earns one
compensatory (CCL) day.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from leave_portal.auth.context import ActorContext
from leave_portal.balance.schemas import BalanceAdjustment
from leave_portal.ccl.schemas import (
    CCLStatusUpdate,
    CCLWorkRequest,
    CCLWorkRequestCreate,
    CCLWorkRequestIn,
)
from leave_portal.common.constants import (
    CCL_WORK_CREDIT_DAYS,
    ActorRole,
    BalanceKind,
    CCLStatus,
    LedgerEntryType,
)
from leave_portal.common.exceptions import (
    AuthorizationError,
    InvalidStateError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class CCLTransitionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    request: CCLWorkRequest
    update: CCLStatusUpdate
    adjustments: list[BalanceAdjustment] = Field(default_factory=list)


def validate_ccl_submission(
    actor: ActorContext,
    body: CCLWorkRequestIn,
) -> CCLWorkRequestCreate:
    """Check the CCL work form and build the submission payload."""
    errors: dict[str, list[str]] = {}
    if body.date is None:
        errors.setdefault("date", []).append("Please select date")
    if body.assigned_to is None:
        errors.setdefault("assignedTo", []).append("Please select who assigned the work")
    if body.reason is None or not body.reason.strip():
        errors.setdefault("reason", []).append("Please enter reason")
    if errors:
        raise ValidationError(errors)

    return CCLWorkRequestCreate(
        employee_id=actor.employee_id,
        department=actor.department,
        campus=actor.campus,
        date=body.date,
        assigned_to=body.assigned_to,
        reason=body.reason.strip(),
        status=CCLStatus.pending,
    )


def _clean(remarks: Optional[str]) -> Optional[str]:
    if remarks is None:
        return None
    return remarks.strip() or None


class CCLApprovalWorkflow:
    """Forward / reject / approve for CCL work requests."""

    @staticmethod
    def _require_hod(request: CCLWorkRequest, actor: ActorContext) -> None:
        if not actor.is_hod_of(request.department, request.campus):
            raise AuthorizationError(
                "Only the HOD of the requester's department can act on a pending CCL request."
            )

    @staticmethod
    def _require_principal(request: CCLWorkRequest, actor: ActorContext) -> None:
        if actor.role is not ActorRole.principal or not actor.same_campus(request.campus):
            raise AuthorizationError(
                "Only the Principal of the campus can finalize a CCL work request."
            )

    @staticmethod
    def _check_state(request: CCLWorkRequest, expected: CCLStatus, attempted: str) -> None:
        if request.status is not expected:
            raise InvalidStateError(request.status, attempted)

    def forward(
        self,
        request: CCLWorkRequest,
        actor: ActorContext,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CCLTransitionResult:
        if request.status.is_terminal:
            raise InvalidStateError(request.status, "forward")
        self._require_hod(request, actor)
        self._check_state(request, CCLStatus.pending, "forward")

        remarks = _clean(remarks) or "Forwarded to Principal by HOD"
        updated = request.model_copy(
            update={
                "status": CCLStatus.forwarded_to_principal,
                "hod_remarks": remarks,
                "hod_approval_date": now or datetime.now(timezone.utc),
            }
        )
        logger.info("CCL request %s forwarded by HOD %s", request.id, actor.employee_id)
        return CCLTransitionResult(
            request=updated,
            update=CCLStatusUpdate(status=CCLStatus.forwarded_to_principal, remarks=remarks),
        )

    def reject(
        self,
        request: CCLWorkRequest,
        actor: ActorContext,
        remarks: Optional[str],
        now: Optional[datetime] = None,
    ) -> CCLTransitionResult:
        if request.status.is_terminal:
            raise InvalidStateError(request.status, "reject")
        if request.status is CCLStatus.pending:
            self._require_hod(request, actor)
        else:
            self._require_principal(request, actor)

        remarks = _clean(remarks)
        if remarks is None:
            raise ValidationError.single("remarks", "Please provide remarks for rejection")

        stamp = now or datetime.now(timezone.utc)
        if request.status is CCLStatus.pending:
            fields = {"hod_remarks": remarks, "hod_approval_date": stamp}
        else:
            fields = {"principal_remarks": remarks, "principal_approval_date": stamp}
        updated = request.model_copy(update={"status": CCLStatus.rejected, **fields})
        logger.info("CCL request %s rejected by %s", request.id, actor.employee_id)
        return CCLTransitionResult(
            request=updated,
            update=CCLStatusUpdate(status=CCLStatus.rejected, remarks=remarks),
        )

    def approve(
        self,
        request: CCLWorkRequest,
        actor: ActorContext,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CCLTransitionResult:
        if request.status.is_terminal:
            raise InvalidStateError(request.status, "approve")
        self._require_principal(request, actor)
        self._check_state(request, CCLStatus.forwarded_to_principal, "approve")

        remarks = _clean(remarks) or "Approved by Principal"
        updated = request.model_copy(
            update={
                "status": CCLStatus.approved,
                "principal_remarks": remarks,
                "principal_approval_date": now or datetime.now(timezone.utc),
            }
        )
        credit = BalanceAdjustment(
            employee_id=request.employee_id,
            balance=BalanceKind.ccl,
            entry_type=LedgerEntryType.earned,
            days=CCL_WORK_CREDIT_DAYS,
            reference=request.id,
            remarks="CCL earned from extra duty",
        )
        logger.info(
            "CCL request %s approved by %s; crediting %.1f CCL day(s) to %s",
            request.id, actor.employee_id, CCL_WORK_CREDIT_DAYS, request.employee_id,
        )
        return CCLTransitionResult(
            request=updated,
            update=CCLStatusUpdate(status=CCLStatus.approved, remarks=remarks),
            adjustments=[credit],
        )
