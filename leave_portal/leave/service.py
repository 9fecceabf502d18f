"""Leave service layer — drafts, submission, approval transitions.

Business logic:
  - Preview: validate basic details, check the balance, lay out the schedule
  - Apply: replay a full draft through the builder (availability checked per
    period) and submit it
  - Forward / reject / approve / revoke: always re-fetch the authoritative
    request, run the state machine, send the update, project the balance
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from leave_portal.auth.context import ActorContext
from leave_portal.balance.ledger import BalanceLedger, balance_kind_for
from leave_portal.balance.schemas import BalanceSnapshot
from leave_portal.common.exceptions import InsufficientBalanceError, ValidationError
from leave_portal.config import settings
from leave_portal.leave.builder import LeaveRequestBuilder
from leave_portal.leave.schemas import (
    FacultyMember,
    LeaveApproveIn,
    LeaveBasicDetailsIn,
    LeaveDraftIn,
    LeavePreviewOut,
    LeaveRequest,
    LeaveTransitionOut,
)
from leave_portal.leave.workflow import (
    CampusPolicy,
    LeaveApprovalWorkflow,
    TransitionResult,
)
from leave_portal.remote.client import PortalBackendClient

logger = logging.getLogger(__name__)


def default_workflow() -> LeaveApprovalWorkflow:
    return LeaveApprovalWorkflow(CampusPolicy.from_settings())


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations for one authenticated actor."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _new_builder(
        client: PortalBackendClient,
        actor: ActorContext,
        faculty: Optional[list[FacultyMember]] = None,
        today: Optional[date] = None,
    ) -> LeaveRequestBuilder:
        return LeaveRequestBuilder(
            actor,
            client,
            faculty=faculty,
            today=today,
            backdate_limit_days=settings.BACKDATE_LIMIT_DAYS,
            max_span_days=settings.MAX_LEAVE_SPAN_DAYS,
        )

    @staticmethod
    def _set_details(builder: LeaveRequestBuilder, body: LeaveBasicDetailsIn) -> None:
        builder.set_basic_details(
            leave_type=body.leave_type,
            start_date=body.start_date,
            end_date=body.end_date,
            is_half_day=body.is_half_day,
            session=body.session,
            reason=body.reason,
        )

    @staticmethod
    async def _send_transition(
        client: PortalBackendClient,
        request: LeaveRequest,
        result: TransitionResult,
        balance: Optional[BalanceSnapshot] = None,
    ) -> LeaveTransitionOut:
        updated = await client.update_leave_status(request.id, result.update)

        new_balance = None
        if balance is not None and result.adjustments:
            ledger = BalanceLedger(request.employee_id, balance)
            try:
                projected = ledger.apply_all(result.adjustments)
            except InsufficientBalanceError:
                # OD is not balance-checked and may exceed the fetched balance
                logger.warning(
                    "Leave request %s: adjustments exceed the fetched balance of %s",
                    request.id, request.employee_id,
                )
            else:
                new_balance = projected.available(balance_kind_for(request.leave_type))

        return LeaveTransitionOut(
            leave_request=updated,
            new_balance=new_balance,
            is_modified=result.request.is_modified_by_principal,
        )

    # ─────────────────────────────────────────────────────────────────
    # Balance / faculty
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_balance(client: PortalBackendClient, actor: ActorContext) -> BalanceSnapshot:
        return await client.get_leave_balance(actor.employee_id)

    @staticmethod
    async def get_faculty(
        client: PortalBackendClient, actor: ActorContext,
    ) -> list[FacultyMember]:
        """Campus colleagues eligible as substitutes (the requester excluded)."""
        faculty = await client.get_faculty_list(actor.campus)
        return [
            f for f in faculty
            if f.id != actor.employee_id and actor.same_campus(f.campus)
        ]

    # ─────────────────────────────────────────────────────────────────
    # Draft / submission
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def preview(
        client: PortalBackendClient,
        actor: ActorContext,
        body: LeaveBasicDetailsIn,
        today: Optional[date] = None,
    ) -> LeavePreviewOut:
        builder = LeaveService._new_builder(client, actor, today=today)
        LeaveService._set_details(builder, body)
        balance = await client.get_leave_balance(actor.employee_id)
        schedule = builder.next_step(balance)
        return LeavePreviewOut(
            number_of_days=builder.number_of_days,
            schedule_dates=[day.date for day in schedule],
            allowed_periods=list(builder.allowed_periods()),
        )

    @staticmethod
    async def apply(
        client: PortalBackendClient,
        actor: ActorContext,
        body: LeaveDraftIn,
        today: Optional[date] = None,
    ) -> LeaveRequest:
        """Validate and submit a complete leave form."""
        faculty = await client.get_faculty_list(actor.campus)
        builder = LeaveService._new_builder(client, actor, faculty=faculty, today=today)
        LeaveService._set_details(builder, body)
        balance = await client.get_leave_balance(actor.employee_id)
        schedule = builder.next_step(balance)

        index_by_date = {day.date: i for i, day in enumerate(schedule)}
        for day in body.alternate_schedule:
            if day.date not in index_by_date:
                raise ValidationError.single(
                    "alternateSchedule",
                    f"{day.date.isoformat()} is outside the leave dates",
                )
            for period in day.periods:
                await builder.add_period(
                    index_by_date[day.date],
                    period.period_number,
                    period.substitute_faculty,
                    period.assigned_class,
                )

        return await builder.submit(client)

    # ─────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def forward(
        client: PortalBackendClient,
        actor: ActorContext,
        request_id: str,
        remarks: Optional[str] = None,
        workflow: Optional[LeaveApprovalWorkflow] = None,
    ) -> LeaveTransitionOut:
        workflow = workflow or default_workflow()
        request = await client.get_leave_request(request_id)
        result = workflow.forward(request, actor, remarks)
        return await LeaveService._send_transition(client, request, result)

    @staticmethod
    async def reject(
        client: PortalBackendClient,
        actor: ActorContext,
        request_id: str,
        remarks: Optional[str],
        workflow: Optional[LeaveApprovalWorkflow] = None,
    ) -> LeaveTransitionOut:
        workflow = workflow or default_workflow()
        request = await client.get_leave_request(request_id)
        result = workflow.reject(request, actor, remarks)
        balance = None
        if result.adjustments:
            balance = await client.get_leave_balance(request.employee_id)
        return await LeaveService._send_transition(client, request, result, balance)

    @staticmethod
    async def revoke(
        client: PortalBackendClient,
        actor: ActorContext,
        request_id: str,
        remarks: Optional[str],
        workflow: Optional[LeaveApprovalWorkflow] = None,
    ) -> LeaveTransitionOut:
        workflow = workflow or default_workflow()
        request = await client.get_leave_request(request_id)
        result = workflow.revoke(request, actor, remarks)
        balance = await client.get_leave_balance(request.employee_id)
        return await LeaveService._send_transition(client, request, result, balance)

    @staticmethod
    async def approve(
        client: PortalBackendClient,
        actor: ActorContext,
        request_id: str,
        body: LeaveApproveIn,
        workflow: Optional[LeaveApprovalWorkflow] = None,
    ) -> LeaveTransitionOut:
        workflow = workflow or default_workflow()
        request = await client.get_leave_request(request_id)
        balance = await client.get_leave_balance(request.employee_id)
        result = workflow.approve(
            request,
            actor,
            remarks=body.remarks,
            approved_start_date=body.approved_start_date,
            approved_end_date=body.approved_end_date,
            modification_reason=body.principal_modification_reason,
            balance=balance,
        )
        return await LeaveService._send_transition(client, request, result, balance)
