"""CCL work request service — submission and the HOD → Principal chain."""

from __future__ import annotations

import logging
from typing import Optional

from leave_portal.auth.context import ActorContext
from leave_portal.balance.ledger import BalanceLedger
from leave_portal.ccl.schemas import CCLTransitionOut, CCLWorkRequest, CCLWorkRequestIn
from leave_portal.ccl.workflow import (
    CCLApprovalWorkflow,
    CCLTransitionResult,
    validate_ccl_submission,
)
from leave_portal.remote.client import PortalBackendClient

logger = logging.getLogger(__name__)


class CCLService:
    """Async CCL work operations for one authenticated actor."""

    @staticmethod
    async def _send_transition(
        client: PortalBackendClient,
        request: CCLWorkRequest,
        result: CCLTransitionResult,
    ) -> CCLTransitionOut:
        # Balance is read before the update; the backend credits on approval
        balance = None
        if result.adjustments:
            balance = await client.get_leave_balance(request.employee_id)

        updated = await client.update_ccl_status(request.id, result.update)
        new_ccl_balance = None
        if balance is not None:
            projected = BalanceLedger(request.employee_id, balance).apply_all(result.adjustments)
            new_ccl_balance = projected.ccl_balance
        return CCLTransitionOut(ccl_work_request=updated, new_ccl_balance=new_ccl_balance)

    @staticmethod
    async def submit(
        client: PortalBackendClient,
        actor: ActorContext,
        body: CCLWorkRequestIn,
    ) -> CCLWorkRequest:
        payload = validate_ccl_submission(actor, body)
        return await client.submit_ccl_work_request(payload)

    @staticmethod
    async def forward(
        client: PortalBackendClient,
        actor: ActorContext,
        request_id: str,
        remarks: Optional[str] = None,
    ) -> CCLTransitionOut:
        request = await client.get_ccl_work_request(request_id)
        result = CCLApprovalWorkflow().forward(request, actor, remarks)
        return await CCLService._send_transition(client, request, result)

    @staticmethod
    async def reject(
        client: PortalBackendClient,
        actor: ActorContext,
        request_id: str,
        remarks: Optional[str],
    ) -> CCLTransitionOut:
        request = await client.get_ccl_work_request(request_id)
        result = CCLApprovalWorkflow().reject(request, actor, remarks)
        return await CCLService._send_transition(client, request, result)

    @staticmethod
    async def approve(
        client: PortalBackendClient,
        actor: ActorContext,
        request_id: str,
        remarks: Optional[str] = None,
    ) -> CCLTransitionOut:
        request = await client.get_ccl_work_request(request_id)
        result = CCLApprovalWorkflow().approve(request, actor, remarks)
        return await CCLService._send_transition(client, request, result)
