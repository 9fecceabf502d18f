"""Leave router — balance, substitutes, draft preview, apply, approval chain.

All endpoints require authentication. Transition endpoints are role-gated
here; finer rules (department, campus, state) are enforced by the workflow.
"""

from fastapi import APIRouter, Depends, Request

from leave_portal.auth.context import ActorContext
from leave_portal.auth.dependencies import get_actor, get_backend_client, require_role
from leave_portal.balance.schemas import BalanceSnapshot
from leave_portal.common.constants import ActorRole
from leave_portal.common.rate_limit import limiter
from leave_portal.leave.schemas import (
    FacultyMember,
    LeaveApproveIn,
    LeaveBasicDetailsIn,
    LeaveDraftIn,
    LeaveForwardIn,
    LeavePreviewOut,
    LeaveRejectIn,
    LeaveRequest,
    LeaveTransitionOut,
)
from leave_portal.leave.service import LeaveService
from leave_portal.remote.client import PortalBackendClient

router = APIRouter(prefix="", tags=["leave"])


# ── GET /balance ────────────────────────────────────────────────────

@router.get("/balance", response_model=BalanceSnapshot)
async def get_balance(
    actor: ActorContext = Depends(get_actor),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """The authenticated employee's leave and CCL balances."""
    return await LeaveService.get_balance(client, actor)


# ── GET /faculty ────────────────────────────────────────────────────

@router.get("/faculty", response_model=list[FacultyMember])
async def list_faculty(
    actor: ActorContext = Depends(get_actor),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Substitute candidates on the requester's campus."""
    return await LeaveService.get_faculty(client, actor)


# ── POST /preview ───────────────────────────────────────────────────

@router.post("/preview", response_model=LeavePreviewOut)
async def preview_leave(
    body: LeaveBasicDetailsIn,
    actor: ActorContext = Depends(get_actor),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Validate basic details and return the day count and schedule skeleton."""
    return await LeaveService.preview(client, actor, body)


# ── POST /apply ─────────────────────────────────────────────────────

@router.post("/apply", response_model=LeaveRequest, status_code=201)
@limiter.limit("10/minute")
async def apply_leave(
    request: Request,
    body: LeaveDraftIn,
    actor: ActorContext = Depends(get_actor),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Apply for leave. Validates dates, balance and every substitute assignment."""
    return await LeaveService.apply(client, actor, body)


# ── PUT /{id}/forward ───────────────────────────────────────────────

@router.put("/{request_id}/forward", response_model=LeaveTransitionOut)
async def forward_leave(
    request_id: str,
    body: LeaveForwardIn,
    actor: ActorContext = Depends(require_role(ActorRole.hod)),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """HOD forwards a pending request to the campus terminal approver."""
    return await LeaveService.forward(client, actor, request_id, body.remarks)


# ── PUT /{id}/reject ────────────────────────────────────────────────

@router.put("/{request_id}/reject", response_model=LeaveTransitionOut)
async def reject_leave(
    request_id: str,
    body: LeaveRejectIn,
    actor: ActorContext = Depends(
        require_role(ActorRole.hod, ActorRole.principal, ActorRole.hr)
    ),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Reject a request. Remarks are required."""
    return await LeaveService.reject(client, actor, request_id, body.remarks)


# ── PUT /{id}/approve ───────────────────────────────────────────────

@router.put("/{request_id}/approve", response_model=LeaveTransitionOut)
async def approve_leave(
    request_id: str,
    body: LeaveApproveIn,
    actor: ActorContext = Depends(require_role(ActorRole.principal, ActorRole.hr)),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Final approval, optionally with modified dates. Debits the balance."""
    return await LeaveService.approve(client, actor, request_id, body)


# ── PUT /{id}/revoke ────────────────────────────────────────────────

@router.put("/{request_id}/revoke", response_model=LeaveTransitionOut)
async def revoke_leave(
    request_id: str,
    body: LeaveRejectIn,
    actor: ActorContext = Depends(require_role(ActorRole.principal)),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Reject an already-approved request and restore the balance."""
    return await LeaveService.revoke(client, actor, request_id, body.remarks)
