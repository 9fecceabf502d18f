"""CCL work router — submit extra-duty work, HOD forward, Principal decision."""

from fastapi import APIRouter, Depends, Request

from leave_portal.auth.context import ActorContext
from leave_portal.auth.dependencies import get_actor, get_backend_client, require_role
from leave_portal.ccl.schemas import (
    CCLRemarksIn,
    CCLTransitionOut,
    CCLWorkRequest,
    CCLWorkRequestIn,
)
from leave_portal.ccl.service import CCLService
from leave_portal.common.constants import ActorRole
from leave_portal.common.rate_limit import limiter
from leave_portal.remote.client import PortalBackendClient

router = APIRouter(prefix="", tags=["ccl"])


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=CCLWorkRequest, status_code=201)
@limiter.limit("10/minute")
async def submit_ccl_work(
    request: Request,
    body: CCLWorkRequestIn,
    actor: ActorContext = Depends(get_actor),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Submit a CCL work request for HOD review."""
    return await CCLService.submit(client, actor, body)


# ── PUT /{id}/forward ───────────────────────────────────────────────

@router.put("/{request_id}/forward", response_model=CCLTransitionOut)
async def forward_ccl_work(
    request_id: str,
    body: CCLRemarksIn,
    actor: ActorContext = Depends(require_role(ActorRole.hod)),
    client: PortalBackendClient = Depends(get_backend_client),
):
    return await CCLService.forward(client, actor, request_id, body.remarks)


# ── PUT /{id}/reject ────────────────────────────────────────────────

@router.put("/{request_id}/reject", response_model=CCLTransitionOut)
async def reject_ccl_work(
    request_id: str,
    body: CCLRemarksIn,
    actor: ActorContext = Depends(require_role(ActorRole.hod, ActorRole.principal)),
    client: PortalBackendClient = Depends(get_backend_client),
):
    return await CCLService.reject(client, actor, request_id, body.remarks)


# ── PUT /{id}/approve ───────────────────────────────────────────────

@router.put("/{request_id}/approve", response_model=CCLTransitionOut)
async def approve_ccl_work(
    request_id: str,
    body: CCLRemarksIn,
    actor: ActorContext = Depends(require_role(ActorRole.principal)),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Approve a forwarded CCL work request; credits one CCL day."""
    return await CCLService.approve(client, actor, request_id, body.remarks)
