"""Dashboard router — one read-only view per role and section.

Sections: ``overview``, ``leave-requests``, ``ccl-work``. Combinations a
role does not have are answered with 403.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from leave_portal.auth.context import ActorContext
from leave_portal.auth.dependencies import get_actor, get_backend_client
from leave_portal.dashboard.schemas import DashboardView
from leave_portal.dashboard.service import DashboardService
from leave_portal.remote.client import PortalBackendClient

router = APIRouter()


# ── GET /{section} ──────────────────────────────────────────────────

@router.get("/{section}", response_model=DashboardView)
async def dashboard_section(
    section: str,
    actor: ActorContext = Depends(get_actor),
    client: PortalBackendClient = Depends(get_backend_client),
):
    """Status counts, action queue and request list for the viewer's role."""
    return await DashboardService.get_section(client, actor, section)
