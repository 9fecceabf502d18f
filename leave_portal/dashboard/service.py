"""Dashboard service — fetch the viewer's request lists and build the view."""

from __future__ import annotations

from typing import Any

from leave_portal.auth.context import ActorContext
from leave_portal.common.constants import ActorRole
from leave_portal.dashboard.schemas import DashboardSection, DashboardView
from leave_portal.dashboard.views import build_dashboard, resolve_view
from leave_portal.leave.workflow import CampusPolicy
from leave_portal.remote.client import PortalBackendClient


def _filters_for(actor: ActorContext) -> dict[str, Any]:
    if actor.role is ActorRole.employee:
        return {"employeeId": actor.employee_id}
    if actor.role is ActorRole.hod:
        return {"campus": actor.campus, "department": actor.department}
    return {"campus": actor.campus}


class DashboardService:

    @staticmethod
    async def get_section(
        client: PortalBackendClient,
        actor: ActorContext,
        section: str,
    ) -> DashboardView:
        resolved, _ = resolve_view(actor.role, section)
        filters = _filters_for(actor)

        leaves = []
        if resolved is not DashboardSection.ccl_work:
            leaves = await client.list_leave_requests(**filters)
        ccl = []
        if resolved is not DashboardSection.leave_requests:
            ccl = await client.list_ccl_work_requests(**filters)

        return build_dashboard(actor, section, leaves, ccl, CampusPolicy.from_settings())
