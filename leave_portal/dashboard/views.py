"""Role/section view models, computed from request lists.

Each (role, section) pair the portal offers has an entry in ``_VIEWS``;
anything else is refused. View builders are pure: they scope the lists to
what the viewer may see, count statuses, and queue the requests waiting on
the viewer.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence

from leave_portal.auth.context import ActorContext
from leave_portal.ccl.schemas import CCLWorkRequest
from leave_portal.common.constants import ActorRole, CCLStatus, LeaveStatus
from leave_portal.common.exceptions import AuthorizationError
from leave_portal.dashboard.schemas import (
    ActionItem,
    DashboardSection,
    DashboardView,
    RequestKind,
)
from leave_portal.leave.schemas import LeaveRequest
from leave_portal.leave.workflow import CampusPolicy


# ── Visibility ──────────────────────────────────────────────────────

def _visible(actor: ActorContext, employee_id: str, department: Optional[str], campus: str) -> bool:
    if actor.role is ActorRole.employee:
        return employee_id == actor.employee_id
    if actor.role is ActorRole.hod:
        return actor.is_hod_of(department, campus)
    return actor.same_campus(campus)


def scope_leave_requests(
    actor: ActorContext, requests: Iterable[LeaveRequest],
) -> list[LeaveRequest]:
    return [r for r in requests if _visible(actor, r.employee_id, r.department, r.campus)]


def scope_ccl_requests(
    actor: ActorContext, requests: Iterable[CCLWorkRequest],
) -> list[CCLWorkRequest]:
    return [r for r in requests if _visible(actor, r.employee_id, r.department, r.campus)]


# ── Actions ─────────────────────────────────────────────────────────

def leave_actions(actor: ActorContext, request: LeaveRequest, policy: CampusPolicy) -> list[str]:
    """Transitions the actor can take on this leave request right now."""
    if request.status is LeaveStatus.pending and actor.is_hod_of(request.department, request.campus):
        return ["forward", "reject"]
    if (
        request.status is LeaveStatus.forwarded_by_hod
        and policy.is_terminal_approver(actor, request.campus)
    ):
        return ["approve", "reject"]
    if (
        request.status is LeaveStatus.approved
        and actor.role is ActorRole.principal
        and actor.same_campus(request.campus)
    ):
        return ["revoke"]
    return []


def ccl_actions(actor: ActorContext, request: CCLWorkRequest) -> list[str]:
    if request.status is CCLStatus.pending and actor.is_hod_of(request.department, request.campus):
        return ["forward", "reject"]
    if (
        request.status is CCLStatus.forwarded_to_principal
        and actor.role is ActorRole.principal
        and actor.same_campus(request.campus)
    ):
        return ["approve", "reject"]
    return []


def _leave_queue(
    actor: ActorContext, requests: Sequence[LeaveRequest], policy: CampusPolicy,
) -> list[ActionItem]:
    queue = []
    for r in requests:
        actions = leave_actions(actor, r, policy)
        if actions:
            queue.append(
                ActionItem(
                    kind=RequestKind.leave,
                    request_id=r.id,
                    employee_id=r.employee_id,
                    status=r.status.value,
                    summary=(
                        f"{r.leave_type.value} {r.start_date.isoformat()}"
                        f" to {r.end_date.isoformat()} ({r.number_of_days:g} day(s))"
                    ),
                    actions=actions,
                )
            )
    return queue


def _ccl_queue(actor: ActorContext, requests: Sequence[CCLWorkRequest]) -> list[ActionItem]:
    queue = []
    for r in requests:
        actions = ccl_actions(actor, r)
        if actions:
            queue.append(
                ActionItem(
                    kind=RequestKind.ccl,
                    request_id=r.id,
                    employee_id=r.employee_id,
                    status=r.status.value,
                    summary=f"CCL work on {r.date.isoformat()} assigned by {r.assigned_to.value}",
                    actions=actions,
                )
            )
    return queue


def _leave_counts(requests: Sequence[LeaveRequest]) -> dict[str, int]:
    counts = {s.value: 0 for s in LeaveStatus}
    for r in requests:
        counts[r.status.value] += 1
    return counts


def _ccl_counts(requests: Sequence[CCLWorkRequest]) -> dict[str, int]:
    counts = {s.value: 0 for s in CCLStatus}
    for r in requests:
        counts[r.status.value] += 1
    return counts


# ── Section builders ────────────────────────────────────────────────

def _overview(actor, leaves, ccl, policy) -> DashboardView:
    return DashboardView(
        role=actor.role,
        section=DashboardSection.overview,
        leave_status_counts=_leave_counts(leaves),
        ccl_status_counts=_ccl_counts(ccl),
        action_queue=_leave_queue(actor, leaves, policy) + _ccl_queue(actor, ccl),
    )


def _leave_section(actor, leaves, ccl, policy) -> DashboardView:
    return DashboardView(
        role=actor.role,
        section=DashboardSection.leave_requests,
        leave_status_counts=_leave_counts(leaves),
        action_queue=_leave_queue(actor, leaves, policy),
        leave_requests=leaves,
    )


def _ccl_section(actor, leaves, ccl, policy) -> DashboardView:
    return DashboardView(
        role=actor.role,
        section=DashboardSection.ccl_work,
        ccl_status_counts=_ccl_counts(ccl),
        action_queue=_ccl_queue(actor, ccl),
        ccl_work_requests=ccl,
    )


_ViewBuilder = Callable[..., DashboardView]

# HR finalizes leave only; CCL work never reaches HR
_VIEWS: dict[tuple[ActorRole, DashboardSection], _ViewBuilder] = {
    (ActorRole.employee, DashboardSection.overview): _overview,
    (ActorRole.employee, DashboardSection.leave_requests): _leave_section,
    (ActorRole.employee, DashboardSection.ccl_work): _ccl_section,
    (ActorRole.hod, DashboardSection.overview): _overview,
    (ActorRole.hod, DashboardSection.leave_requests): _leave_section,
    (ActorRole.hod, DashboardSection.ccl_work): _ccl_section,
    (ActorRole.principal, DashboardSection.overview): _overview,
    (ActorRole.principal, DashboardSection.leave_requests): _leave_section,
    (ActorRole.principal, DashboardSection.ccl_work): _ccl_section,
    (ActorRole.hr, DashboardSection.overview): _overview,
    (ActorRole.hr, DashboardSection.leave_requests): _leave_section,
}


def resolve_view(role: ActorRole, section: str) -> tuple[DashboardSection, _ViewBuilder]:
    """Look up the builder for a role/section, refusing unknown combinations."""
    try:
        key = (role, DashboardSection(section))
        return key[1], _VIEWS[key]
    except (ValueError, KeyError):
        raise AuthorizationError(f"Section '{section}' is not available to role '{role.value}'.")


def build_dashboard(
    actor: ActorContext,
    section: str,
    leave_requests: Iterable[LeaveRequest],
    ccl_requests: Iterable[CCLWorkRequest],
    policy: Optional[CampusPolicy] = None,
) -> DashboardView:
    _, builder = resolve_view(actor.role, section)
    return builder(
        actor,
        scope_leave_requests(actor, leave_requests),
        scope_ccl_requests(actor, ccl_requests),
        policy or CampusPolicy(),
    )
