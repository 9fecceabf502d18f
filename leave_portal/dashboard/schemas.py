"""Dashboard Pydantic v2 schemas — role/section view models."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from leave_portal.ccl.schemas import CCLWorkRequest
from leave_portal.common.constants import ActorRole
from leave_portal.leave.schemas import LeaveRequest


class DashboardSection(str, enum.Enum):
    overview = "overview"
    leave_requests = "leave-requests"
    ccl_work = "ccl-work"


class RequestKind(str, enum.Enum):
    leave = "leave"
    ccl = "ccl"


class ActionItem(BaseModel):
    """A request waiting on the viewer, with the transitions they may take."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kind: RequestKind
    request_id: str
    employee_id: str
    status: str
    summary: str
    actions: list[str] = Field(default_factory=list)


class DashboardView(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    role: ActorRole
    section: DashboardSection
    leave_status_counts: dict[str, int] = Field(default_factory=dict)
    ccl_status_counts: dict[str, int] = Field(default_factory=dict)
    action_queue: list[ActionItem] = Field(default_factory=list)
    leave_requests: list[LeaveRequest] = Field(default_factory=list)
    ccl_work_requests: list[CCLWorkRequest] = Field(default_factory=list)
