"""CCL work request Pydantic v2 schemas."""

from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from leave_portal.common.constants import CCLAssignee, CCLStatus
from leave_portal.common.normalize import normalize_ccl_payload


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CCLWorkRequestIn(_WireModel):
    """Gateway body for a new CCL work request (fields optional so the
    workflow can report every missing one at once)."""

    date: Optional[dt.date] = None
    assigned_to: Optional[CCLAssignee] = None
    reason: Optional[str] = None


class CCLWorkRequestCreate(_WireModel):
    """Payload for submitCCLWorkRequest."""

    employee_id: str
    department: Optional[str] = None
    campus: str
    date: dt.date
    assigned_to: CCLAssignee
    reason: str = Field(..., min_length=1)
    status: CCLStatus = CCLStatus.pending


class CCLWorkRequest(_WireModel):
    """A CCL work request as held by the backend."""

    id: str
    employee_id: str
    department: Optional[str] = None
    campus: str
    date: dt.date
    assigned_to: CCLAssignee
    reason: str
    status: CCLStatus = CCLStatus.pending
    hod_remarks: Optional[str] = None
    hod_approval_date: Optional[datetime] = None
    principal_remarks: Optional[str] = None
    principal_approval_date: Optional[datetime] = None
    is_used: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return normalize_ccl_payload(data)


class CCLStatusUpdate(_WireModel):
    """Payload for updateCCLStatus."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    status: CCLStatus
    remarks: str


class CCLRemarksIn(_WireModel):
    remarks: Optional[str] = None


class CCLTransitionOut(_WireModel):
    ccl_work_request: CCLWorkRequest
    new_ccl_balance: Optional[float] = None
