"""Shared test fixtures — fake backend, actors, app/client, auth helpers.

Reusable across all test modules (builder, workflow, ccl, api, dashboard).
The backend is replaced by an in-memory fake with the same async interface
as ``PortalBackendClient``; gateway tests inject it through
``dependency_overrides``.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Optional, Sequence

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from leave_portal.auth.context import ActorContext
from leave_portal.auth.dependencies import get_backend_client
from leave_portal.balance.schemas import BalanceSnapshot
from leave_portal.ccl.schemas import (
    CCLStatusUpdate,
    CCLWorkRequest,
    CCLWorkRequestCreate,
)
from leave_portal.common.constants import (
    ActorRole,
    CCLAssignee,
    CCLStatus,
    LeaveStatus,
    LeaveType,
)
from leave_portal.common.exceptions import NotFoundException
from leave_portal.config import settings
from leave_portal.leave.schemas import (
    AvailabilityResult,
    DaySchedule,
    FacultyMember,
    LeaveRequest,
    LeaveRequestCreate,
    LeaveStatusUpdate,
    PeriodAssignment,
)
from leave_portal.main import create_app

CAMPUS = "engineering"
DEPARTMENT = "CSE"


# ── Fake backend ────────────────────────────────────────────────────

class FakeBackend:
    """In-memory stand-in for the portal backend."""

    def __init__(self) -> None:
        self.balances: dict[str, BalanceSnapshot] = {}
        self.faculty: list[FacultyMember] = []
        self.busy: dict[tuple[str, date, int], str] = {}
        self.leave_requests: dict[str, LeaveRequest] = {}
        self.ccl_requests: dict[str, CCLWorkRequest] = {}
        self.calls: list[tuple[str, Any]] = []

    # balance / faculty

    async def get_leave_balance(self, employee_id: str) -> BalanceSnapshot:
        self.calls.append(("get_leave_balance", employee_id))
        return self.balances.get(employee_id, BalanceSnapshot())

    async def get_faculty_list(self, campus: str) -> list[FacultyMember]:
        self.calls.append(("get_faculty_list", campus))
        return [f for f in self.faculty if f.campus == campus.lower()]

    async def check_faculty_availability(
        self, faculty_id: str, on_date: date, period_numbers: Sequence[int],
    ) -> AvailabilityResult:
        self.calls.append(("check_faculty_availability", (faculty_id, on_date, list(period_numbers))))
        for period in period_numbers:
            reason = self.busy.get((faculty_id, on_date, period))
            if reason:
                return AvailabilityResult(is_available=False, message=reason)
        return AvailabilityResult(is_available=True)

    # leave

    async def submit_leave_request(self, payload: LeaveRequestCreate) -> LeaveRequest:
        self.calls.append(("submit_leave_request", payload))
        wire = payload.model_dump(mode="json", by_alias=True)
        wire["_id"] = uuid.uuid4().hex
        created = LeaveRequest.model_validate(wire)
        self.leave_requests[created.id] = created
        return created

    async def get_leave_request(self, request_id: str) -> LeaveRequest:
        self.calls.append(("get_leave_request", request_id))
        if request_id not in self.leave_requests:
            raise NotFoundException("LeaveRequest", request_id)
        return self.leave_requests[request_id]

    async def update_leave_status(self, request_id: str, update: LeaveStatusUpdate) -> LeaveRequest:
        self.calls.append(("update_leave_status", (request_id, update)))
        current = await self.get_leave_request(request_id)
        fields: dict[str, Any] = {"status": update.status}
        if update.status is LeaveStatus.forwarded_by_hod or (
            update.status is LeaveStatus.rejected and current.status is LeaveStatus.pending
        ):
            fields["hod_remarks"] = update.remarks
        else:
            fields["principal_remarks"] = update.remarks
        if update.approved_number_of_days is not None:
            fields.update(
                approved_start_date=update.approved_start_date,
                approved_end_date=update.approved_end_date,
                approved_number_of_days=update.approved_number_of_days,
                principal_modification_reason=update.principal_modification_reason,
                is_modified_by_principal=True,
            )
        updated = current.model_copy(update=fields)
        self.leave_requests[request_id] = updated
        return updated

    async def list_leave_requests(self, **filters: Any) -> list[LeaveRequest]:
        self.calls.append(("list_leave_requests", filters))
        return list(self.leave_requests.values())

    # ccl

    async def submit_ccl_work_request(self, payload: CCLWorkRequestCreate) -> CCLWorkRequest:
        self.calls.append(("submit_ccl_work_request", payload))
        wire = payload.model_dump(mode="json", by_alias=True)
        wire["_id"] = uuid.uuid4().hex
        created = CCLWorkRequest.model_validate(wire)
        self.ccl_requests[created.id] = created
        return created

    async def get_ccl_work_request(self, request_id: str) -> CCLWorkRequest:
        self.calls.append(("get_ccl_work_request", request_id))
        if request_id not in self.ccl_requests:
            raise NotFoundException("CCLWorkRequest", request_id)
        return self.ccl_requests[request_id]

    async def update_ccl_status(self, request_id: str, update: CCLStatusUpdate) -> CCLWorkRequest:
        self.calls.append(("update_ccl_status", (request_id, update)))
        current = await self.get_ccl_work_request(request_id)
        field = (
            "hod_remarks"
            if current.status is CCLStatus.pending
            else "principal_remarks"
        )
        updated = current.model_copy(update={"status": update.status, field: update.remarks})
        self.ccl_requests[request_id] = updated
        if update.status is CCLStatus.approved:
            # The backend credits the earned day as part of the approval
            balance = self.balances.get(current.employee_id, BalanceSnapshot())
            self.balances[current.employee_id] = balance.model_copy(
                update={"ccl_balance": balance.ccl_balance + 1}
            )
        return updated

    async def list_ccl_work_requests(self, **filters: Any) -> list[CCLWorkRequest]:
        self.calls.append(("list_ccl_work_requests", filters))
        return list(self.ccl_requests.values())

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


# ── Factories ───────────────────────────────────────────────────────

def make_actor(
    role: ActorRole = ActorRole.employee,
    *,
    employee_id: Optional[str] = None,
    campus: str = CAMPUS,
    department: Optional[str] = DEPARTMENT,
    token: str = "",
) -> ActorContext:
    return ActorContext(
        employee_id=employee_id or f"{role.value}-{uuid.uuid4().hex[:6]}",
        role=role,
        campus=campus,
        department=department,
        name=f"Test {role.value.title()}",
        token=token,
    )


def make_faculty(faculty_id: str, campus: str = CAMPUS, name: str = "Substitute") -> FacultyMember:
    return FacultyMember(id=faculty_id, name=name, department=DEPARTMENT, campus=campus)


def make_leave_request(
    *,
    employee_id: str = "emp-1",
    leave_type: LeaveType = LeaveType.CL,
    start_date: date = date(2024, 6, 3),
    end_date: date = date(2024, 6, 5),
    is_half_day: bool = False,
    status: LeaveStatus = LeaveStatus.pending,
    campus: str = CAMPUS,
    department: str = DEPARTMENT,
    **overrides: Any,
) -> LeaveRequest:
    days = 0.5 if is_half_day else float((end_date - start_date).days + 1)
    schedule = [
        DaySchedule(
            date=start_date + timedelta(days=i),
            periods=[PeriodAssignment(period_number=1, substitute_faculty="fac-1", assigned_class="CSE-A")],
        )
        for i in range(int(days) if not is_half_day else 1)
    ]
    data: dict[str, Any] = dict(
        id=uuid.uuid4().hex,
        employee_id=employee_id,
        department=department,
        campus=campus,
        leave_type=leave_type,
        is_half_day=is_half_day,
        session="morning" if is_half_day else None,
        start_date=start_date,
        end_date=end_date,
        number_of_days=days,
        reason="Family function",
        alternate_schedule=schedule,
        status=status,
    )
    data.update(overrides)
    return LeaveRequest(**data)


def make_ccl_request(
    *,
    employee_id: str = "emp-1",
    status: CCLStatus = CCLStatus.pending,
    campus: str = CAMPUS,
    department: str = DEPARTMENT,
    **overrides: Any,
) -> CCLWorkRequest:
    data: dict[str, Any] = dict(
        id=uuid.uuid4().hex,
        employee_id=employee_id,
        department=department,
        campus=campus,
        date=date(2024, 6, 1),
        assigned_to=CCLAssignee.principal,
        reason="Weekend admission duty",
        status=status,
    )
    data.update(overrides)
    return CCLWorkRequest(**data)


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(actor: ActorContext, expired: bool = False) -> str:
    """Generate a JWT like the backend issues (``id``, ``role``, ``campus``, ``branchCode``)."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "id": actor.employee_id,
        "role": actor.role.value,
        "campus": actor.campus,
        "branchCode": actor.department,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(actor: ActorContext) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(actor)}"}


# ── Fixtures ────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from leave_portal.common.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def employee() -> ActorContext:
    return make_actor(ActorRole.employee, employee_id="emp-1")


@pytest.fixture
def hod() -> ActorContext:
    return make_actor(ActorRole.hod, employee_id="hod-1")


@pytest.fixture
def principal() -> ActorContext:
    return make_actor(ActorRole.principal, employee_id="principal-1", department=None)


@pytest.fixture
def hr() -> ActorContext:
    return make_actor(ActorRole.hr, employee_id="hr-1", department=None)


@pytest.fixture
async def app(backend):
    """Create a fresh app instance with the backend client overridden."""
    application = create_app()

    async def _override_backend() -> AsyncGenerator[FakeBackend, None]:
        yield backend

    application.dependency_overrides[get_backend_client] = _override_backend
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
