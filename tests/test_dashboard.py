"""Dashboard views — scoping, status counts and the per-role action queue."""

from __future__ import annotations

import pytest

from leave_portal.common.constants import ActorRole, CCLStatus, LeaveStatus
from leave_portal.common.exceptions import AuthorizationError
from leave_portal.dashboard.schemas import DashboardSection, RequestKind
from leave_portal.dashboard.views import build_dashboard, resolve_view
from leave_portal.leave.workflow import CampusPolicy
from tests.conftest import auth_headers, make_actor, make_ccl_request, make_leave_request


@pytest.fixture
def requests():
    return {
        "own_pending": make_leave_request(employee_id="emp-1"),
        "cse_forwarded": make_leave_request(
            employee_id="emp-2", status=LeaveStatus.forwarded_by_hod,
        ),
        "mech_pending": make_leave_request(employee_id="emp-3", department="MECH"),
        "pharmacy_forwarded": make_leave_request(
            employee_id="emp-4", campus="pharmacy", status=LeaveStatus.forwarded_by_hod,
        ),
    }


@pytest.fixture
def ccl_requests():
    return [
        make_ccl_request(employee_id="emp-1"),
        make_ccl_request(employee_id="emp-2", status=CCLStatus.forwarded_to_principal),
    ]


class TestScoping:

    def test_employee_sees_only_own(self, employee, requests, ccl_requests):
        view = build_dashboard(employee, "leave-requests", requests.values(), ccl_requests)
        assert [r.employee_id for r in view.leave_requests] == ["emp-1"]
        assert view.action_queue == []

    def test_hod_sees_department(self, hod, requests, ccl_requests):
        view = build_dashboard(hod, "leave-requests", requests.values(), ccl_requests)
        assert {r.employee_id for r in view.leave_requests} == {"emp-1", "emp-2"}

    def test_principal_sees_campus(self, principal, requests, ccl_requests):
        view = build_dashboard(principal, "leave-requests", requests.values(), ccl_requests)
        assert {r.employee_id for r in view.leave_requests} == {"emp-1", "emp-2", "emp-3"}


class TestCounts:

    def test_every_status_is_counted(self, principal, requests, ccl_requests):
        view = build_dashboard(principal, "overview", requests.values(), ccl_requests)
        assert view.leave_status_counts == {
            "Pending": 2,
            "Forwarded by HOD": 1,
            "Approved": 0,
            "Rejected": 0,
        }
        assert view.ccl_status_counts["Pending"] == 1
        assert view.ccl_status_counts["Forwarded to Principal"] == 1

    def test_overview_carries_no_lists(self, principal, requests, ccl_requests):
        view = build_dashboard(principal, "overview", requests.values(), ccl_requests)
        assert view.leave_requests == []
        assert view.ccl_work_requests == []


class TestActionQueue:

    def test_hod_queue(self, hod, requests, ccl_requests):
        view = build_dashboard(hod, "overview", requests.values(), ccl_requests)
        assert [(i.kind, i.employee_id, i.actions) for i in view.action_queue] == [
            (RequestKind.leave, "emp-1", ["forward", "reject"]),
            (RequestKind.ccl, "emp-1", ["forward", "reject"]),
        ]

    def test_principal_queue(self, principal, requests, ccl_requests):
        view = build_dashboard(principal, "overview", requests.values(), ccl_requests)
        assert [(i.kind, i.employee_id, i.actions) for i in view.action_queue] == [
            (RequestKind.leave, "emp-2", ["approve", "reject"]),
            (RequestKind.ccl, "emp-2", ["approve", "reject"]),
        ]

    def test_hr_queue_follows_campus_policy(self, requests, ccl_requests):
        hr = make_actor(ActorRole.hr, campus="pharmacy", department=None)
        policy = CampusPolicy({"pharmacy": "hr"})
        view = build_dashboard(hr, "leave-requests", requests.values(), ccl_requests, policy)
        [item] = view.action_queue
        assert item.employee_id == "emp-4"
        assert item.actions == ["approve", "reject"]

    def test_principal_may_revoke_approved(self, principal, hod, hr):
        approved = make_leave_request(employee_id="emp-5", status=LeaveStatus.approved)
        other_campus = make_leave_request(
            employee_id="emp-6", campus="pharmacy", status=LeaveStatus.approved,
        )
        view = build_dashboard(principal, "leave-requests", [approved, other_campus], [])
        assert [(i.employee_id, i.actions) for i in view.action_queue] == [("emp-5", ["revoke"])]

        for viewer in (hod, hr):
            assert build_dashboard(viewer, "leave-requests", [approved], []).action_queue == []

    def test_hr_on_principal_campus_has_nothing_to_do(self, hr, requests, ccl_requests):
        view = build_dashboard(hr, "leave-requests", requests.values(), ccl_requests)
        assert view.action_queue == []

    def test_summary_text(self, hod, requests):
        view = build_dashboard(hod, "leave-requests", [requests["own_pending"]], [])
        assert view.action_queue[0].summary == "CL 2024-06-03 to 2024-06-05 (3 day(s))"


class TestSections:

    def test_resolve(self):
        section, _ = resolve_view(ActorRole.hod, "ccl-work")
        assert section is DashboardSection.ccl_work

    def test_hr_has_no_ccl_section(self, hr):
        with pytest.raises(AuthorizationError):
            build_dashboard(hr, "ccl-work", [], [])

    def test_unknown_section(self, employee):
        with pytest.raises(AuthorizationError):
            build_dashboard(employee, "payroll", [], [])


class TestDashboardAPI:

    async def test_hod_leave_section(self, client, backend, hod, requests):
        for r in requests.values():
            backend.leave_requests[r.id] = r
        resp = await client.get("/api/v1/dashboard/leave-requests", headers=auth_headers(hod))
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["section"] == "leave-requests"
        assert body["leaveStatusCounts"]["Pending"] == 1
        assert body["actionQueue"][0]["requestId"] == requests["own_pending"].id
        assert backend.call_names() == ["list_leave_requests"]
        assert backend.calls[0][1] == {"campus": "engineering", "department": "CSE"}

    async def test_employee_ccl_section_lists_only_ccl(self, client, backend, employee):
        request = make_ccl_request(employee_id=employee.employee_id)
        backend.ccl_requests[request.id] = request
        resp = await client.get("/api/v1/dashboard/ccl-work", headers=auth_headers(employee))
        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()["cclWorkRequests"]] == [request.id]
        assert backend.call_names() == ["list_ccl_work_requests"]

    async def test_hr_ccl_section_forbidden(self, client, backend, hr):
        resp = await client.get("/api/v1/dashboard/ccl-work", headers=auth_headers(hr))
        assert resp.status_code == 403
        assert backend.calls == []
