"""Boundary normalization of loose backend payloads."""

from __future__ import annotations

from datetime import date

from leave_portal.ccl.schemas import CCLWorkRequest
from leave_portal.common.constants import CCLAssignee, LeaveStatus, LeaveType
from leave_portal.common.normalize import (
    extract_error_message,
    to_calendar_date,
    unwrap_envelope,
)
from leave_portal.leave.schemas import FacultyMember, LeaveRequest

BACKEND_LEAVE = {
    "_id": "665d1f",
    "leaveRequestId": "ENG-CSE-2024-0012",
    "type": "CL",
    "employee": {"_id": "emp-1", "name": "A. Kumar"},
    "branchCode": "CSE",
    "campus": "Engineering",
    "isHalfDay": False,
    "startDate": "2024-06-03T00:00:00.000Z",
    "endDate": "2024-06-05T00:00:00.000Z",
    "numberOfDays": 3,
    "reason": "Family function",
    "status": "Forwarded by HOD",
    "hodRemarks": "Forwarded to Principal",
    "principalRemarks": "",
    "modificationReason": "",
    "createdAt": "2024-05-30T10:12:00.000Z",
    "alternateSchedule": [
        {
            "_id": "d1",
            "date": "2024-06-03T00:00:00.000Z",
            "periods": [
                {
                    "_id": "p1",
                    "periodNumber": "2",
                    "substituteFaculty": {"_id": "fac-1", "name": "B. Rao"},
                    "assignedClass": "CSE-A",
                }
            ],
        }
    ],
}


class TestLeavePayload:

    def test_legacy_names_are_canonicalized(self):
        request = LeaveRequest.model_validate(BACKEND_LEAVE)

        assert request.id == "665d1f"
        assert request.leave_type is LeaveType.CL
        assert request.employee_id == "emp-1"
        assert request.department == "CSE"
        assert request.campus == "engineering"
        assert request.status is LeaveStatus.forwarded_by_hod
        assert request.start_date == date(2024, 6, 3)
        assert request.end_date == date(2024, 6, 5)
        assert request.principal_remarks is None
        assert request.principal_modification_reason is None
        assert request.applied_on is not None

    def test_schedule_references_are_flattened(self):
        request = LeaveRequest.model_validate(BACKEND_LEAVE)
        [day] = request.alternate_schedule
        [period] = day.periods
        assert day.date == date(2024, 6, 3)
        assert period.period_number == 2
        assert period.substitute_faculty == "fac-1"

    def test_canonical_names_win_over_legacy(self):
        payload = dict(BACKEND_LEAVE, leaveType="OD", id="canonical")
        request = LeaveRequest.model_validate(payload)
        assert request.leave_type is LeaveType.OD
        assert request.id == "canonical"

    def test_wire_form_is_camel_case(self):
        dumped = LeaveRequest.model_validate(BACKEND_LEAVE).model_dump(
            mode="json", by_alias=True,
        )
        assert dumped["leaveType"] == "CL"
        assert dumped["startDate"] == "2024-06-03"
        assert dumped["alternateSchedule"][0]["periods"][0]["periodNumber"] == 2


class TestOtherPayloads:

    def test_ccl_payload(self):
        request = CCLWorkRequest.model_validate(
            {
                "_id": "ccl-1",
                "submittedBy": "emp-1",
                "branchCode": "CSE",
                "campus": "ENGINEERING",
                "date": "2024-06-01T00:00:00.000Z",
                "assignedTo": "DD",
                "reason": "Exam duty",
                "status": "Forwarded to Principal",
                "isUsed": True,
            }
        )
        assert request.id == "ccl-1"
        assert request.employee_id == "emp-1"
        assert request.campus == "engineering"
        assert request.assigned_to is CCLAssignee.dd
        assert request.is_used is True

    def test_faculty_payload(self):
        member = FacultyMember.model_validate(
            {"_id": "fac-1", "name": "B. Rao", "employeeId": "E102", "campus": "Engineering"}
        )
        assert member.id == "fac-1"
        assert member.employee_code == "E102"
        assert member.campus == "engineering"


class TestHelpers:

    def test_to_calendar_date(self):
        assert to_calendar_date("2024-06-03T18:30:00.000Z") == "2024-06-03"
        assert to_calendar_date("2024-06-03") == "2024-06-03"
        assert to_calendar_date(date(2024, 6, 3)) == date(2024, 6, 3)

    def test_unwrap_envelope(self):
        inner = {"id": "x"}
        assert unwrap_envelope({"leaveRequest": inner, "msg": "ok"}, "leaveRequest") is inner
        assert unwrap_envelope({"data": inner}, "leaveRequest") is inner
        assert unwrap_envelope(inner, "leaveRequest") is inner

    def test_extract_error_message(self):
        assert extract_error_message({"msg": "Leave not found"}, "fallback") == "Leave not found"
        assert extract_error_message({"message": "Bad", "msg": "Other"}, "fallback") == "Bad"
        assert extract_error_message({}, "fallback") == "fallback"
        assert extract_error_message("plain text", "fallback") == "plain text"
