"""Enums and constants for the leave portal — matching the backend's string values."""

from __future__ import annotations

import enum


# ── Actors ──────────────────────────────────────────────────────────

class ActorRole(str, enum.Enum):
    employee = "employee"
    hod = "hod"
    principal = "principal"
    hr = "hr"


class TerminalApprover(str, enum.Enum):
    """Which role finalizes leave requests on a campus. Mutually exclusive."""

    principal = "principal"
    hr = "hr"

    @property
    def label(self) -> str:
        return "Principal" if self is TerminalApprover.principal else "HR"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    CL = "CL"
    CCL = "CCL"
    OD = "OD"


class LeaveSession(str, enum.Enum):
    morning = "morning"
    afternoon = "afternoon"


class LeaveStatus(str, enum.Enum):
    pending = "Pending"
    forwarded_by_hod = "Forwarded by HOD"
    approved = "Approved"
    rejected = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (LeaveStatus.approved, LeaveStatus.rejected)


# ── CCL work ────────────────────────────────────────────────────────

class CCLStatus(str, enum.Enum):
    pending = "Pending"
    forwarded_to_principal = "Forwarded to Principal"
    approved = "Approved"
    rejected = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (CCLStatus.approved, CCLStatus.rejected)


class CCLAssignee(str, enum.Enum):
    principal = "Principal"
    dean = "Dean"
    vice_principal = "Vice Principal"
    dd = "DD"


# ── Balance ledger ──────────────────────────────────────────────────

class BalanceKind(str, enum.Enum):
    leave = "leave"
    ccl = "ccl"


class LedgerEntryType(str, enum.Enum):
    used = "used"
    restored = "restored"
    earned = "earned"


# ── Timetable ───────────────────────────────────────────────────────

PERIODS: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7)

SESSION_PERIODS: dict[LeaveSession, tuple[int, ...]] = {
    LeaveSession.morning: (1, 2, 3, 4),
    LeaveSession.afternoon: (5, 6, 7),
}

HALF_DAY = 0.5

# One CCL day is earned per approved CCL work request
CCL_WORK_CREDIT_DAYS = 1.0

# Leave types whose balance is checked before submission (OD is exempt)
BALANCE_CHECKED_TYPES: frozenset[LeaveType] = frozenset({LeaveType.CL, LeaveType.CCL})
