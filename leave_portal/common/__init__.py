"""Common module — shared utilities for the leave portal."""

from leave_portal.common.constants import (
    PERIODS,
    SESSION_PERIODS,
    ActorRole,
    BalanceKind,
    CCLAssignee,
    CCLStatus,
    LeaveSession,
    LeaveStatus,
    LeaveType,
    LedgerEntryType,
    TerminalApprover,
)
from leave_portal.common.exceptions import (
    AppException,
    AuthorizationError,
    ConflictError,
    DuplicatePeriodError,
    FacultyUnavailableError,
    IncompleteDayError,
    IncompleteScheduleError,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundException,
    TransportError,
    ValidationError,
    register_exception_handlers,
)
from leave_portal.common.normalize import extract_error_message, unwrap_envelope

__all__ = [
    # Constants
    "PERIODS",
    "SESSION_PERIODS",
    "ActorRole",
    "BalanceKind",
    "CCLAssignee",
    "CCLStatus",
    "LeaveSession",
    "LeaveStatus",
    "LeaveType",
    "LedgerEntryType",
    "TerminalApprover",
    # Exceptions
    "AppException",
    "AuthorizationError",
    "ConflictError",
    "DuplicatePeriodError",
    "FacultyUnavailableError",
    "IncompleteDayError",
    "IncompleteScheduleError",
    "InsufficientBalanceError",
    "InvalidStateError",
    "NotFoundException",
    "TransportError",
    "ValidationError",
    "register_exception_handlers",
    # Normalization
    "extract_error_message",
    "unwrap_envelope",
]
