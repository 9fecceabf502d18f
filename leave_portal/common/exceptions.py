"""Leave workflow exceptions and RFC 7807 Problem Detail error handlers."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

BASE_ERROR_URI = "https://leave-portal.local/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class ValidationError(AppException):
    """422 — malformed or incomplete input, caught before any network call."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls({field: [message]})


class InsufficientBalanceError(AppException):
    """422 — requested days exceed the available balance."""

    def __init__(self, balance_name: str, available: float, requested: float) -> None:
        self.available = available
        self.requested = requested
        super().__init__(
            status_code=422,
            error_type="insufficient-balance",
            title="Insufficient Balance",
            detail=(
                f"Insufficient {balance_name} balance. "
                f"Available: {available:g} days, Requested: {requested:g} days"
            ),
            errors={"numberOfDays": [f"Only {available:g} days available."]},
        )


class FacultyUnavailableError(AppException):
    """409 — substitute faculty already busy for that date/period."""

    def __init__(self, faculty_id: str, message: str = "Faculty is not available") -> None:
        self.faculty_id = faculty_id
        super().__init__(
            status_code=409,
            error_type="faculty-unavailable",
            title="Faculty Unavailable",
            detail=message,
            errors={"substituteFaculty": [message]},
        )


class DuplicatePeriodError(AppException):
    """422 — period already assigned for the day."""

    def __init__(self, day: Any, period_number: int) -> None:
        super().__init__(
            status_code=422,
            error_type="duplicate-period",
            title="Duplicate Period",
            detail=f"Period {period_number} is already assigned on {day}.",
            errors={"periodNumber": ["This period is already assigned"]},
        )


class IncompleteDayError(AppException):
    """422 — cannot leave a day with no periods assigned."""

    def __init__(self, day: Any) -> None:
        super().__init__(
            status_code=422,
            error_type="incomplete-day",
            title="Incomplete Day",
            detail=f"Please add at least one period for {day}.",
        )


class IncompleteScheduleError(AppException):
    """422 — one or more days of the alternate schedule are empty."""

    def __init__(self, missing_days: list[Any]) -> None:
        self.missing_days = missing_days
        super().__init__(
            status_code=422,
            error_type="incomplete-schedule",
            title="Incomplete Schedule",
            detail="Please complete alternate schedule for all days.",
            errors={"alternateSchedule": [f"No periods assigned for {d}" for d in missing_days]},
        )


class AuthorizationError(AppException):
    """403 — actor lacks rights for the attempted operation."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class InvalidStateError(AppException):
    """409 — transition not permitted from the current status."""

    def __init__(self, current: Any, attempted: str) -> None:
        current_value = getattr(current, "value", current)
        self.current = current_value
        super().__init__(
            status_code=409,
            error_type="invalid-state",
            title="Invalid State",
            detail=f"Cannot {attempted} a request that is '{current_value}'.",
        )


class ConflictError(AppException):
    """409 — backend detected a concurrent modification; refetch and retry."""

    def __init__(self, detail: str = "The request was modified by someone else. Refresh and retry.") -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=detail,
        )


class NotFoundException(AppException):
    """404 — entity not found in the backend."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class TransportError(AppException):
    """502 — backend unavailable or failed; the actor must retry manually."""

    def __init__(self, detail: str = "The leave service is unavailable. Please try again.") -> None:
        super().__init__(
            status_code=502,
            error_type="transport-error",
            title="Backend Unavailable",
            detail=detail,
        )


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
