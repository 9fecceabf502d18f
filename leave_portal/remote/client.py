"""Async REST client for the leave portal backend (system of record).

Every call carries the actor's bearer token. Non-2xx responses are mapped
onto the application exception taxonomy so callers never see raw httpx
errors:

    400 / 422  → ValidationError
    401 / 403  → AuthorizationError
    404        → NotFoundException
    409        → ConflictError
    5xx, I/O   → TransportError

No retries: a failed write must be resubmitted by the actor.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

import httpx

from leave_portal.balance.schemas import BalanceSnapshot
from leave_portal.ccl.schemas import (
    CCLStatusUpdate,
    CCLWorkRequest,
    CCLWorkRequestCreate,
)
from leave_portal.common.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundException,
    TransportError,
    ValidationError,
)
from leave_portal.common.normalize import extract_error_message, unwrap_envelope
from leave_portal.config import settings
from leave_portal.leave.schemas import (
    AvailabilityResult,
    FacultyMember,
    LeaveRequest,
    LeaveRequestCreate,
    LeaveStatusUpdate,
)

logger = logging.getLogger(__name__)


def _raise_for_status(response: httpx.Response, entity: str, entity_id: Any = None) -> None:
    if response.is_success:
        return
    try:
        body = response.json()
    except ValueError:
        body = response.text
    status = response.status_code
    message = extract_error_message(body, f"Backend returned HTTP {status}")

    logger.warning(
        "Backend %s %s failed: %s %s",
        response.request.method, response.request.url.path, status, message,
    )
    if status in (400, 422):
        raise ValidationError.single("non_field_errors", message)
    if status in (401, 403):
        raise AuthorizationError(message)
    if status == 404:
        raise NotFoundException(entity, entity_id if entity_id is not None else "?")
    if status == 409:
        raise ConflictError(message)
    raise TransportError(message)


class PortalBackendClient:
    """Thin typed wrapper over ``httpx.AsyncClient``.

    Usage::

        async with PortalBackendClient(token=actor.token) as backend:
            balance = await backend.get_leave_balance(actor.employee_id)
    """

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.BACKEND_API_URL).rstrip("/"),
            timeout=timeout if timeout is not None else settings.BACKEND_TIMEOUT_SECONDS,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "PortalBackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.error("Backend %s %s timed out: %s", method, path, exc)
            raise TransportError("The leave service did not respond in time. Please try again.")
        except httpx.HTTPError as exc:
            logger.error("Backend %s %s unreachable: %s", method, path, exc)
            raise TransportError()

    # ── Balance / faculty ───────────────────────────────────────────

    async def get_leave_balance(self, employee_id: str) -> BalanceSnapshot:
        response = await self._send(
            "GET", "/employee/leave-balance", params={"employeeId": employee_id},
        )
        _raise_for_status(response, "Employee", employee_id)
        return BalanceSnapshot.model_validate(unwrap_envelope(response.json(), "balance"))

    async def get_faculty_list(self, campus: str) -> list[FacultyMember]:
        response = await self._send("GET", f"/employee/faculty-list/{campus.lower()}")
        _raise_for_status(response, "Campus", campus)
        items = unwrap_envelope(response.json(), "faculty", "employees")
        return [FacultyMember.model_validate(item) for item in items or []]

    async def check_faculty_availability(
        self,
        faculty_id: str,
        on_date: date,
        period_numbers: Sequence[int],
    ) -> AvailabilityResult:
        """Ask whether a substitute is free. A 400/404 with ``isAvailable: false``
        is a scheduling conflict, not an error."""
        response = await self._send(
            "POST",
            "/employee/check-faculty-availability",
            json={
                "facultyId": faculty_id,
                "date": on_date.isoformat(),
                "periods": list(period_numbers),
            },
        )
        if response.status_code in (400, 404):
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("isAvailable") is False:
                return AvailabilityResult(
                    is_available=False,
                    message=extract_error_message(body, "Faculty is not available"),
                )
        _raise_for_status(response, "Faculty", faculty_id)
        body = response.json()
        return AvailabilityResult(
            is_available=bool(body.get("isAvailable", True)),
            message=extract_error_message(body, ""),
        )

    # ── Leave requests ──────────────────────────────────────────────

    async def submit_leave_request(self, payload: LeaveRequestCreate) -> LeaveRequest:
        response = await self._send(
            "POST",
            "/employee/leave-request",
            json=payload.model_dump(mode="json", by_alias=True),
        )
        _raise_for_status(response, "LeaveRequest")
        created = LeaveRequest.model_validate(unwrap_envelope(response.json(), "leaveRequest"))
        logger.info("Backend accepted leave request %s for %s", created.id, created.employee_id)
        return created

    async def get_leave_request(self, request_id: str) -> LeaveRequest:
        response = await self._send("GET", f"/leave-requests/{request_id}")
        _raise_for_status(response, "LeaveRequest", request_id)
        return LeaveRequest.model_validate(unwrap_envelope(response.json(), "leaveRequest"))

    async def update_leave_status(
        self, request_id: str, update: LeaveStatusUpdate,
    ) -> LeaveRequest:
        response = await self._send(
            "PUT",
            f"/leave-requests/{request_id}/status",
            json=update.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        _raise_for_status(response, "LeaveRequest", request_id)
        return LeaveRequest.model_validate(unwrap_envelope(response.json(), "leaveRequest"))

    async def list_leave_requests(self, **filters: Any) -> list[LeaveRequest]:
        """List leave requests; filters (``status``, ``campus``, ``department``,
        ``employeeId``) are passed through as query parameters."""
        params = {k: v for k, v in filters.items() if v is not None}
        response = await self._send("GET", "/leave-requests", params=params)
        _raise_for_status(response, "LeaveRequest")
        items = unwrap_envelope(response.json(), "leaveRequests")
        return [LeaveRequest.model_validate(item) for item in items or []]

    # ── CCL work requests ───────────────────────────────────────────

    async def submit_ccl_work_request(self, payload: CCLWorkRequestCreate) -> CCLWorkRequest:
        response = await self._send(
            "POST",
            "/employee/ccl-work",
            json=payload.model_dump(mode="json", by_alias=True),
        )
        _raise_for_status(response, "CCLWorkRequest")
        created = CCLWorkRequest.model_validate(unwrap_envelope(response.json(), "cclWork"))
        logger.info("Backend accepted CCL work request %s for %s", created.id, created.employee_id)
        return created

    async def get_ccl_work_request(self, request_id: str) -> CCLWorkRequest:
        response = await self._send("GET", f"/ccl-work-requests/{request_id}")
        _raise_for_status(response, "CCLWorkRequest", request_id)
        return CCLWorkRequest.model_validate(unwrap_envelope(response.json(), "cclWork"))

    async def update_ccl_status(self, request_id: str, update: CCLStatusUpdate) -> CCLWorkRequest:
        response = await self._send(
            "PUT",
            f"/ccl-work-requests/{request_id}/status",
            json=update.model_dump(mode="json", by_alias=True),
        )
        _raise_for_status(response, "CCLWorkRequest", request_id)
        return CCLWorkRequest.model_validate(unwrap_envelope(response.json(), "cclWork"))

    async def list_ccl_work_requests(self, **filters: Any) -> list[CCLWorkRequest]:
        params = {k: v for k, v in filters.items() if v is not None}
        response = await self._send("GET", "/ccl-work-requests", params=params)
        _raise_for_status(response, "CCLWorkRequest")
        items = unwrap_envelope(response.json(), "cclWorkRequests")
        return [CCLWorkRequest.model_validate(item) for item in items or []]
