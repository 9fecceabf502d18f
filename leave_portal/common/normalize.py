"""Boundary normalization for backend payloads.

The backend (and older clients) send the same field under several names —
``type`` vs ``leaveType``, ``_id`` vs ``id``, ``msg`` vs ``message``. Payloads
are rewritten to one canonical camelCase shape here, once, before pydantic
validation; business logic only ever sees the canonical names.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional

# canonical name → legacy spellings, first match wins
_LEAVE_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("_id", "leaveRequestId", "leaveId"),
    "leaveType": ("type",),
    "employeeId": ("employee", "submittedBy"),
    "department": ("branchCode", "employeeDepartment"),
    "principalModificationReason": ("modificationReason",),
    "appliedOn": ("createdAt",),
}

_CCL_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("_id", "cclRequestId", "workId"),
    "employeeId": ("submittedBy", "employee"),
    "department": ("branchCode", "employeeDepartment"),
}

_FACULTY_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("_id", "facultyId"),
    "employeeCode": ("employeeId",),
    "department": ("branchCode",),
}

_DATE_FIELDS = (
    "startDate",
    "endDate",
    "approvedStartDate",
    "approvedEndDate",
    "date",
)


def _apply_aliases(data: Mapping[str, Any], aliases: dict[str, tuple[str, ...]]) -> dict[str, Any]:
    out = dict(data)
    for canonical, legacy_names in aliases.items():
        if out.get(canonical) not in (None, ""):
            for legacy in legacy_names:
                out.pop(legacy, None)
            continue
        for legacy in legacy_names:
            if out.get(legacy) not in (None, ""):
                out[canonical] = out.pop(legacy)
                break
    return out


def _reference_id(value: Any) -> Any:
    """Populated references arrive as objects; keep only their id."""
    if isinstance(value, Mapping):
        return value.get("_id") or value.get("id")
    return value


def to_calendar_date(value: Any) -> Any:
    """Reduce ISO datetimes (``2024-06-03T00:00:00.000Z``) to the calendar date part."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) > 10 and value[10] == "T":
        return value[:10]
    return value


def _normalize_dates(data: dict[str, Any]) -> dict[str, Any]:
    for field in _DATE_FIELDS:
        if field in data and data[field] not in (None, ""):
            data[field] = to_calendar_date(data[field])
        elif field in data and data[field] == "":
            data[field] = None
    return data


def normalize_period(data: Any) -> Any:
    if not isinstance(data, Mapping):
        return data
    out = dict(data)
    out.pop("_id", None)
    if "substituteFaculty" in out:
        out["substituteFaculty"] = _reference_id(out["substituteFaculty"])
    if isinstance(out.get("periodNumber"), str) and out["periodNumber"].strip().isdigit():
        out["periodNumber"] = int(out["periodNumber"])
    return out


def normalize_day_schedule(data: Any) -> Any:
    if not isinstance(data, Mapping):
        return data
    out = dict(data)
    out.pop("_id", None)
    if "date" in out:
        out["date"] = to_calendar_date(out["date"])
    out["periods"] = [normalize_period(p) for p in out.get("periods") or []]
    return out


def normalize_leave_payload(data: Any) -> Any:
    """Canonicalize a LeaveRequest dict coming from the backend."""
    if not isinstance(data, Mapping):
        return data
    out = _apply_aliases(data, _LEAVE_ALIASES)
    if "employeeId" in out:
        out["employeeId"] = _reference_id(out["employeeId"])
    if isinstance(out.get("campus"), str):
        out["campus"] = out["campus"].lower()
    if isinstance(out.get("campus"), Mapping):
        out["campus"] = str(out["campus"].get("name", "")).lower()
    if "alternateSchedule" in out:
        out["alternateSchedule"] = [
            normalize_day_schedule(day) for day in out.get("alternateSchedule") or []
        ]
    for text_field in ("hodRemarks", "principalRemarks", "principalModificationReason"):
        if out.get(text_field) == "":
            out[text_field] = None
    return _normalize_dates(out)


def normalize_ccl_payload(data: Any) -> Any:
    """Canonicalize a CCLWorkRequest dict coming from the backend."""
    if not isinstance(data, Mapping):
        return data
    out = _apply_aliases(data, _CCL_ALIASES)
    if "employeeId" in out:
        out["employeeId"] = _reference_id(out["employeeId"])
    if isinstance(out.get("campus"), str):
        out["campus"] = out["campus"].lower()
    return _normalize_dates(out)


def normalize_faculty_payload(data: Any) -> Any:
    if not isinstance(data, Mapping):
        return data
    out = _apply_aliases(data, _FACULTY_ALIASES)
    if isinstance(out.get("campus"), str):
        out["campus"] = out["campus"].lower()
    return out


def unwrap_envelope(body: Any, *keys: str) -> Any:
    """Backend responses wrap entities inconsistently (``{"leaveRequest": {...}}``,
    ``{"data": {...}}`` or bare). Return the first matching inner payload."""
    if isinstance(body, Mapping):
        for key in keys + ("data",):
            inner = body.get(key)
            if isinstance(inner, (Mapping, list)):
                return inner
    return body


def extract_error_message(body: Any, default: str) -> str:
    """Pull the human-readable message out of a ``{message}`` / ``{msg}`` error body."""
    if isinstance(body, Mapping):
        for key in ("message", "msg", "detail", "error"):
            value: Optional[Any] = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    if isinstance(body, str) and body.strip():
        return body
    return default
