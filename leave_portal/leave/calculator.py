"""Day-count and date-range rules for leave requests.

All arithmetic is on ``datetime.date`` (calendar dates, no time-of-day), so
daylight-saving changes can never shift a count by a day.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, Optional

from leave_portal.common.constants import HALF_DAY
from leave_portal.common.exceptions import ValidationError


def count_leave_days(start_date: date, end_date: date, is_half_day: bool = False) -> float:
    """Return the number of leave days for an inclusive range.

    Half-day leave is always 0.5; otherwise ``(end - start).days + 1``.
    """
    if is_half_day:
        return HALF_DAY
    if end_date < start_date:
        raise ValidationError.single("endDate", "End date cannot be before start date")
    return float((end_date - start_date).days + 1)


def iter_leave_dates(start_date: date, end_date: date) -> Iterator[date]:
    """Yield every calendar day from start to end inclusive."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def validate_leave_range(
    start_date: Optional[date],
    end_date: Optional[date],
    *,
    is_half_day: bool,
    today: date,
    backdate_limit_days: int,
    max_span_days: int,
) -> None:
    """Check a requested range; raise ValidationError listing every problem."""
    errors: dict[str, list[str]] = {}

    if start_date is None:
        errors.setdefault("startDate", []).append("Please select start date")
    if end_date is None and not is_half_day:
        errors.setdefault("endDate", []).append("Please select end date")
    if errors:
        raise ValidationError(errors)

    effective_end = start_date if is_half_day else end_date

    if is_half_day and end_date is not None and end_date != start_date:
        errors.setdefault("endDate", []).append(
            "For half-day leave, start and end date must be the same"
        )
    if effective_end < start_date:
        errors.setdefault("endDate", []).append("End date cannot be before start date")
    earliest = today - timedelta(days=backdate_limit_days)
    if start_date < earliest:
        errors.setdefault("startDate", []).append(
            f"Start date cannot be earlier than {earliest.isoformat()}"
        )
    latest = start_date + timedelta(days=max_span_days)
    if effective_end > latest:
        errors.setdefault("endDate", []).append(
            f"End date cannot be later than {latest.isoformat()}"
        )

    if errors:
        raise ValidationError(errors)


def validate_modified_range(approved_start_date: date, approved_end_date: date) -> None:
    """Modified (approver-supplied) ranges only need to be well ordered."""
    if approved_end_date < approved_start_date:
        raise ValidationError.single(
            "approvedEndDate", "Modified end date cannot be before start date"
        )
