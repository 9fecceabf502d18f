"""Day-count and date-range rules."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from leave_portal.common.exceptions import ValidationError
from leave_portal.leave.calculator import (
    count_leave_days,
    iter_leave_dates,
    validate_leave_range,
    validate_modified_range,
)

TODAY = date(2024, 6, 1)


def _validate(start, end, *, is_half_day=False, today=TODAY):
    validate_leave_range(
        start,
        end,
        is_half_day=is_half_day,
        today=today,
        backdate_limit_days=35,
        max_span_days=365,
    )


class TestCountLeaveDays:

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2024, 6, 3), date(2024, 6, 3), 1.0),
            (date(2024, 6, 3), date(2024, 6, 5), 3.0),
            (date(2024, 2, 28), date(2024, 3, 1), 3.0),  # leap year
            (date(2024, 3, 30), date(2024, 4, 2), 4.0),  # spans a DST change in many zones
            (date(2023, 12, 31), date(2024, 1, 1), 2.0),
        ],
    )
    def test_inclusive_count(self, start, end, expected):
        assert count_leave_days(start, end) == expected

    def test_full_day_count_is_at_least_one(self):
        for offset in range(0, 40, 7):
            start = date(2024, 6, 3)
            assert count_leave_days(start, start + timedelta(days=offset)) >= 1

    def test_half_day_is_always_half(self):
        assert count_leave_days(date(2024, 6, 3), date(2024, 6, 3), is_half_day=True) == 0.5

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError) as exc:
            count_leave_days(date(2024, 6, 5), date(2024, 6, 3))
        assert "endDate" in exc.value.errors


class TestIterLeaveDates:

    def test_yields_every_day_inclusive(self):
        days = list(iter_leave_dates(date(2024, 6, 29), date(2024, 7, 2)))
        assert days == [
            date(2024, 6, 29),
            date(2024, 6, 30),
            date(2024, 7, 1),
            date(2024, 7, 2),
        ]

    def test_single_day(self):
        assert list(iter_leave_dates(date(2024, 6, 3), date(2024, 6, 3))) == [date(2024, 6, 3)]


class TestValidateLeaveRange:

    def test_valid_range_passes(self):
        _validate(date(2024, 6, 3), date(2024, 6, 5))

    def test_missing_dates_reported_together(self):
        with pytest.raises(ValidationError) as exc:
            _validate(None, None)
        assert exc.value.errors == {
            "startDate": ["Please select start date"],
            "endDate": ["Please select end date"],
        }

    def test_half_day_does_not_need_end_date(self):
        _validate(date(2024, 6, 3), None, is_half_day=True)

    def test_half_day_with_different_end_date_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _validate(date(2024, 6, 3), date(2024, 6, 4), is_half_day=True)
        assert "endDate" in exc.value.errors

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _validate(date(2024, 6, 5), date(2024, 6, 3))
        assert exc.value.errors["endDate"] == ["End date cannot be before start date"]

    def test_backdate_limit_is_inclusive(self):
        _validate(TODAY - timedelta(days=35), TODAY)
        with pytest.raises(ValidationError) as exc:
            _validate(TODAY - timedelta(days=36), TODAY)
        assert "startDate" in exc.value.errors

    def test_span_limit_is_inclusive(self):
        start = date(2024, 6, 3)
        _validate(start, start + timedelta(days=365))
        with pytest.raises(ValidationError) as exc:
            _validate(start, start + timedelta(days=366))
        assert "endDate" in exc.value.errors


class TestValidateModifiedRange:

    def test_well_ordered_range_passes(self):
        validate_modified_range(date(2024, 6, 4), date(2024, 6, 4))

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_modified_range(date(2024, 6, 5), date(2024, 6, 4))
        assert exc.value.errors == {
            "approvedEndDate": ["Modified end date cannot be before start date"],
        }
