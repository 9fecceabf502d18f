"""Balance ledger — soft balance checks and an in-memory projection of adjustments.

The backend owns the authoritative counters. This module answers two
questions for the workflow:

  - may this request go ahead given the balance we fetched? (soft check)
  - what will the balance be once the backend applies the adjustments the
    workflow emitted? (projection, with a history like the backend's
    leaveHistory / cclHistory)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from leave_portal.balance.schemas import BalanceAdjustment, BalanceSnapshot, LedgerEntry
from leave_portal.common.constants import (
    BALANCE_CHECKED_TYPES,
    BalanceKind,
    LeaveType,
    LedgerEntryType,
)
from leave_portal.common.exceptions import InsufficientBalanceError

logger = logging.getLogger(__name__)

_BALANCE_NAMES = {BalanceKind.leave: "leave", BalanceKind.ccl: "CCL"}


def balance_kind_for(leave_type: LeaveType) -> BalanceKind:
    """CCL leave draws on the CCL balance; CL and OD draw on the leave balance."""
    return BalanceKind.ccl if leave_type is LeaveType.CCL else BalanceKind.leave


def ensure_sufficient_balance(
    snapshot: BalanceSnapshot,
    leave_type: LeaveType,
    requested_days: float,
) -> None:
    """Raise InsufficientBalanceError when a CL/CCL request exceeds the balance. OD is exempt."""
    if leave_type not in BALANCE_CHECKED_TYPES:
        return
    kind = balance_kind_for(leave_type)
    available = snapshot.available(kind)
    if requested_days > available:
        raise InsufficientBalanceError(_BALANCE_NAMES[kind], available, requested_days)


def debit_for_leave(
    *,
    employee_id: str,
    leave_type: LeaveType,
    days: float,
    reference: Optional[str],
    remarks: str,
) -> BalanceAdjustment:
    return BalanceAdjustment(
        employee_id=employee_id,
        balance=balance_kind_for(leave_type),
        entry_type=LedgerEntryType.used,
        days=days,
        reference=reference,
        remarks=remarks,
    )


def restore_for_leave(
    *,
    employee_id: str,
    leave_type: LeaveType,
    days: float,
    reference: Optional[str],
    remarks: str,
) -> BalanceAdjustment:
    return BalanceAdjustment(
        employee_id=employee_id,
        balance=balance_kind_for(leave_type),
        entry_type=LedgerEntryType.restored,
        days=days,
        reference=reference,
        remarks=remarks,
    )


class BalanceLedger:
    """Projection of one employee's balances under a sequence of adjustments."""

    def __init__(self, employee_id: str, snapshot: BalanceSnapshot) -> None:
        self.employee_id = employee_id
        self._snapshot = snapshot
        self.history: list[LedgerEntry] = []

    @property
    def snapshot(self) -> BalanceSnapshot:
        return self._snapshot

    def apply(self, adjustment: BalanceAdjustment) -> BalanceSnapshot:
        """Apply one adjustment; a debit below zero raises and changes nothing."""
        if adjustment.employee_id != self.employee_id:
            raise ValueError(
                f"Adjustment for {adjustment.employee_id} applied to ledger of {self.employee_id}"
            )

        current = self._snapshot.available(adjustment.balance)
        new_value = current + adjustment.signed_delta
        if new_value < 0:
            raise InsufficientBalanceError(
                _BALANCE_NAMES[adjustment.balance], current, adjustment.days,
            )

        field = "ccl_balance" if adjustment.balance is BalanceKind.ccl else "leave_balance"
        self._snapshot = self._snapshot.model_copy(update={field: new_value})
        self.history.append(
            LedgerEntry(
                adjustment=adjustment,
                balance_after=new_value,
                recorded_at=datetime.now(timezone.utc),
            )
        )
        logger.info(
            "Ledger %s %s %.1f day(s) on %s balance for employee %s (now %.1f)",
            adjustment.entry_type.value,
            adjustment.reference or "-",
            adjustment.days,
            adjustment.balance.value,
            self.employee_id,
            new_value,
        )
        return self._snapshot

    def apply_all(self, adjustments: list[BalanceAdjustment]) -> BalanceSnapshot:
        """Apply adjustments in order; all-or-nothing."""
        saved_snapshot, saved_len = self._snapshot, len(self.history)
        try:
            for adjustment in adjustments:
                self.apply(adjustment)
        except InsufficientBalanceError:
            self._snapshot = saved_snapshot
            del self.history[saved_len:]
            raise
        return self._snapshot
