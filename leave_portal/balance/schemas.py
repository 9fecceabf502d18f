"""Balance Pydantic v2 schemas — snapshot and ledger entries."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from leave_portal.common.constants import BalanceKind, LedgerEntryType


class BalanceSnapshot(BaseModel):
    """``{leaveBalance, cclBalance}`` as returned by getLeaveBalance."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    leave_balance: float = Field(0.0, ge=0)
    ccl_balance: float = Field(0.0, ge=0)

    def available(self, kind: BalanceKind) -> float:
        return self.ccl_balance if kind is BalanceKind.ccl else self.leave_balance


class BalanceAdjustment(BaseModel):
    """Signal to the ledger: one debit / restore / credit of a balance."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    employee_id: str
    balance: BalanceKind
    entry_type: LedgerEntryType
    days: float = Field(..., gt=0)
    reference: Optional[str] = None
    remarks: str = ""

    @property
    def signed_delta(self) -> float:
        """Negative for ``used``, positive for ``restored`` / ``earned``."""
        return -self.days if self.entry_type is LedgerEntryType.used else self.days


class LedgerEntry(BaseModel):
    """One applied adjustment with the resulting balance (history row)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    adjustment: BalanceAdjustment
    balance_after: float
    recorded_at: datetime
