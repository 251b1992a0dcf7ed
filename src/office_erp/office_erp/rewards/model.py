from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import LedgerEntryType, RewardEventType, RewardStatus


@dataclass(frozen=True)
class Reward:
    """Quỹ thưởng. ``current_amount`` luôn bằng tổng các bút toán trong sổ."""

    reward_id: int
    name: str
    description: str
    event_type: RewardEventType
    current_amount: int
    status: RewardStatus
    start_date: date
    end_date: Optional[date] = None
    cashed_out_at: Optional[datetime] = None
    version: int = 0
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == RewardStatus.ACTIVE


@dataclass(frozen=True)
class RewardEntry:
    """Append-only ledger line; ``amount`` is the signed delta."""

    entry_id: int
    reward_id: int
    entry_type: LedgerEntryType
    amount: int
    balance_after: int
    description: str
    created_by: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class RewardStats:
    total_funds: int
    active_funds: int
    total_available_amount: int
    total_deducted_amount: int
    recent_cashouts: list[Reward] = field(default_factory=list)


@dataclass(frozen=True)
class EmployeeRewardStats:
    active_funds: int
    total_available_amount: int
