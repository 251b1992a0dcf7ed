from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LedgerEntryType, RewardEventType, RewardStatus
from .model import EmployeeRewardStats, Reward, RewardEntry, RewardStats


class RewardRepository(Protocol):
    def create(
        self,
        *,
        name: str,
        description: str,
        event_type: RewardEventType,
        initial_amount: int,
        start_date: date,
        end_date: Optional[date],
        created_by: Optional[int],
    ) -> int:
        """Insert the fund and its opening deposit entry in one transaction."""

        raise NotImplementedError

    def get(self, reward_id: int) -> Optional[Reward]:
        raise NotImplementedError

    def list(
        self,
        *,
        status: Optional[RewardStatus] = None,
        event_type: Optional[RewardEventType] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[Reward], int]:
        """Return (page items, total matching)."""

        raise NotImplementedError

    def apply_entry(
        self,
        *,
        reward_id: int,
        expected_version: int,
        delta: int,
        entry_type: LedgerEntryType,
        description: str,
        created_by: Optional[int],
    ) -> bool:
        """Compare-and-set on ``version`` plus ledger append.

        Returns False when the version moved, the fund is no longer active or
        the balance would go negative; nothing is written in that case.
        """

        raise NotImplementedError

    def apply_update(
        self,
        *,
        reward_id: int,
        expected_version: int,
        name: str,
        description: str,
        event_type: RewardEventType,
        start_date: date,
        end_date: Optional[date],
        delta: int,
        created_by: Optional[int],
        close_status: Optional[RewardStatus],
        closed_at: Optional[datetime],
    ) -> bool:
        """Admin edit in one transaction, guarded like ``apply_entry``.

        Rewrites the details, books a non-zero ``delta`` as a correction entry
        and, when ``close_status`` is given, closes the fund. Returns False and
        writes nothing when the compare-and-set fails.
        """

        raise NotImplementedError

    def close(self, *, reward_id: int, status: RewardStatus, closed_at: datetime) -> bool:
        """Conditional on the fund still being active."""

        raise NotImplementedError

    def delete_if_untouched(self, reward_id: int) -> bool:
        """Delete only while the ledger holds nothing but the opening deposit."""

        raise NotImplementedError

    def list_entries(self, reward_id: int) -> Sequence[RewardEntry]:
        """Newest first."""

        raise NotImplementedError

    def stats(self, *, recent_limit: int) -> RewardStats:
        raise NotImplementedError

    def employee_stats(self) -> EmployeeRewardStats:
        raise NotImplementedError
