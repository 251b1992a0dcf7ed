from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.pagination import Page, offset_for
from ..common.validators import coerce_amount, require_non_empty, require_page, require_positive_amount
from ..core.constants import DEFAULT_PAGE_LIMIT, DEFAULT_REWARD_MAX_RETRIES, MAX_PAGE_LIMIT, RECENT_CASHOUTS_LIMIT
from ..core.enums import LedgerEntryType, RewardEventType, RewardStatus
from ..core.exceptions import (
    ConcurrentModification,
    FundHasHistory,
    FundNotActive,
    InsufficientBalance,
    InvalidAmount,
    NotFoundError,
    ValidationError,
)
from ..core.result import Result, capture
from .model import Reward, RewardEntry, RewardStats
from .repository import RewardRepository

logger = logging.getLogger(__name__)


def parse_event_type(value) -> RewardEventType:
    if isinstance(value, RewardEventType):
        return value
    try:
        return RewardEventType((value or RewardEventType.OTHER.value).strip())
    except (ValueError, AttributeError):
        raise ValidationError("Loại sự kiện không hợp lệ")


def parse_reward_status(value) -> RewardStatus:
    if isinstance(value, RewardStatus):
        return value
    try:
        return RewardStatus(str(value).strip())
    except ValueError:
        raise ValidationError("Trạng thái quỹ không hợp lệ")


class RewardLedger:
    """Reward funds backed by an append-only ledger.

    Every balance change is one ledger entry written in the same transaction as
    the fund row, guarded by a compare-and-set on ``version``. Lost races are
    retried from a fresh read; after ``max_retries`` attempts the caller gets
    ``ConcurrentModification``.
    """

    def __init__(
        self,
        rewards: RewardRepository,
        *,
        max_retries: int = DEFAULT_REWARD_MAX_RETRIES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._rewards = rewards
        self._max_retries = max(1, int(max_retries))
        self._clock = clock

    def get(self, reward_id: int) -> Reward:
        reward = self._rewards.get(int(reward_id))
        if not reward:
            raise NotFoundError("Không tìm thấy quỹ thưởng")
        return reward

    def _active(self, reward_id: int) -> Reward:
        reward = self.get(reward_id)
        if not reward.is_active:
            raise FundNotActive()
        return reward

    @staticmethod
    def _check_dates(start_date: date, end_date: Optional[date]) -> None:
        if end_date is not None and end_date < start_date:
            raise ValidationError("Ngày kết thúc không thể trước ngày bắt đầu")

    def create(
        self,
        *,
        name: str,
        initial_amount,
        start_date: date,
        end_date: Optional[date] = None,
        description: Optional[str] = None,
        event_type=None,
        created_by: Optional[int] = None,
    ) -> Reward:
        amount = require_positive_amount(initial_amount, "Số tiền ban đầu")
        name = require_non_empty(name, "Tên quỹ")
        if start_date is None:
            raise ValidationError("Vui lòng chọn ngày bắt đầu")
        self._check_dates(start_date, end_date)

        reward_id = self._rewards.create(
            name=name,
            description=(description or "").strip(),
            event_type=parse_event_type(event_type),
            initial_amount=amount,
            start_date=start_date,
            end_date=end_date,
            created_by=created_by,
        )
        logger.info("Reward fund %s created (%s, %d)", reward_id, name, amount)
        return self.get(reward_id)

    def _with_retries(self, reward_id: int, write: Callable[[Reward], bool]) -> Reward:
        """Run ``write`` against a fresh read until its compare-and-set lands."""

        for attempt in range(1, self._max_retries + 1):
            reward = self._active(reward_id)
            if write(reward):
                return self.get(reward.reward_id)
            logger.debug("Reward fund %s changed concurrently, retry %d/%d", reward_id, attempt, self._max_retries)
        logger.warning("Reward fund %s: giving up after %d attempts", reward_id, self._max_retries)
        raise ConcurrentModification()

    def deduct(
        self,
        reward_id: int,
        amount,
        *,
        description: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> Reward:
        value = require_positive_amount(amount)
        text = (description or "").strip() or "Chi quỹ thưởng"

        def write(reward: Reward) -> bool:
            if reward.current_amount < value:
                raise InsufficientBalance()
            if not self._rewards.apply_entry(
                reward_id=reward.reward_id,
                expected_version=reward.version,
                delta=-value,
                entry_type=LedgerEntryType.DEDUCTION,
                description=text,
                created_by=created_by,
            ):
                return False
            logger.info("Reward fund %s deduction -%d (balance %d)", reward.reward_id, value, reward.current_amount - value)
            return True

        return self._with_retries(reward_id, write)

    def close_out(self, reward_id: int, *, status: RewardStatus = RewardStatus.CLOSED) -> Reward:
        status = parse_reward_status(status)
        if status == RewardStatus.ACTIVE:
            raise ValidationError("Trạng thái quỹ không hợp lệ")
        reward = self._active(reward_id)
        if not self._rewards.close(reward_id=reward.reward_id, status=status, closed_at=self._clock()):
            raise FundNotActive()
        logger.info("Reward fund %s closed as %s with %d left", reward.reward_id, status.value, reward.current_amount)
        return self.get(reward.reward_id)

    def update(
        self,
        reward_id: int,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        event_type=None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        current_amount=None,
        status=None,
        updated_by: Optional[int] = None,
    ) -> Reward:
        """Edit an active fund in a single transaction.

        A new ``current_amount`` is booked as a correction entry carrying the
        delta. A non-active ``status`` closes the fund together with the other
        edits. Either everything is written or nothing is.
        """

        new_status = parse_reward_status(status) if status is not None else None
        close_status = new_status if new_status not in (None, RewardStatus.ACTIVE) else None
        target = coerce_amount(current_amount, "Số tiền") if current_amount is not None else None
        if target is not None and target < 0:
            raise InvalidAmount("Số tiền không thể âm")
        new_name = require_non_empty(name, "Tên quỹ") if name is not None else None
        new_type = parse_event_type(event_type) if event_type is not None else None

        def write(reward: Reward) -> bool:
            new_start = start_date or reward.start_date
            new_end = end_date if end_date is not None else reward.end_date
            self._check_dates(new_start, new_end)
            delta = target - reward.current_amount if target is not None else 0

            if not self._rewards.apply_update(
                reward_id=reward.reward_id,
                expected_version=reward.version,
                name=new_name or reward.name,
                description=description.strip() if description is not None else reward.description,
                event_type=new_type or reward.event_type,
                start_date=new_start,
                end_date=new_end,
                delta=delta,
                created_by=updated_by,
                close_status=close_status,
                closed_at=self._clock() if close_status else None,
            ):
                return False
            logger.info(
                "Reward fund %s updated (correction %+d%s)",
                reward.reward_id,
                delta,
                f", closed as {close_status.value}" if close_status else "",
            )
            return True

        return self._with_retries(reward_id, write)

    def delete(self, reward_id: int) -> None:
        reward = self.get(reward_id)
        if not self._rewards.delete_if_untouched(reward.reward_id):
            raise FundHasHistory()
        logger.info("Reward fund %s deleted", reward.reward_id)

    def list(
        self,
        *,
        status=None,
        event_type=None,
        search: Optional[str] = None,
        page=1,
        limit=DEFAULT_PAGE_LIMIT,
    ) -> Page[Reward]:
        p, lim = require_page(page, limit, max_limit=MAX_PAGE_LIMIT)
        items, total = self._rewards.list(
            status=parse_reward_status(status) if status else None,
            event_type=parse_event_type(event_type) if event_type else None,
            search=(search or "").strip() or None,
            offset=offset_for(p, lim),
            limit=lim,
        )
        return Page.of(items, page=p, limit=lim, total=total)

    def list_entries(self, reward_id: int) -> Sequence[RewardEntry]:
        reward = self.get(reward_id)
        return self._rewards.list_entries(reward.reward_id)

    def stats(self) -> RewardStats:
        return self._rewards.stats(recent_limit=RECENT_CASHOUTS_LIMIT)

    def employee_stats(self) -> Result:
        """Never raises: storage failures come back as ``Err``."""

        return capture(self._rewards.employee_stats)
