from __future__ import annotations

import threading
from datetime import date, datetime

import pytest

from src.office_erp.office_erp.core.enums import ErrorKind, LedgerEntryType, RewardEventType, RewardStatus
from src.office_erp.office_erp.core.exceptions import (
    ConcurrentModification,
    FundHasHistory,
    FundNotActive,
    InfrastructureError,
    InsufficientBalance,
    InvalidAmount,
    NotFoundError,
    ValidationError,
)
from src.office_erp.office_erp.core.result import Err, Ok
from src.office_erp.office_erp.rewards.service import RewardLedger
from tests.fakes import ADMIN, FakeRewardsRepo, FixedClock

START = date(2026, 1, 1)


def make_ledger(repo=None, *, max_retries=5):
    repo = repo or FakeRewardsRepo()
    return RewardLedger(repo, max_retries=max_retries, clock=FixedClock(datetime(2026, 3, 1, 12, 0))), repo


def balance_matches_ledger(repo: FakeRewardsRepo, reward_id: int) -> bool:
    return repo.get(reward_id).current_amount == sum(e.amount for e in repo.list_entries(reward_id))


def test_deduct_then_insufficient_balance_leaves_balance_unchanged():
    ledger, repo = make_ledger()
    fund = ledger.create(name="Quỹ Tết", initial_amount=1_000_000, start_date=START, created_by=ADMIN.employee_id)

    after = ledger.deduct(fund.reward_id, 300_000, description="Thưởng Tết")
    assert after.current_amount == 700_000

    with pytest.raises(InsufficientBalance):
        ledger.deduct(fund.reward_id, 800_000)

    assert ledger.get(fund.reward_id).current_amount == 700_000
    assert balance_matches_ledger(repo, fund.reward_id)
    entries = ledger.list_entries(fund.reward_id)
    assert [e.entry_type for e in entries] == [LedgerEntryType.DEDUCTION, LedgerEntryType.DEPOSIT]
    assert entries[0].amount == -300_000
    assert entries[0].balance_after == 700_000


def test_concurrent_deductions_never_overdraw():
    ledger, repo = make_ledger(max_retries=20)
    fund = ledger.create(name="Quỹ quý", initial_amount=1_000_000, start_date=START)
    outcomes: list[str] = []
    lock = threading.Lock()
    barrier = threading.Barrier(10)

    def worker():
        barrier.wait()
        try:
            ledger.deduct(fund.reward_id, 150_000)
            result = "ok"
        except InsufficientBalance:
            result = "insufficient"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 6
    assert outcomes.count("insufficient") == 4
    assert ledger.get(fund.reward_id).current_amount == 100_000
    assert balance_matches_ledger(repo, fund.reward_id)


class AlwaysStaleRepo(FakeRewardsRepo):
    def apply_entry(self, **kwargs):
        self.cas_failures += 1
        return False

    def apply_update(self, **kwargs):
        self.cas_failures += 1
        return False


def test_lost_races_give_up_with_concurrent_modification():
    ledger, repo = make_ledger(AlwaysStaleRepo(), max_retries=3)
    fund = ledger.create(name="Quỹ", initial_amount=500_000, start_date=START)

    with pytest.raises(ConcurrentModification):
        ledger.deduct(fund.reward_id, 1_000)
    assert repo.cas_failures == 3


def test_failed_update_leaves_the_fund_untouched():
    ledger, repo = make_ledger(AlwaysStaleRepo(), max_retries=3)
    fund = ledger.create(name="Quỹ cũ", initial_amount=500_000, start_date=START, description="ban đầu")

    with pytest.raises(ConcurrentModification):
        ledger.update(fund.reward_id, name="Quỹ mới", description="sửa", current_amount=400_000, status="closed")

    after = ledger.get(fund.reward_id)
    assert after.name == "Quỹ cũ"
    assert after.description == "ban đầu"
    assert after.current_amount == 500_000
    assert after.status == RewardStatus.ACTIVE
    assert len(repo.list_entries(fund.reward_id)) == 1


def test_update_on_a_fund_closed_meanwhile_writes_nothing():
    ledger, repo = make_ledger()
    fund = ledger.create(name="Quỹ cũ", initial_amount=500_000, start_date=START)
    repo.close(reward_id=fund.reward_id, status=RewardStatus.CLOSED, closed_at=datetime(2026, 3, 1, 11, 0))

    with pytest.raises(FundNotActive):
        ledger.update(fund.reward_id, name="Quỹ mới", current_amount=400_000)

    assert ledger.get(fund.reward_id).name == "Quỹ cũ"
    assert balance_matches_ledger(repo, fund.reward_id)


def test_update_amount_and_close_in_one_step():
    ledger, repo = make_ledger()
    fund = ledger.create(name="Quỹ", initial_amount=500_000, start_date=START)

    result = ledger.update(fund.reward_id, name="Quỹ quyết toán", current_amount=450_000, status="cashed_out")

    assert result.name == "Quỹ quyết toán"
    assert result.current_amount == 450_000
    assert result.status == RewardStatus.CASHED_OUT
    assert result.cashed_out_at == datetime(2026, 3, 1, 12, 0)
    assert [e.entry_type for e in ledger.list_entries(fund.reward_id)] == [
        LedgerEntryType.CORRECTION,
        LedgerEntryType.DEPOSIT,
    ]
    assert balance_matches_ledger(repo, fund.reward_id)


def test_amounts_beyond_float_precision_are_kept_exact():
    ledger, _ = make_ledger()
    big = 9_007_199_254_740_993

    fund = ledger.create(name="Quỹ lớn", initial_amount=big, start_date=START)
    assert fund.current_amount == big

    after = ledger.deduct(fund.reward_id, str(big - 1))
    assert after.current_amount == 1


@pytest.mark.parametrize("amount", [0, -5, "abc", 1.5, None])
def test_invalid_amounts(amount):
    ledger, _ = make_ledger()
    fund = ledger.create(name="Quỹ", initial_amount=500_000, start_date=START)

    with pytest.raises(InvalidAmount):
        ledger.deduct(fund.reward_id, amount)
    with pytest.raises(InvalidAmount):
        ledger.create(name="Quỹ 2", initial_amount=amount, start_date=START)


def test_create_validation():
    ledger, _ = make_ledger()

    with pytest.raises(ValidationError):
        ledger.create(name="", initial_amount=1, start_date=START)
    with pytest.raises(ValidationError):
        ledger.create(name="Quỹ", initial_amount=1, start_date=START, end_date=date(2025, 12, 31))
    with pytest.raises(ValidationError):
        ledger.create(name="Quỹ", initial_amount=1, start_date=START, event_type="birthday")


def test_close_out_twice_fails_and_blocks_deductions():
    ledger, _ = make_ledger()
    fund = ledger.create(name="Quỹ", initial_amount=500_000, start_date=START, event_type="holiday")

    closed = ledger.close_out(fund.reward_id)
    assert closed.status == RewardStatus.CLOSED
    assert closed.current_amount == 500_000
    assert closed.cashed_out_at == datetime(2026, 3, 1, 12, 0)

    with pytest.raises(FundNotActive):
        ledger.close_out(fund.reward_id)
    with pytest.raises(FundNotActive):
        ledger.deduct(fund.reward_id, 1)
    with pytest.raises(FundNotActive):
        ledger.update(fund.reward_id, name="Đổi tên")


def test_update_amount_is_recorded_as_correction():
    ledger, repo = make_ledger()
    fund = ledger.create(name="Quỹ", initial_amount=500_000, start_date=START)

    updated = ledger.update(fund.reward_id, current_amount=650_000, name="Quỹ mới", updated_by=ADMIN.employee_id)

    assert updated.current_amount == 650_000
    assert updated.name == "Quỹ mới"
    latest = ledger.list_entries(fund.reward_id)[0]
    assert latest.entry_type == LedgerEntryType.CORRECTION
    assert latest.amount == 150_000
    assert latest.created_by == ADMIN.employee_id
    assert balance_matches_ledger(repo, fund.reward_id)

    with pytest.raises(InvalidAmount):
        ledger.update(fund.reward_id, current_amount=-1)


def test_update_with_cashed_out_status_closes_the_fund():
    ledger, _ = make_ledger()
    fund = ledger.create(name="Quỹ", initial_amount=500_000, start_date=START)

    result = ledger.update(fund.reward_id, status="cashed_out")

    assert result.status == RewardStatus.CASHED_OUT
    assert result.cashed_out_at is not None


def test_delete_only_without_history():
    ledger, _ = make_ledger()
    untouched = ledger.create(name="Quỹ A", initial_amount=100_000, start_date=START)
    used = ledger.create(name="Quỹ B", initial_amount=100_000, start_date=START)
    ledger.deduct(used.reward_id, 10_000)

    ledger.delete(untouched.reward_id)
    with pytest.raises(NotFoundError):
        ledger.get(untouched.reward_id)

    with pytest.raises(FundHasHistory):
        ledger.delete(used.reward_id)


def test_list_filters_and_paginates():
    ledger, _ = make_ledger()
    for i in range(12):
        ledger.create(name=f"Quỹ {i}", initial_amount=1_000, start_date=START, event_type=RewardEventType.MONTHLY)
    ledger.create(name="Quỹ Tết", initial_amount=1_000, start_date=START, event_type="new_year")

    page = ledger.list(event_type="monthly", page=2, limit=5)
    assert page.total == 12
    assert page.total_pages == 3
    assert len(page.items) == 5

    found = ledger.list(search="tết")
    assert [r.name for r in found.items] == ["Quỹ Tết"]

    with pytest.raises(ValidationError):
        ledger.list(page=0)


def test_stats_and_employee_stats():
    ledger, _ = make_ledger()
    a = ledger.create(name="Quỹ A", initial_amount=1_000_000, start_date=START)
    b = ledger.create(name="Quỹ B", initial_amount=200_000, start_date=START)
    ledger.deduct(a.reward_id, 250_000)
    ledger.close_out(b.reward_id)

    stats = ledger.stats()
    assert stats.total_funds == 2
    assert stats.active_funds == 1
    assert stats.total_available_amount == 750_000
    assert stats.total_deducted_amount == 250_000
    assert [r.reward_id for r in stats.recent_cashouts] == [b.reward_id]

    result = ledger.employee_stats()
    assert isinstance(result, Ok)
    assert result.value.active_funds == 1
    assert result.value.total_available_amount == 750_000


class BrokenStatsRepo(FakeRewardsRepo):
    def employee_stats(self):
        raise InfrastructureError()


def test_employee_stats_failure_is_returned_not_raised():
    ledger, _ = make_ledger(BrokenStatsRepo())

    result = ledger.employee_stats()

    assert isinstance(result, Err)
    assert result.kind == ErrorKind.INFRASTRUCTURE
    assert result.code == "InfrastructureError"
