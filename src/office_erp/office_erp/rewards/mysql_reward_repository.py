from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LedgerEntryType, RewardEventType, RewardStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import EmployeeRewardStats, Reward, RewardEntry, RewardStats
from .repository import RewardRepository

_COLUMNS = (
    "reward_id, name, description, event_type, current_amount, status, "
    "start_date, end_date, cashed_out_at, version, created_at"
)
_ENTRY_COLUMNS = "entry_id, reward_id, entry_type, amount, balance_after, description, created_by, created_at"


def to_reward(r: dict) -> Reward:
    return Reward(
        reward_id=int(r["reward_id"]),
        name=r["name"],
        description=r.get("description") or "",
        event_type=RewardEventType(r.get("event_type") or RewardEventType.OTHER.value),
        current_amount=int(r["current_amount"]),
        status=RewardStatus(r["status"]),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        cashed_out_at=r.get("cashed_out_at"),
        version=int(r.get("version") or 0),
        created_at=r.get("created_at"),
    )


def to_entry(r: dict) -> RewardEntry:
    return RewardEntry(
        entry_id=int(r["entry_id"]),
        reward_id=int(r["reward_id"]),
        entry_type=LedgerEntryType(r["entry_type"]),
        amount=int(r["amount"]),
        balance_after=int(r["balance_after"]),
        description=r.get("description") or "",
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
        created_at=r["created_at"],
    )


class MySQLRewardRepository(RewardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO rewards(name, description, event_type, current_amount, status, start_date, end_date, version)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    name,
                    description,
                    event_type.value,
                    int(initial_amount),
                    RewardStatus.ACTIVE.value,
                    start_date,
                    end_date,
                ),
            )
            reward_id = int(cur.lastrowid)
            cur.execute(
                """
                INSERT INTO reward_entries(reward_id, entry_type, amount, balance_after, description, created_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    reward_id,
                    LedgerEntryType.DEPOSIT.value,
                    int(initial_amount),
                    int(initial_amount),
                    "Khởi tạo quỹ",
                    created_by,
                ),
            )
            return reward_id

    def get(self, reward_id: int) -> Optional[Reward]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM rewards WHERE reward_id=%s", (int(reward_id),))
            r = fetchone(cur)
            return to_reward(r) if r else None

    def list(
        self,
        *,
        status: Optional[RewardStatus] = None,
        event_type: Optional[RewardEventType] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[Reward], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if event_type is not None:
            clauses.append("event_type=%s")
            params.append(event_type.value)
        if search:
            clauses.append("(name LIKE %s OR description LIKE %s)")
            like = f"%{search}%"
            params.extend([like, like])

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM rewards WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM rewards
                WHERE {where}
                ORDER BY status ASC, created_at DESC, reward_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [to_reward(r) for r in fetchall(cur)], total

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE rewards
                SET current_amount = current_amount + %s, version = version + 1
                WHERE reward_id=%s AND version=%s AND status=%s AND current_amount + %s >= 0
                """,
                (int(delta), int(reward_id), int(expected_version), RewardStatus.ACTIVE.value, int(delta)),
            )
            if cur.rowcount == 0:
                return False

            cur.execute("SELECT current_amount FROM rewards WHERE reward_id=%s", (int(reward_id),))
            balance = int(fetchone(cur)["current_amount"])
            cur.execute(
                """
                INSERT INTO reward_entries(reward_id, entry_type, amount, balance_after, description, created_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(reward_id), entry_type.value, int(delta), balance, description, created_by),
            )
            return True

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
        status = close_status or RewardStatus.ACTIVE
        with db_cursor(self._conn_factory) as (_, cur):
            # version always moves, so a matching row is never a 0-row no-op.
            cur.execute(
                """
                UPDATE rewards
                SET name=%s, description=%s, event_type=%s, start_date=%s, end_date=%s,
                    current_amount = current_amount + %s,
                    status=%s, cashed_out_at=%s, version = version + 1
                WHERE reward_id=%s AND version=%s AND status=%s AND current_amount + %s >= 0
                """,
                (
                    name,
                    description,
                    event_type.value,
                    start_date,
                    end_date,
                    int(delta),
                    status.value,
                    closed_at if close_status else None,
                    int(reward_id),
                    int(expected_version),
                    RewardStatus.ACTIVE.value,
                    int(delta),
                ),
            )
            if cur.rowcount == 0:
                return False

            if delta:
                cur.execute("SELECT current_amount FROM rewards WHERE reward_id=%s", (int(reward_id),))
                balance = int(fetchone(cur)["current_amount"])
                cur.execute(
                    """
                    INSERT INTO reward_entries(reward_id, entry_type, amount, balance_after, description, created_by)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (int(reward_id), LedgerEntryType.CORRECTION.value, int(delta), balance, "Điều chỉnh số dư", created_by),
                )
            return True

    def close(self, *, reward_id: int, status: RewardStatus, closed_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE rewards
                SET status=%s, cashed_out_at=%s, version = version + 1
                WHERE reward_id=%s AND status=%s
                """,
                (status.value, closed_at, int(reward_id), RewardStatus.ACTIVE.value),
            )
            return cur.rowcount > 0

    def delete_if_untouched(self, reward_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM rewards
                WHERE reward_id=%s
                  AND (SELECT COUNT(*) FROM reward_entries e WHERE e.reward_id=%s) <= 1
                """,
                (int(reward_id), int(reward_id)),
            )
            return cur.rowcount > 0

    def list_entries(self, reward_id: int) -> Sequence[RewardEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ENTRY_COLUMNS} FROM reward_entries WHERE reward_id=%s ORDER BY entry_id DESC",
                (int(reward_id),),
            )
            return [to_entry(r) for r in fetchall(cur)]

    def stats(self, *, recent_limit: int) -> RewardStats:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total_funds,
                       COALESCE(SUM(status=%s), 0) AS active_funds,
                       COALESCE(SUM(CASE WHEN status=%s THEN current_amount ELSE 0 END), 0) AS total_available
                FROM rewards
                """,
                (RewardStatus.ACTIVE.value, RewardStatus.ACTIVE.value),
            )
            totals = fetchone(cur) or {}
            cur.execute(
                "SELECT COALESCE(-SUM(amount), 0) AS total_deducted FROM reward_entries WHERE entry_type=%s",
                (LedgerEntryType.DEDUCTION.value,),
            )
            deducted = fetchone(cur) or {}
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM rewards
                WHERE cashed_out_at IS NOT NULL
                ORDER BY cashed_out_at DESC
                LIMIT %s
                """,
                (int(recent_limit),),
            )
            recent = [to_reward(r) for r in fetchall(cur)]

        return RewardStats(
            total_funds=int(totals.get("total_funds") or 0),
            active_funds=int(totals.get("active_funds") or 0),
            total_available_amount=int(totals.get("total_available") or 0),
            total_deducted_amount=int(deducted.get("total_deducted") or 0),
            recent_cashouts=recent,
        )

    def employee_stats(self) -> EmployeeRewardStats:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS active_funds, COALESCE(SUM(current_amount), 0) AS total_available
                FROM rewards WHERE status=%s
                """,
                (RewardStatus.ACTIVE.value,),
            )
            r = fetchone(cur) or {}
            return EmployeeRewardStats(
                active_funds=int(r.get("active_funds") or 0),
                total_available_amount=int(r.get("total_available") or 0),
            )
