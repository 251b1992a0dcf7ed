from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, employee_id, work_date, check_in_time, check_out_time, ip, fingerprint, status, note"


def to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        ip=r.get("ip") or "",
        fingerprint=r.get("fingerprint") or "",
        status=AttendanceStatus(r.get("status") or AttendanceStatus.UNKNOWN.value),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return to_record(r) if r else None

    def list_for_employee(
        self,
        employee_id: int,
        *,
        since: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if since is not None:
            clauses.append("work_date >= %s")
            params.append(since)
        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE {' AND '.join(clauses)} ORDER BY work_date DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [to_record(r) for r in fetchall(cur)]

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE work_date=%s ORDER BY check_in_time ASC",
                (work_date,),
            )
            return [to_record(r) for r in fetchall(cur)]

    def list_between(self, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, employee_id ASC
                """,
                (start_date, end_date),
            )
            return [to_record(r) for r in fetchall(cur)]

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: datetime,
        ip: str,
        fingerprint: str,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(employee_id, work_date, check_in_time, ip, fingerprint, status, note)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(employee_id), work_date, check_in_time, ip, fingerprint, status.value, note),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            # uq_attendance_employee_date: the row exists already; the caller re-reads it.
            if is_duplicate_key(e):
                return None
            raise

    def set_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        ip: str,
        fingerprint: str,
        status: AttendanceStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, ip=%s, fingerprint=%s, status=%s
                WHERE attendance_id=%s AND check_in_time IS NULL
                  AND (check_out_time IS NULL OR check_out_time >= %s)
                """,
                (check_in_time, ip, fingerprint, status.value, int(attendance_id), check_in_time),
            )
            return cur.rowcount > 0

    def set_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, status=%s, note=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, status.value, note, int(attendance_id)),
            )
            return cur.rowcount > 0

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s, note=%s
                WHERE attendance_id=%s
                """,
                (check_in_time, check_out_time, note, int(attendance_id)),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return fetchone(cur) is not None

    def delete_many(self, attendance_ids: Iterable[int]) -> int:
        ids = sorted({int(i) for i in attendance_ids})
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM attendance_records WHERE attendance_id IN ({in_clause(ids)})", tuple(ids))
            return int(cur.rowcount)
