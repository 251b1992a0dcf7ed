from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.constants import DEFAULT_REQUEST_LIST_LIMIT
from ..core.enums import AttendanceStatus, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRequest, merge_proposed_times
from .repository import AttendanceRequestRepository

_COLUMNS = (
    "request_id, employee_id, work_date, check_in_time, check_out_time, message, "
    "status, fingerprint, ip, created_at, decided_by, decided_at"
)


def to_request(r: dict) -> AttendanceRequest:
    return AttendanceRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        message=r.get("message") or "",
        status=RequestStatus(r["status"]),
        fingerprint=r.get("fingerprint") or "",
        ip=r.get("ip") or "",
        created_at=r["created_at"],
        decided_by=int(r["decided_by"]) if r.get("decided_by") is not None else None,
        decided_at=r.get("decided_at"),
    )


class MySQLAttendanceRequestRepository(AttendanceRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        message: str,
        fingerprint: str,
        ip: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_requests(
                    employee_id, work_date, check_in_time, check_out_time, message, status, fingerprint, ip
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    work_date,
                    check_in_time,
                    check_out_time,
                    message,
                    RequestStatus.PENDING.value,
                    fingerprint,
                    ip,
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[AttendanceRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return to_request(r) if r else None

    def list(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = DEFAULT_REQUEST_LIST_LIMIT,
    ) -> Sequence[AttendanceRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [to_request(r) for r in fetchall(cur)]

    def accept_and_apply(self, *, request_id: int, decided_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_requests
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    RequestStatus.ACCEPTED.value,
                    int(decided_by),
                    decided_at,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            if cur.rowcount == 0:
                return False

            cur.execute(f"SELECT {_COLUMNS} FROM attendance_requests WHERE request_id=%s", (int(request_id),))
            req = to_request(fetchone(cur))

            cur.execute(
                """
                SELECT attendance_id, check_in_time, check_out_time, note
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                FOR UPDATE
                """,
                (req.employee_id, req.work_date),
            )
            current = fetchone(cur)

            # Raises ValidationError; db_cursor rolls back the status flip too.
            new_in, new_out = merge_proposed_times(
                current_in=current.get("check_in_time") if current else None,
                current_out=current.get("check_out_time") if current else None,
                proposed_in=req.check_in_time,
                proposed_out=req.check_out_time,
            )
            note = req.message or (current.get("note") if current else None)

            if current:
                cur.execute(
                    """
                    UPDATE attendance_records
                    SET check_in_time=%s, check_out_time=%s, note=%s
                    WHERE attendance_id=%s
                    """,
                    (new_in, new_out, note, int(current["attendance_id"])),
                )
            else:
                # A concurrent check-in may insert the row first; fold the proposal into it.
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, check_in_time, check_out_time, ip, fingerprint, status, note
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE
                        check_in_time=COALESCE(VALUES(check_in_time), check_in_time),
                        check_out_time=COALESCE(VALUES(check_out_time), check_out_time),
                        note=VALUES(note)
                    """,
                    (
                        req.employee_id,
                        req.work_date,
                        new_in,
                        new_out,
                        req.ip,
                        req.fingerprint,
                        AttendanceStatus.UNKNOWN.value,
                        note,
                    ),
                )
            return True

    def reject(self, *, request_id: int, decided_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_requests
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    RequestStatus.REJECTED.value,
                    int(decided_by),
                    decided_at,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
