from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        since: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest work_date first."""

        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_between(self, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

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
        """Insert today's record; ``None`` when (employee, date) already exists."""

        raise NotImplementedError

    def set_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        ip: str,
        fingerprint: str,
        status: AttendanceStatus,
    ) -> bool:
        """Fill check-in on an existing row only while it is still empty."""

        raise NotImplementedError

    def set_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> bool:
        """Conditional update: only applies while check_out_time is NULL."""

        raise NotImplementedError

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        note: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_many(self, attendance_ids: Iterable[int]) -> int:
        raise NotImplementedError
