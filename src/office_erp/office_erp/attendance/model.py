from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công, một bản ghi cho mỗi (nhân viên, ngày)."""

    attendance_id: int
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    ip: str
    fingerprint: str
    status: AttendanceStatus = AttendanceStatus.UNKNOWN
    note: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None

    def worked_minutes(self) -> int:
        if not self.check_in_time or not self.check_out_time:
            return 0
        return max(int((self.check_out_time - self.check_in_time).total_seconds() // 60), 0)


@dataclass(frozen=True)
class WorkHours:
    """Office hours used by the time-of-day rules."""

    start: time
    end: time
    grace_minutes: int = 0


@dataclass(frozen=True)
class EmployeeMonthStats:
    employee_id: int
    days_present: int
    late_count: int
    early_leave_count: int
    worked_minutes: int


@dataclass(frozen=True)
class AttendanceQR:
    qr_code: str
    attendance_url: str
