from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_RECENT_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    NotCheckedInYet,
    NotFoundError,
    ValidationError,
)
from ..networks.service import OfficeNetworkRegistry
from ..users.service import EmployeeDirectory
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, EmployeeMonthStats, WorkHours
from .notifier import AttendanceNotifier, LoggingNotifier
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

CHECK_IN = "check_in"
CHECK_OUT = "check_out"


class AttendanceService:
    """Attendance gate: authorizes and applies check-in / check-out.

    Authorization binds to the server-observed caller IP, which must match an
    enabled office network. The device fingerprint is kept for audit only.
    Each (employee, date) has at most one record; the storage unique key is the
    only serialization point for concurrent check-ins.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        networks: OfficeNetworkRegistry,
        *,
        notifier: Optional[AttendanceNotifier] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        work_hours: Optional[WorkHours] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._employees = employees
        self._networks = networks
        self._notifier = notifier or LoggingNotifier()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._hours = work_hours
        self._clock = clock

    def _authorize(self, *, fingerprint: str, ip: str) -> tuple[str, str]:
        ip = (ip or "").strip()
        if not ip:
            raise ValidationError("Không tìm thấy địa chỉ IP. Vui lòng thử lại.")
        fingerprint = require_non_empty(fingerprint, "Fingerprint")
        self._networks.require_allowed(ip)
        return fingerprint, ip

    def _notify(self, *, employee_id: int, at: datetime, action: str, status: str) -> None:
        try:
            self._notifier.notify_attendance(employee_id=employee_id, at=at, action=action, status=status)
        except Exception:
            # Best effort: the attendance write already committed.
            logger.exception("Attendance notification failed for employee %s", employee_id)

    @staticmethod
    def _ensure_can_check_in(existing: Optional[AttendanceRecord], now: datetime) -> None:
        if existing is None:
            return
        if existing.check_in_time is not None:
            raise AlreadyCheckedIn()
        if existing.check_out_time is not None and existing.check_out_time < now:
            raise AlreadyCheckedOut()

    def _reload(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Không tìm thấy bản ghi chấm công")
        return record

    def check_in(self, employee_id: int, *, fingerprint: str, ip: str, now: Optional[datetime] = None) -> AttendanceRecord:
        fingerprint, ip = self._authorize(fingerprint=fingerprint, ip=ip)
        employee = self._employees.get(employee_id)
        now = now or self._clock()
        today = now.date()

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        self._ensure_can_check_in(existing, now)

        strategy = self._factory.for_checkin(now=now, hours=self._hours)
        decision = strategy.decide_checkin(now=now, hours=self._hours)

        attendance_id = None
        if existing is None:
            attendance_id = self._attendance.create_checkin(
                employee_id=employee.employee_id,
                work_date=today,
                check_in_time=now,
                ip=ip,
                fingerprint=fingerprint,
                status=decision.status,
                note=decision.note,
            )
            if attendance_id is None:
                # Unique key hit: either a concurrent check-in or a correction row
                # inserted since our read. Only the latter can still take a check-in.
                existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
                if existing is None:
                    raise AlreadyCheckedIn()
                self._ensure_can_check_in(existing, now)

        if attendance_id is None:
            # Row created by an accepted correction that only carried a check-out.
            if not self._attendance.set_checkin(
                attendance_id=existing.attendance_id,
                check_in_time=now,
                ip=ip,
                fingerprint=fingerprint,
                status=decision.status,
            ):
                raise AlreadyCheckedIn()
            attendance_id = existing.attendance_id

        logger.info("Employee %s checked in at %s from %s (%s)", employee.employee_id, now, ip, decision.status.value)
        self._notify(employee_id=employee.employee_id, at=now, action=CHECK_IN, status=decision.notice)
        return self._reload(attendance_id)

    def check_out(self, employee_id: int, *, fingerprint: str, ip: str, now: Optional[datetime] = None) -> AttendanceRecord:
        fingerprint, ip = self._authorize(fingerprint=fingerprint, ip=ip)
        now = now or self._clock()
        today = now.date()

        record = self._attendance.get_for_employee_and_date(int(employee_id), today)
        if not record or record.check_in_time is None:
            raise NotCheckedInYet()
        if record.check_out_time is not None:
            raise AlreadyCheckedOut()
        if now < record.check_in_time:
            raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào")

        strategy = self._factory.for_checkout(now=now, hours=self._hours)
        decision = strategy.decide_checkout(now=now, hours=self._hours, current=record.status)

        if not self._attendance.set_checkout(
            attendance_id=record.attendance_id,
            check_out_time=now,
            status=decision.status,
            note=decision.note or record.note,
        ):
            raise AlreadyCheckedOut()

        logger.info("Employee %s checked out at %s from %s", employee_id, now, ip)
        self._notify(employee_id=int(employee_id), at=now, action=CHECK_OUT, status=decision.notice)
        return self._reload(record.attendance_id)

    def scan(self, employee_id: int, *, fingerprint: str, ip: str, now: Optional[datetime] = None) -> tuple[str, AttendanceRecord]:
        """QR scan: check out when today's record is open, otherwise check in."""

        now = now or self._clock()
        record = self._attendance.get_for_employee_and_date(int(employee_id), now.date())
        if record and record.is_open:
            return CHECK_OUT, self.check_out(employee_id, fingerprint=fingerprint, ip=ip, now=now)
        return CHECK_IN, self.check_in(employee_id, fingerprint=fingerprint, ip=ip, now=now)

    def get_today_record(self, employee_id: int, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        today = today or self._clock().date()
        return self._attendance.get_for_employee_and_date(int(employee_id), today)

    def get_recent(self, employee_id: int, *, days: int = DEFAULT_RECENT_DAYS, today: Optional[date] = None) -> Sequence[AttendanceRecord]:
        today = today or self._clock().date()
        return self._attendance.list_for_employee(int(employee_id), since=today - timedelta(days=int(days)))

    def get_today_overview(self, today: Optional[date] = None) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_date(today or self._clock().date())

    def list_for_employee(self, employee_id: int) -> Sequence[AttendanceRecord]:
        employee = self._employees.get(employee_id)
        return self._attendance.list_for_employee(employee.employee_id)

    def monthly_stats(self, *, month: int, year: int) -> list[EmployeeMonthStats]:
        if not 1 <= int(month) <= 12 or int(year) < 1970:
            raise ValidationError("Tháng/năm không hợp lệ")
        start = date(int(year), int(month), 1)
        end = date(int(year), int(month), calendar.monthrange(int(year), int(month))[1])

        grouped: dict[int, list[AttendanceRecord]] = {}
        for r in self._attendance.list_between(start, end):
            grouped.setdefault(r.employee_id, []).append(r)

        return [
            EmployeeMonthStats(
                employee_id=employee_id,
                days_present=sum(1 for r in records if r.check_in_time is not None),
                late_count=sum(1 for r in records if r.status == AttendanceStatus.LATE),
                early_leave_count=sum(1 for r in records if r.status == AttendanceStatus.EARLY_LEAVE),
                worked_minutes=sum(r.worked_minutes() for r in records),
            )
            for employee_id, records in sorted(grouped.items())
        ]

    def update_record(
        self,
        attendance_id: int,
        *,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        """Admin correction of a single record; keeps check-out >= check-in."""

        current = self._reload(int(attendance_id))
        new_in = check_in_time or current.check_in_time
        new_out = check_out_time or current.check_out_time
        for value in (new_in, new_out):
            if value is not None and value.date() != current.work_date:
                raise ValidationError("Thời gian phải thuộc ngày chấm công")
        if new_in and new_out and new_out < new_in:
            raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào")
        if new_out and not new_in:
            raise ValidationError("Cần có giờ vào trước khi đặt giờ ra")

        new_note = note.strip() or None if note is not None else current.note
        if not self._attendance.admin_update_record(
            attendance_id=current.attendance_id,
            check_in_time=new_in,
            check_out_time=new_out,
            note=new_note,
        ):
            raise NotFoundError("Không tìm thấy bản ghi chấm công")
        logger.info("Attendance %s corrected by admin", current.attendance_id)
        return self._reload(current.attendance_id)

    def delete_record(self, attendance_id: int) -> None:
        if self._attendance.delete_many([int(attendance_id)]) == 0:
            raise NotFoundError("Không tìm thấy bản ghi chấm công")
        logger.info("Attendance %s deleted", attendance_id)

    def bulk_delete(self, attendance_ids: Iterable[int]) -> int:
        ids = [int(i) for i in attendance_ids]
        if not ids:
            raise ValidationError("Chưa chọn bản ghi nào")
        deleted = self._attendance.delete_many(ids)
        logger.info("Bulk-deleted %d attendance records", deleted)
        return deleted
