from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_REQUEST_LIST_LIMIT
from ..core.enums import RequestStatus
from ..core.exceptions import NoProposedTimesGiven, NotFoundError, RequestAlreadyResolved, ValidationError
from ..users.service import EmployeeDirectory
from .model import AttendanceRequest
from .repository import AttendanceRequestRepository

logger = logging.getLogger(__name__)


class AttendanceRequestWorkflow:
    """Correction requests: employee submits, admin accepts or rejects once."""

    def __init__(
        self,
        requests: AttendanceRequestRepository,
        employees: EmployeeDirectory,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._requests = requests
        self._employees = employees
        self._clock = clock

    def submit(
        self,
        employee_id: int,
        *,
        work_date: date,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
        message: Optional[str] = None,
        fingerprint: str = "",
        ip: str = "",
    ) -> AttendanceRequest:
        employee = self._employees.get(employee_id)
        if work_date is None:
            raise ValidationError("Vui lòng chọn ngày cần điều chỉnh")
        if check_in_time is None and check_out_time is None:
            raise NoProposedTimesGiven()
        for value in (check_in_time, check_out_time):
            if value is not None and value.date() != work_date:
                raise ValidationError("Thời gian đề xuất phải thuộc ngày cần điều chỉnh")
        if check_in_time and check_out_time and check_out_time < check_in_time:
            raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào")

        request_id = self._requests.create(
            employee_id=employee.employee_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            message=(message or "").strip(),
            fingerprint=(fingerprint or "").strip(),
            ip=(ip or "").strip(),
        )
        logger.info("Attendance request %s submitted by employee %s for %s", request_id, employee.employee_id, work_date)
        return self.get(request_id)

    def get(self, request_id: int) -> AttendanceRequest:
        req = self._requests.get(int(request_id))
        if not req:
            raise NotFoundError("Không tìm thấy yêu cầu")
        return req

    def _pending(self, request_id: int) -> AttendanceRequest:
        req = self.get(request_id)
        if not req.is_pending:
            raise RequestAlreadyResolved()
        return req

    def accept(self, request_id: int, *, approver_id: int) -> AttendanceRequest:
        req = self._pending(request_id)
        if not self._requests.accept_and_apply(
            request_id=req.request_id,
            decided_by=int(approver_id),
            decided_at=self._clock(),
        ):
            # Another admin resolved it between our read and the flip.
            raise RequestAlreadyResolved()
        logger.info("Attendance request %s accepted by %s", req.request_id, approver_id)
        return self.get(req.request_id)

    def reject(self, request_id: int, *, approver_id: int) -> AttendanceRequest:
        req = self._pending(request_id)
        if not self._requests.reject(request_id=req.request_id, decided_by=int(approver_id), decided_at=self._clock()):
            raise RequestAlreadyResolved()
        logger.info("Attendance request %s rejected by %s", req.request_id, approver_id)
        return self.get(req.request_id)

    def list_for_employee(self, employee_id: int, *, limit: int = DEFAULT_REQUEST_LIST_LIMIT) -> Sequence[AttendanceRequest]:
        return self._requests.list(employee_id=int(employee_id), limit=limit)

    def list_all(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = DEFAULT_REQUEST_LIST_LIMIT,
    ) -> Sequence[AttendanceRequest]:
        return self._requests.list(status=status, employee_id=employee_id, limit=limit)
