from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_REQUEST_LIST_LIMIT
from ..core.enums import RequestStatus
from .model import AttendanceRequest


class AttendanceRequestRepository(Protocol):
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
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[AttendanceRequest]:
        raise NotImplementedError

    def list(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = DEFAULT_REQUEST_LIST_LIMIT,
    ) -> Sequence[AttendanceRequest]:
        """Newest first: created_at DESC, request_id DESC."""

        raise NotImplementedError

    def accept_and_apply(self, *, request_id: int, decided_by: int, decided_at: datetime) -> bool:
        """Flip pending -> accepted and upsert the attendance record atomically.

        Returns False when the request was no longer pending. Raises
        ``ValidationError`` (after rolling back) when the merged record would be
        out of order.
        """

        raise NotImplementedError

    def reject(self, *, request_id: int, decided_by: int, decided_at: datetime) -> bool:
        raise NotImplementedError
