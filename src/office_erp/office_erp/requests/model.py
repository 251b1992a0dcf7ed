from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceRequest:
    """Yêu cầu điều chỉnh chấm công do nhân viên gửi, chờ admin duyệt."""

    request_id: int
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    message: str
    status: RequestStatus
    fingerprint: str
    ip: str
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


def merge_proposed_times(
    *,
    current_in: Optional[datetime],
    current_out: Optional[datetime],
    proposed_in: Optional[datetime],
    proposed_out: Optional[datetime],
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Overwrite only the proposed fields; the merged pair must stay ordered."""

    new_in = proposed_in if proposed_in is not None else current_in
    new_out = proposed_out if proposed_out is not None else current_out
    if new_in is not None and new_out is not None and new_out < new_in:
        raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào")
    return new_in, new_out
