from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import WorkHours
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Check-out before the end of office hours."""

    def decide_checkin(self, *, now: datetime, hours: Optional[WorkHours]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.UNKNOWN)

    def decide_checkout(self, *, now: datetime, hours: Optional[WorkHours], current: AttendanceStatus) -> StatusDecision:
        # A late arrival stays LATE; the early leave only shows in the notice.
        status = AttendanceStatus.EARLY_LEAVE if current == AttendanceStatus.ON_TIME else current
        return StatusDecision(status=status, notice="early")
