from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import WorkHours
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, hours: Optional[WorkHours]) -> StatusDecision:
        note = None
        if hours is not None:
            note = f"Vào ca sau {hours.start.strftime('%H:%M')}"
        return StatusDecision(status=AttendanceStatus.LATE, notice="late", note=note)

    def decide_checkout(self, *, now: datetime, hours: Optional[WorkHours], current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
