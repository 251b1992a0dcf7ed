from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .model import WorkHours
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on office hours."""

    def for_checkin(self, *, now: datetime, hours: Optional[WorkHours]) -> AttendanceStrategy:
        if not hours:
            return NormalStrategy()

        deadline = datetime.combine(now.date(), hours.start) + timedelta(minutes=hours.grace_minutes)
        if now <= deadline:
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(self, *, now: datetime, hours: Optional[WorkHours]) -> AttendanceStrategy:
        if not hours:
            return NormalStrategy()

        if now < datetime.combine(now.date(), hours.end):
            return EarlyLeaveStrategy()
        return NormalStrategy()
