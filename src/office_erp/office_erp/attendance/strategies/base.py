from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import WorkHours


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    # Status sent along with the attendance notification: success / late / early.
    notice: str = "success"
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, hours: Optional[WorkHours]) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, now: datetime, hours: Optional[WorkHours], current: AttendanceStatus) -> StatusDecision:
        raise NotImplementedError
