from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol

logger = logging.getLogger(__name__)


class AttendanceNotifier(Protocol):
    def notify_attendance(self, *, employee_id: int, at: datetime, action: str, status: str) -> None:
        """``action`` is check_in/check_out, ``status`` is success/late/early."""

        raise NotImplementedError


class LoggingNotifier:
    """Default sender: the notification service is external, we only log the event."""

    def notify_attendance(self, *, employee_id: int, at: datetime, action: str, status: str) -> None:
        logger.info(
            "Notify employee %s: %s at %s (%s)",
            employee_id,
            action,
            at.strftime("%H:%M"),
            status,
        )
