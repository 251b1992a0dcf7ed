from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    """Công việc được giao; chỉ đọc từ phía lõi chấm điểm hiệu suất."""

    task_id: int
    name: str
    status: TaskStatus
    priority: TaskPriority
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    updated_at: Optional[datetime]
    assignee_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED
