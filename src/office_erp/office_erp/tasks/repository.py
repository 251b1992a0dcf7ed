from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import Task


class TaskRepository(Protocol):
    def list_in_period(
        self,
        start: datetime,
        end: datetime,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[Task]:
        """Tasks whose start, end or last update falls inside [start, end].

        With ``employee_ids`` only tasks assigned to one of them are returned.
        ``assignee_ids`` always carries the full assignee list.
        """

        raise NotImplementedError
