from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import now_local
from ..common.pagination import Page, offset_for
from ..common.validators import require_page
from ..core.constants import DEFAULT_PAGE_LIMIT, DEFAULT_PERFORMANCE_PERIOD_DAYS, MAX_PAGE_LIMIT
from ..core.exceptions import ValidationError
from ..tasks.repository import TaskRepository
from ..users.service import EmployeeDirectory
from .scorer import SORT_FIELDS, PerformanceRow, ScoreWeights, compute_metrics, count_tasks, sort_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformanceSummary:
    total_employees: int
    average_completion_rate: float
    average_on_time_rate: float
    average_performance_score: float
    total_tasks_processed: int
    total_completed_tasks: int
    total_overdue_tasks: int
    period_start: datetime
    period_end: datetime


@dataclass(frozen=True)
class PerformanceReport:
    rows: Page[PerformanceRow]
    summary: PerformanceSummary


def _avg(values: list[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


class PerformanceService:
    def __init__(
        self,
        tasks: TaskRepository,
        employees: EmployeeDirectory,
        *,
        weights: Optional[ScoreWeights] = None,
        period_days: int = DEFAULT_PERFORMANCE_PERIOD_DAYS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._tasks = tasks
        self._employees = employees
        self._weights = weights or ScoreWeights()
        self._period_days = int(period_days)
        self._clock = clock

    def _window(self, start: Optional[date], end: Optional[date], now: datetime) -> tuple[datetime, datetime]:
        period_end = datetime.combine(end, time.max) if end else now
        period_start = datetime.combine(start, time.min) if start else now - timedelta(days=self._period_days)
        if period_start > period_end:
            raise ValidationError("Khoảng thời gian không hợp lệ")
        return period_start, period_end

    def employees_performance(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        employee_ids: Optional[Iterable[int]] = None,
        sort_by: str = "performance_score",
        sort_order: str = "desc",
        page=1,
        limit=DEFAULT_PAGE_LIMIT,
    ) -> PerformanceReport:
        if sort_by not in SORT_FIELDS:
            raise ValidationError("Trường sắp xếp không hợp lệ")
        if sort_order not in ("asc", "desc"):
            raise ValidationError("Thứ tự sắp xếp không hợp lệ")
        p, lim = require_page(page, limit, max_limit=MAX_PAGE_LIMIT)

        now = self._clock()
        period_start, period_end = self._window(start, end, now)
        ids = [int(i) for i in employee_ids] if employee_ids is not None else None

        tasks = self._tasks.list_in_period(period_start, period_end, ids)
        counts = count_tasks(tasks, now, ids)
        rows = [compute_metrics(eid, c, self._weights) for eid, c in counts.items()]
        rows = sort_rows(rows, sort_by=sort_by, descending=sort_order == "desc")

        summary = PerformanceSummary(
            total_employees=len(rows),
            average_completion_rate=_avg([r.completion_rate for r in rows]),
            average_on_time_rate=_avg([r.on_time_rate for r in rows]),
            average_performance_score=_avg([r.performance_score for r in rows]),
            total_tasks_processed=sum(r.total_tasks for r in rows),
            total_completed_tasks=sum(r.completed_tasks for r in rows),
            total_overdue_tasks=sum(r.overdue_tasks for r in rows),
            period_start=period_start,
            period_end=period_end,
        )

        offset = offset_for(p, lim)
        page_rows = rows[offset : offset + lim]
        names = self._employees.display_names([r.employee_id for r in page_rows])
        page_rows = [replace(r, employee_name=names.get(r.employee_id, f"#{r.employee_id}")) for r in page_rows]

        logger.debug("Performance computed for %d employees (%s -> %s)", len(rows), period_start, period_end)
        return PerformanceReport(rows=Page.of(page_rows, page=p, limit=lim, total=len(rows)), summary=summary)

    def my_performance(self, employee_id: int, **kwargs) -> PerformanceReport:
        employee = self._employees.get(employee_id)
        kwargs.pop("employee_ids", None)
        return self.employees_performance(employee_ids=[employee.employee_id], **kwargs)
