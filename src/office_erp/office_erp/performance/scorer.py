"""Pure performance scoring over task counts.

No I/O and no clock reads: the caller passes ``now`` so the same inputs always
produce the same score.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.constants import (
    DEFAULT_COMPLETION_WEIGHT,
    DEFAULT_ON_TIME_WEIGHT,
    DEFAULT_OVERDUE_PENALTY,
    RATING_GOOD_THRESHOLD,
    RATING_WARNING_THRESHOLD,
)
from ..tasks.model import Task


@dataclass(frozen=True)
class TaskCounts:
    total: int = 0
    completed: int = 0
    overdue: int = 0
    on_time: int = 0


@dataclass(frozen=True)
class ScoreWeights:
    completion: float = DEFAULT_COMPLETION_WEIGHT
    on_time: float = DEFAULT_ON_TIME_WEIGHT
    overdue_penalty: float = DEFAULT_OVERDUE_PENALTY

    @classmethod
    def from_mapping(cls, data: Optional[dict]) -> "ScoreWeights":
        data = data or {}
        return cls(
            completion=float(data.get("completion", DEFAULT_COMPLETION_WEIGHT)),
            on_time=float(data.get("on_time", DEFAULT_ON_TIME_WEIGHT)),
            overdue_penalty=float(data.get("overdue_penalty", DEFAULT_OVERDUE_PENALTY)),
        )


@dataclass(frozen=True)
class PerformanceRow:
    employee_id: int
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    on_time_tasks: int
    completion_rate: float
    on_time_rate: float
    overdue_rate: float
    performance_score: float
    rating: str
    employee_name: str = ""


def _percent(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return part / whole * 100


def count_tasks(tasks: Iterable[Task], now: datetime, employee_ids: Optional[Iterable[int]] = None) -> dict[int, TaskCounts]:
    """Per-assignee counts. A task with several assignees counts for each of them."""

    wanted = {int(i) for i in employee_ids} if employee_ids is not None else None
    acc: dict[int, list[int]] = {}
    for task in tasks:
        completed = task.is_completed
        overdue = not completed and task.end_date is not None and task.end_date < now
        on_time = (
            completed
            and task.end_date is not None
            and task.updated_at is not None
            and task.updated_at <= task.end_date
        )
        for employee_id in task.assignee_ids:
            if wanted is not None and employee_id not in wanted:
                continue
            c = acc.setdefault(employee_id, [0, 0, 0, 0])
            c[0] += 1
            c[1] += int(completed)
            c[2] += int(overdue)
            c[3] += int(on_time)

    return {eid: TaskCounts(total=c[0], completed=c[1], overdue=c[2], on_time=c[3]) for eid, c in acc.items()}


def performance_score(counts: TaskCounts, weights: ScoreWeights = ScoreWeights()) -> float:
    """Score in 0..100, rounded to 2 decimals.

    clamp(w_c * completion_rate + w_o * on_time_rate - p * overdue_tasks, 0, 100)

    ``w_c``, ``w_o`` and ``p`` come from ``weights`` (defaults 0.6, 0.4, 5.0).
    Rates are percentages: completion = completed / total, on time =
    on_time / completed, each 0 when its denominator is 0.
    """

    raw = (
        weights.completion * _percent(counts.completed, counts.total)
        + weights.on_time * _percent(counts.on_time, counts.completed)
        - weights.overdue_penalty * counts.overdue
    )
    return round(min(max(raw, 0.0), 100.0), 2)


def rating(score: float) -> str:
    if score >= RATING_GOOD_THRESHOLD:
        return "good"
    if score >= RATING_WARNING_THRESHOLD:
        return "warning"
    return "poor"


def compute_metrics(employee_id: int, counts: TaskCounts, weights: ScoreWeights = ScoreWeights()) -> PerformanceRow:
    score = performance_score(counts, weights)
    return PerformanceRow(
        employee_id=int(employee_id),
        total_tasks=counts.total,
        completed_tasks=counts.completed,
        overdue_tasks=counts.overdue,
        on_time_tasks=counts.on_time,
        completion_rate=round(_percent(counts.completed, counts.total), 2),
        on_time_rate=round(_percent(counts.on_time, counts.completed), 2),
        overdue_rate=round(_percent(counts.overdue, counts.total), 2),
        performance_score=score,
        rating=rating(score),
    )


def rank(rows: Iterable[PerformanceRow]) -> list[PerformanceRow]:
    """Score desc, then completion rate desc, then employee id asc."""

    return sorted(rows, key=lambda r: (-r.performance_score, -r.completion_rate, r.employee_id))


SORT_FIELDS = ("performance_score", "completion_rate", "on_time_rate", "total_tasks")


def sort_rows(rows: Sequence[PerformanceRow], *, sort_by: str = "performance_score", descending: bool = True) -> list[PerformanceRow]:
    if sort_by == "performance_score" and descending:
        return rank(rows)
    field = sort_by if sort_by in SORT_FIELDS else "performance_score"
    ordered = sorted(rows, key=lambda r: r.employee_id)
    return sorted(ordered, key=lambda r: getattr(r, field), reverse=descending)
