from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import Task
from .repository import TaskRepository


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_in_period(
        self,
        start: datetime,
        end: datetime,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[Task]:
        clauses = [
            "(t.start_date BETWEEN %s AND %s OR t.end_date BETWEEN %s AND %s OR t.updated_at BETWEEN %s AND %s)"
        ]
        params: list[object] = [start, end, start, end, start, end]

        ids = sorted({int(i) for i in employee_ids}) if employee_ids is not None else None
        if ids is not None:
            if not ids:
                return []
            clauses.append(
                f"EXISTS (SELECT 1 FROM task_assignees f WHERE f.task_id = t.task_id AND f.employee_id IN ({in_clause(ids)}))"
            )
            params.extend(ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT t.task_id, t.name, t.status, t.priority, t.start_date, t.end_date, t.updated_at,
                       a.employee_id
                FROM tasks t
                JOIN task_assignees a ON a.task_id = t.task_id
                WHERE {where}
                ORDER BY t.task_id ASC, a.employee_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        tasks: dict[int, dict] = {}
        for r in rows:
            entry = tasks.setdefault(int(r["task_id"]), {"row": r, "assignees": []})
            entry["assignees"].append(int(r["employee_id"]))

        return [
            Task(
                task_id=task_id,
                name=e["row"]["name"],
                status=TaskStatus(e["row"]["status"]),
                priority=TaskPriority(e["row"].get("priority") or TaskPriority.MEDIUM.value),
                start_date=e["row"].get("start_date"),
                end_date=e["row"].get("end_date"),
                updated_at=e["row"].get("updated_at"),
                assignee_ids=tuple(e["assignees"]),
            )
            for task_id, e in tasks.items()
        ]
