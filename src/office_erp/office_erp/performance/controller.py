from __future__ import annotations

from flask import Flask, request

from ..common.auth import admin_required, current_employee_id, login_required
from ..common.datetime_utils import parse_optional_date
from ..common.responses import json_result
from ..container import Container
from ..core.exceptions import ValidationError
from ..core.result import capture


def _query() -> dict:
    args = request.args
    return {
        "start": parse_optional_date(args.get("start_date")),
        "end": parse_optional_date(args.get("end_date")),
        "sort_by": args.get("sort_by") or "performance_score",
        "sort_order": args.get("sort_order") or "desc",
        "page": args.get("page", 1),
        "limit": args.get("limit", 10),
    }


def _employee_ids():
    raw = request.args.get("employee_ids")
    if not raw:
        return None
    try:
        return [int(v) for v in raw.split(",") if v.strip()]
    except ValueError:
        raise ValidationError("Danh sách nhân viên không hợp lệ")


def register(app: Flask, container: Container) -> None:
    performance = container.performance_service

    @app.route("/tasks/performance", methods=["GET"], endpoint="tasks_performance")
    @admin_required
    def employees_performance():
        return json_result(capture(lambda: performance.employees_performance(employee_ids=_employee_ids(), **_query())))

    @app.route("/tasks/performance/me", methods=["GET"], endpoint="tasks_performance_me")
    @login_required
    def my_performance():
        return json_result(capture(lambda: performance.my_performance(current_employee_id(), **_query())))
