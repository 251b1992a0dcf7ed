from __future__ import annotations

from flask import Flask, request

from ..common.auth import admin_required, current_employee_id, login_required
from ..common.datetime_utils import parse_iso_date, parse_optional_date
from ..common.responses import json_result
from ..container import Container
from ..core.exceptions import ValidationError
from ..core.result import capture


def register(app: Flask, container: Container) -> None:
    ledger = container.reward_ledger

    @app.route("/rewards", methods=["GET"], endpoint="rewards_list")
    @admin_required
    def list_rewards():
        args = request.args
        return json_result(
            capture(
                ledger.list,
                status=args.get("status"),
                event_type=args.get("event_type"),
                search=args.get("search"),
                page=args.get("page", 1),
                limit=args.get("limit", 10),
            )
        )

    @app.route("/rewards", methods=["POST"], endpoint="rewards_create")
    @admin_required
    def create_reward():
        def _create():
            body = request.get_json(silent=True) or {}
            return ledger.create(
                name=body.get("name") or "",
                initial_amount=body.get("initial_amount"),
                start_date=parse_iso_date(body.get("start_date") or ""),
                end_date=parse_optional_date(body.get("end_date")),
                description=body.get("description"),
                event_type=body.get("event_type"),
                created_by=current_employee_id(),
            )

        return json_result(capture(_create, success_message="Tạo quỹ thưởng thành công!"))

    @app.route("/rewards/deduct", methods=["POST"], endpoint="rewards_deduct")
    @admin_required
    def deduct():
        def _deduct():
            body = request.get_json(silent=True) or {}
            try:
                reward_id = int(body.get("reward_id"))
            except (TypeError, ValueError):
                raise ValidationError("Quỹ thưởng không hợp lệ")
            return ledger.deduct(
                reward_id,
                body.get("amount"),
                description=body.get("description"),
                created_by=current_employee_id(),
            )

        return json_result(capture(_deduct, success_message="Chi quỹ thưởng thành công!"))

    @app.route("/rewards/stats", methods=["GET"], endpoint="rewards_stats")
    @admin_required
    def stats():
        return json_result(capture(ledger.stats))

    @app.route("/rewards/employee-stats", methods=["GET"], endpoint="rewards_employee_stats")
    @login_required
    def employee_stats():
        return json_result(ledger.employee_stats())

    @app.route("/rewards/<int:reward_id>", methods=["GET"], endpoint="rewards_get")
    @admin_required
    def get_reward(reward_id: int):
        return json_result(capture(ledger.get, reward_id))

    @app.route("/rewards/<int:reward_id>", methods=["PUT"], endpoint="rewards_update")
    @admin_required
    def update_reward(reward_id: int):
        def _update():
            body = request.get_json(silent=True) or {}
            return ledger.update(
                reward_id,
                name=body.get("name"),
                description=body.get("description"),
                event_type=body.get("event_type"),
                start_date=parse_optional_date(body.get("start_date")),
                end_date=parse_optional_date(body.get("end_date")),
                current_amount=body.get("current_amount"),
                status=body.get("status"),
                updated_by=current_employee_id(),
            )

        return json_result(capture(_update, success_message="Cập nhật quỹ thưởng thành công!"))

    @app.route("/rewards/<int:reward_id>", methods=["DELETE"], endpoint="rewards_delete")
    @admin_required
    def delete_reward(reward_id: int):
        return json_result(capture(ledger.delete, reward_id, success_message="Đã xóa quỹ thưởng"))

    @app.route("/rewards/<int:reward_id>/entries", methods=["GET"], endpoint="rewards_entries")
    @admin_required
    def entries(reward_id: int):
        return json_result(capture(ledger.list_entries, reward_id))
