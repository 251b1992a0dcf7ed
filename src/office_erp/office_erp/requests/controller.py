from __future__ import annotations

from flask import Flask, request

from ..attendance.controller import caller_ip
from ..common.auth import admin_required, current_employee_id, login_required
from ..common.datetime_utils import parse_iso_date, parse_optional_datetime
from ..common.responses import json_result
from ..container import Container
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError
from ..core.result import capture


def _parse_status(value):
    if not value:
        return None
    try:
        return RequestStatus(value)
    except ValueError:
        raise ValidationError("Trạng thái yêu cầu không hợp lệ")


def register(app: Flask, container: Container) -> None:
    workflow = container.request_workflow

    @app.route("/attendance-requests", methods=["POST"], endpoint="attendance_request_submit")
    @login_required
    def submit():
        def _submit():
            body = request.get_json(silent=True) or {}
            work_date = parse_iso_date(body.get("work_date") or "")
            return workflow.submit(
                current_employee_id(),
                work_date=work_date,
                check_in_time=parse_optional_datetime(body.get("check_in_time"), on_date=work_date),
                check_out_time=parse_optional_datetime(body.get("check_out_time"), on_date=work_date),
                message=body.get("message"),
                fingerprint=body.get("fingerprint") or "",
                ip=caller_ip(),
            )

        return json_result(capture(_submit, success_message="Đã gửi yêu cầu điều chỉnh!"))

    @app.route("/attendance-requests/me", methods=["GET"], endpoint="attendance_request_mine")
    @login_required
    def mine():
        return json_result(capture(workflow.list_for_employee, current_employee_id()))

    @app.route("/attendance-requests", methods=["GET"], endpoint="attendance_request_list")
    @admin_required
    def list_all():
        def _list():
            return workflow.list_all(
                status=_parse_status(request.args.get("status")),
                employee_id=request.args.get("employee_id", type=int),
            )

        return json_result(capture(_list))

    @app.route("/attendance-requests/<int:request_id>", methods=["GET"], endpoint="attendance_request_get")
    @admin_required
    def get(request_id: int):
        return json_result(capture(workflow.get, request_id))

    @app.route("/attendance-requests/<int:request_id>/accept", methods=["PUT"], endpoint="attendance_request_accept")
    @admin_required
    def accept(request_id: int):
        return json_result(
            capture(
                workflow.accept,
                request_id,
                approver_id=current_employee_id(),
                success_message="Đã duyệt yêu cầu",
            )
        )

    @app.route("/attendance-requests/<int:request_id>/reject", methods=["PUT"], endpoint="attendance_request_reject")
    @admin_required
    def reject(request_id: int):
        return json_result(
            capture(
                workflow.reject,
                request_id,
                approver_id=current_employee_id(),
                success_message="Đã từ chối yêu cầu",
            )
        )
