from __future__ import annotations

import io
import logging

from flask import Flask, request, send_file

from ..common.auth import admin_required, current_employee_id, login_required
from ..common.datetime_utils import parse_optional_datetime
from ..common.responses import json_result
from ..container import Container
from ..core.exceptions import ValidationError
from ..core.result import capture

logger = logging.getLogger(__name__)


def _body() -> dict:
    return request.get_json(silent=True) or {}


def caller_ip() -> str:
    """Server-observed client address (ProxyFix rewrites it when configured)."""

    return request.remote_addr or ""


def _gate_args(body: dict) -> dict:
    ip = caller_ip()
    claimed = (body.get("ip") or "").strip()
    if claimed and claimed != ip:
        logger.info("Client-reported ip %s differs from connection ip %s; ignoring it", claimed, ip)
    return {"fingerprint": body.get("fingerprint") or "", "ip": ip}


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    qr = container.qr_issuer

    @app.route("/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def check_in():
        return json_result(
            capture(
                attendance.check_in,
                current_employee_id(),
                success_message="Chấm công vào ca thành công!",
                **_gate_args(_body()),
            )
        )

    @app.route("/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def check_out():
        return json_result(
            capture(
                attendance.check_out,
                current_employee_id(),
                success_message="Chấm công tan ca thành công!",
                **_gate_args(_body()),
            )
        )

    @app.route("/attendance/scan", methods=["POST"], endpoint="attendance_scan")
    @login_required
    def scan():
        def _scan():
            action, record = attendance.scan(current_employee_id(), **_gate_args(_body()))
            return {"action": action, "record": record}

        return json_result(capture(_scan, success_message="Quét mã QR thành công!"))

    @app.route("/attendance/qr-code", methods=["GET"], endpoint="attendance_qr_code")
    def qr_code():
        return json_result(capture(qr.issue))

    @app.route("/attendance/qr-code.png", methods=["GET"], endpoint="attendance_qr_code_png")
    @admin_required
    def qr_code_png():
        result = capture(qr.png_bytes)
        if not result.success:
            return json_result(result)
        return send_file(
            io.BytesIO(result.value),
            mimetype="image/png",
            as_attachment=True,
            download_name="attendance-qr.png",
        )

    @app.route("/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        return json_result(capture(attendance.get_today_record, current_employee_id()))

    @app.route("/attendance/recent", methods=["GET"], endpoint="attendance_recent")
    @login_required
    def recent():
        days = request.args.get("days", type=int)
        if days is None:
            return json_result(capture(attendance.get_recent, current_employee_id()))
        return json_result(capture(attendance.get_recent, current_employee_id(), days=days))

    @app.route("/attendance/overview", methods=["GET"], endpoint="attendance_overview")
    @admin_required
    def overview():
        return json_result(capture(attendance.get_today_overview))

    @app.route("/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @admin_required
    def stats():
        def _stats():
            month = request.args.get("month", type=int)
            year = request.args.get("year", type=int)
            if month is None or year is None:
                raise ValidationError("Vui lòng chọn tháng và năm")
            return attendance.monthly_stats(month=month, year=year)

        return json_result(capture(_stats))

    @app.route("/attendance/employees/<int:employee_id>", methods=["GET"], endpoint="attendance_for_employee")
    @admin_required
    def for_employee(employee_id: int):
        return json_result(capture(attendance.list_for_employee, employee_id))

    @app.route("/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @admin_required
    def update(attendance_id: int):
        def _update():
            body = _body()
            return attendance.update_record(
                attendance_id,
                check_in_time=parse_optional_datetime(body.get("check_in_time")),
                check_out_time=parse_optional_datetime(body.get("check_out_time")),
                note=body.get("note"),
            )

        return json_result(capture(_update, success_message="Cập nhật chấm công thành công!"))

    @app.route("/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @admin_required
    def delete(attendance_id: int):
        return json_result(capture(attendance.delete_record, attendance_id, success_message="Đã xóa bản ghi chấm công"))

    @app.route("/attendance/bulk-delete", methods=["POST"], endpoint="attendance_bulk_delete")
    @admin_required
    def bulk_delete():
        def _bulk():
            ids = _body().get("ids")
            if not isinstance(ids, list):
                raise ValidationError("Danh sách bản ghi không hợp lệ")
            try:
                return {"deleted": attendance.bulk_delete(int(i) for i in ids)}
            except (TypeError, ValueError):
                raise ValidationError("Danh sách bản ghi không hợp lệ")

        return json_result(capture(_bulk, success_message="Đã xóa các bản ghi đã chọn"))
