from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, request, session

from ..common.auth import current_employee_id, login_required
from ..common.responses import json_result
from ..container import Container
from ..core.result import Ok, capture

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = request.get_json(silent=True) or {}
        result = capture(
            container.auth_service.authenticate,
            body.get("username", ""),
            body.get("password", ""),
            success_message="Đăng nhập thành công!",
        )
        if isinstance(result, Ok):
            s_user = result.value
            session.clear()
            session.permanent = bool(body.get("remember_me"))
            app.permanent_session_lifetime = timedelta(days=7)

            session["employee_id"] = s_user.employee_id
            session["name"] = s_user.full_name
            session["role"] = s_user.role.value
            logger.info("Employee %s logged in", s_user.employee_id)
        return json_result(result)

    @app.route("/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return json_result(Ok(None, "Đã đăng xuất hệ thống."))

    @app.route("/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        def _me():
            employee = container.employee_directory.get(current_employee_id())
            return {
                "employee_id": employee.employee_id,
                "full_name": employee.full_name,
                "username": employee.username,
                "role": employee.role,
                "department": employee.department,
            }

        return json_result(capture(_me))
