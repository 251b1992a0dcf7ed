from __future__ import annotations

from flask import Flask, request

from ..common.auth import admin_required
from ..common.responses import json_result
from ..container import Container
from ..core.result import capture


def register(app: Flask, container: Container) -> None:
    registry = container.network_registry

    @app.route("/office-ip", methods=["GET"], endpoint="office_ip_list")
    @admin_required
    def list_networks():
        return json_result(capture(registry.list_all))

    @app.route("/office-ip", methods=["POST"], endpoint="office_ip_create")
    @admin_required
    def create_network():
        body = request.get_json(silent=True) or {}
        return json_result(
            capture(
                registry.create,
                office_name=body.get("office_name") or "",
                ip_address=body.get("ip_address") or "",
                enabled=bool(body.get("enabled", True)),
                success_message="Thêm địa chỉ IP thành công!",
            )
        )

    @app.route("/office-ip/<int:network_id>", methods=["PUT"], endpoint="office_ip_update")
    @admin_required
    def update_network(network_id: int):
        body = request.get_json(silent=True) or {}
        return json_result(
            capture(
                registry.update,
                network_id,
                office_name=body.get("office_name"),
                ip_address=body.get("ip_address"),
                enabled=body.get("enabled"),
                success_message="Cập nhật địa chỉ IP thành công!",
            )
        )

    @app.route("/office-ip/<int:network_id>", methods=["DELETE"], endpoint="office_ip_delete")
    @admin_required
    def delete_network(network_id: int):
        return json_result(capture(registry.delete, network_id, success_message="Đã xóa địa chỉ IP"))
