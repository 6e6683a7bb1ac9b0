from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, client_ip, current_role, to_json
from ..container import Container
from .model import OfficeNetwork


def office_to_dict(o: OfficeNetwork) -> dict:
    return {
        "office_id": o.office_id,
        "office_name": o.office_name,
        "ip_address": o.ip_address,
        "latitude": o.anchor.latitude if o.anchor else None,
        "longitude": o.anchor.longitude if o.anchor else None,
        "created_at": to_json(o.created_at),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/offices", methods=["GET"], endpoint="api_offices")
    @admin_required
    def api_offices():
        return jsonify([office_to_dict(o) for o in container.office_service.list_offices()])

    @app.route("/api/offices", methods=["POST"], endpoint="api_register_office")
    @admin_required
    def api_register_office():
        """Register an office network; without an explicit address, the caller's own IP is used."""
        data = request.get_json(silent=True) or request.form
        office_id = container.office_service.register(
            current_role=current_role(),
            office_name=data.get("officeName") or data.get("office_name") or "",
            ip_address=data.get("ipAddress") or data.get("ip_address") or client_ip(request) or "",
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )
        return jsonify({"success": True, "office_id": office_id, "message": "Thêm địa chỉ IP thành công"}), 201

    @app.route("/api/offices/<int:office_id>", methods=["DELETE"], endpoint="api_delete_office")
    @admin_required
    def api_delete_office(office_id: int):
        container.office_service.remove(current_role=current_role(), office_id=office_id)
        return jsonify({"success": True})
