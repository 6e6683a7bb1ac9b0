from __future__ import annotations

from dataclasses import asdict

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, current_role, current_user_id, login_required, to_json
from ..container import Container
from .model import CorrectionRequest


def correction_to_dict(req: CorrectionRequest) -> dict:
    data = {k: to_json(v) for k, v in asdict(req).items()}
    data["claimed_check_in"] = req.claimed_check_in.strftime("%H:%M") if req.claimed_check_in else None
    data["claimed_check_out"] = req.claimed_check_out.strftime("%H:%M") if req.claimed_check_out else None
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/corrections", methods=["GET"], endpoint="api_my_corrections")
    @login_required
    def api_my_corrections():
        items = container.correction_service.list_mine(user_id=current_user_id())
        return jsonify([correction_to_dict(r) for r in items])

    @app.route("/api/corrections", methods=["POST"], endpoint="api_submit_correction")
    @login_required
    def api_submit_correction():
        data = request.get_json(silent=True) or request.form
        request_id = container.correction_service.submit(
            user_id=current_user_id(),
            work_date=parse_iso_date(data.get("work_date") or ""),
            claimed_check_in=data.get("claimed_check_in"),
            claimed_check_out=data.get("claimed_check_out"),
            message=data.get("message") or "",
        )
        return jsonify({"success": True, "request_id": request_id, "message": "Đã gửi yêu cầu"}), 201

    @app.route("/api/corrections/pending", methods=["GET"], endpoint="api_pending_corrections")
    @admin_required
    def api_pending_corrections():
        items = container.correction_service.list_pending(current_role=current_role())
        return jsonify([correction_to_dict(r) for r in items])

    @app.route("/api/corrections/<int:request_id>/accept", methods=["POST"], endpoint="api_accept_correction")
    @admin_required
    def api_accept_correction(request_id: int):
        data = request.get_json(silent=True) or request.form
        req = container.correction_service.accept(
            current_role=current_role(),
            reviewer_id=current_user_id(),
            request_id=request_id,
            admin_note=data.get("admin_note", ""),
        )
        return jsonify({"success": True, "request": correction_to_dict(req)})

    @app.route("/api/corrections/<int:request_id>/reject", methods=["POST"], endpoint="api_reject_correction")
    @admin_required
    def api_reject_correction(request_id: int):
        data = request.get_json(silent=True) or request.form
        req = container.correction_service.reject(
            current_role=current_role(),
            reviewer_id=current_user_id(),
            request_id=request_id,
            admin_note=data.get("admin_note", ""),
        )
        return jsonify({"success": True, "request": correction_to_dict(req)})

    @app.route("/api/attendance/records/<int:attendance_id>/amendments", methods=["GET"], endpoint="api_amendments")
    @admin_required
    def api_amendments(attendance_id: int):
        items = container.correction_service.amendments_for(attendance_id=attendance_id)
        return jsonify([{k: to_json(v) for k, v in asdict(a).items()} for a in items])
