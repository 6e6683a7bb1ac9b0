from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import client_ip, current_user_id, login_required, to_json
from ..container import Container
from ..core.enums import PunchType
from .model import AttendanceRecord, CorrectedPunch, OriginalPunch


def punch_to_dict(punch) -> dict | None:
    if punch is None:
        return None
    data = {"at": to_json(punch.at), "source": punch.source.value}
    if isinstance(punch, OriginalPunch):
        data.update(
            {
                "network_address": punch.network_address,
                "trust": punch.trust.level.value,
                "trust_reason": punch.trust.reason,
            }
        )
    elif isinstance(punch, CorrectedPunch):
        data["request_id"] = punch.request_id
    return data


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "user_id": r.user_id,
        "work_date": to_json(r.work_date),
        "state": r.state.value,
        "check_in": punch_to_dict(r.check_in),
        "check_out": punch_to_dict(r.check_out),
        "flagged": r.flagged,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/punch", methods=["POST"], endpoint="api_punch")
    @login_required
    def api_punch():
        """Check-in / check-out with network, geolocation and fingerprint evidence."""
        data = request.get_json(silent=True) or request.form

        qr_token = (data.get("qr_token") or "").strip()
        if qr_token:
            container.qr_issuer.require_valid(qr_token)

        record = container.attendance_service.submit_punch(
            user_id=current_user_id(),
            punch_type=(data.get("type") or PunchType.CHECK_IN.value),
            fingerprint=data.get("fingerprint"),
            network_address=client_ip(request) or "",
            longitude=data.get("longitude"),
            latitude=data.get("latitude"),
        )

        checked_out = record.check_out is not None
        return jsonify(
            {
                "success": True,
                "message": "Kết thúc ca làm việc thành công!" if checked_out else "Điểm danh thành công!",
                "record": record_to_dict(record),
            }
        ), 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_today_status")
    @login_required
    def api_today_status():
        state, record = container.attendance_service.today_status(current_user_id())
        return jsonify({"state": state.value, "record": record_to_dict(record) if record else None})
