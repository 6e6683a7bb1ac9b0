from __future__ import annotations

import base64
import io

from flask import Flask, jsonify, request, send_file
from PIL import Image, UnidentifiedImageError
from pyzbar.pyzbar import decode as pyzbar_decode

from ..common.web import admin_required, login_required, to_json
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/qr", methods=["GET"], endpoint="api_qr")
    @admin_required
    def api_qr():
        """Fresh check-in QR for the office screen; safe to call on a refresh timer."""
        issuance = container.qr_issuer.issue()
        return jsonify(
            {
                "qrCode": issuance.qr_image,
                "attendanceUrl": issuance.attendance_url,
                "expiresAt": to_json(issuance.expires_at),
            }
        )

    @app.route("/api/qr/image", methods=["GET"], endpoint="api_qr_image")
    @admin_required
    def api_qr_image():
        issuance = container.qr_issuer.issue()
        png = base64.b64decode(issuance.qr_image.split(",", 1)[1])
        response = send_file(io.BytesIO(png), mimetype="image/png")
        response.headers["Cache-Control"] = "no-store"
        return response

    @app.route("/api/qr/decode", methods=["POST"], endpoint="api_qr_decode")
    @login_required
    def api_qr_decode():
        """Accept a photo of the office QR, decode it and validate the token."""
        if "image" not in request.files:
            raise ValidationError("Thiếu file ảnh", code="image-required")

        try:
            img = Image.open(request.files["image"].stream).convert("RGB")
        except UnidentifiedImageError:
            raise ValidationError("File ảnh không hợp lệ", code="invalid-image")

        decoded = pyzbar_decode(img)
        if not decoded:
            raise ValidationError("Không phát hiện mã QR trong ảnh", code="qr-not-found")

        scanned = decoded[0].data.decode("utf-8").strip()
        token = container.qr_issuer.token_from_scan(scanned)
        container.qr_issuer.require_valid(token)
        return jsonify({"success": True, "qr_token": token})
