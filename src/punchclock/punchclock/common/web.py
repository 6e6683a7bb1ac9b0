from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from functools import wraps

from flask import Flask, Request, jsonify, session
from werkzeug.middleware.proxy_fix import ProxyFix

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, StateConflictError, TransientError, ValidationError

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str | None:
    """Peer address of the request.

    Forwarding headers are honoured only through ``install_proxy_fix``, which
    rewrites ``remote_addr`` for the configured number of trusted proxy hops.
    """
    return request.remote_addr


def install_proxy_fix(app: Flask, hops: int) -> None:
    """Trust ``X-Forwarded-For`` from exactly ``hops`` reverse proxies; 0 trusts none."""
    hops = int(hops)
    if hops > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.STAFF


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "unauthenticated", "message": "Vui lòng đăng nhập để tiếp tục!"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "unauthenticated", "message": "Vui lòng đăng nhập để tiếp tục!"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "code": "forbidden", "message": "Bạn không có quyền"}), 403
        return view(*args, **kwargs)

    return wrapper


def to_json(value):
    """Serialize domain values (dates, enums, dataclass fields) for jsonify."""
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify({"success": False, "code": e.code, "message": str(e)}), 400

    @app.errorhandler(StateConflictError)
    def _conflict(e: StateConflictError):
        return jsonify({"success": False, "code": e.code, "message": str(e)}), 409

    @app.errorhandler(AuthorizationError)
    def _forbidden(e: AuthorizationError):
        return jsonify({"success": False, "code": "forbidden", "message": str(e)}), 403

    @app.errorhandler(TransientError)
    def _transient(e: TransientError):
        logger.warning("transient failure: %s", e)
        return jsonify({"success": False, "code": "try-again", "message": "Hệ thống đang bận, vui lòng thử lại"}), 503
