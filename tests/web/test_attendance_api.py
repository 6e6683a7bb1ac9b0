from types import SimpleNamespace

import pytest
from flask import Flask

from punchclock.attendance.controller import register
from punchclock.common.web import install_proxy_fix, register_error_handlers
from punchclock.core.exceptions import StoreUnavailable
from punchclock.qr.service import AttendanceQRIssuer

OFFICE_IP = "203.0.113.10"
HOME_IP = "198.51.100.99"


@pytest.fixture
def qr_issuer():
    return AttendanceQRIssuer("test-secret")


def _make_client(attendance_service, qr_issuer, *, proxy_hops=0):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    app.config["TESTING"] = True
    register_error_handlers(app)
    register(app, SimpleNamespace(attendance_service=attendance_service, qr_issuer=qr_issuer))
    install_proxy_fix(app, proxy_hops)
    return app.test_client()


@pytest.fixture
def client(attendance_service, qr_issuer):
    return _make_client(attendance_service, qr_issuer)


def _login(client, user_id=7, role="staff"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_punch_requires_login(client):
    resp = client.post("/api/attendance/punch", json={"type": "check-in"})

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "unauthenticated"


def test_check_in_from_office_peer_is_trusted(client):
    _login(client)

    resp = client.post(
        "/api/attendance/punch",
        json={"type": "check-in", "fingerprint": "fp"},
        environ_base={"REMOTE_ADDR": OFFICE_IP},
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["record"]["state"] == "CHECKED_IN"
    assert body["record"]["check_in"]["trust_reason"] == "network-allowlist"
    assert client.get("/api/attendance/today").get_json()["state"] == "CHECKED_IN"


@pytest.mark.parametrize("header", ["X-Real-IP", "X-Forwarded-For"])
def test_spoofed_forwarding_header_is_ignored_without_proxy(client, header):
    _login(client)

    resp = client.post(
        "/api/attendance/punch",
        json={"type": "check-in"},
        headers={header: OFFICE_IP},
        environ_base={"REMOTE_ADDR": HOME_IP},
    )

    check_in = resp.get_json()["record"]["check_in"]
    assert check_in["network_address"] == HOME_IP
    assert check_in["trust"] == "UNTRUSTED"


def test_forwarded_address_is_used_behind_trusted_proxy(attendance_service, qr_issuer):
    client = _make_client(attendance_service, qr_issuer, proxy_hops=1)
    _login(client)

    resp = client.post(
        "/api/attendance/punch",
        json={"type": "check-in"},
        headers={"X-Forwarded-For": f"10.9.9.9, {OFFICE_IP}"},
        environ_base={"REMOTE_ADDR": "10.0.0.2"},
    )

    check_in = resp.get_json()["record"]["check_in"]
    assert check_in["network_address"] == OFFICE_IP
    assert check_in["trust"] == "TRUSTED"

def test_state_conflict_maps_to_409(client):
    _login(client)

    resp = client.post("/api/attendance/punch", json={"type": "check-out"}, environ_base={"REMOTE_ADDR": OFFICE_IP})

    assert resp.status_code == 409
    assert resp.get_json()["code"] == "not-checked-in-yet"


def test_invalid_qr_token_maps_to_400(client):
    _login(client)

    resp = client.post("/api/attendance/punch", json={"type": "check-in", "qr_token": "bogus"})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid-qr-token"


def test_valid_qr_token_is_accepted(client, qr_issuer):
    _login(client)

    resp = client.post(
        "/api/attendance/punch",
        json={"type": "check-in", "qr_token": qr_issuer.issue().token},
        environ_base={"REMOTE_ADDR": OFFICE_IP},
    )

    assert resp.status_code == 200


def test_store_failure_maps_to_503(client, attendance_repo, monkeypatch):
    def down(*args, **kwargs):
        raise StoreUnavailable("db timeout")

    monkeypatch.setattr(attendance_repo, "get_for_user_and_date", down)
    _login(client)

    resp = client.post("/api/attendance/punch", json={"type": "check-in"}, environ_base={"REMOTE_ADDR": OFFICE_IP})

    assert resp.status_code == 503
    assert resp.get_json()["code"] == "try-again"
