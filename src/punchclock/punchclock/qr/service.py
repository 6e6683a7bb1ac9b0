from __future__ import annotations

import base64
import io
import logging
import secrets
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import qrcode
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_ATTENDANCE_URL, DEFAULT_QR_TTL_SECONDS
from ..core.exceptions import InvalidQRToken
from .model import QRIssuance

logger = logging.getLogger(__name__)

_SALT = "punchclock.attendance-qr"


def render_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def _with_token(url: str, token: str) -> str:
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != "t"] + [("t", token)]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


class AttendanceQRIssuer:
    """Issue time-scoped QR codes that lead to the check-in screen.

    Tokens are signed with the application secret, so verification needs no
    stored state and survives a restart; a restart with a new secret simply
    invalidates outstanding codes.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        attendance_url: str = DEFAULT_ATTENDANCE_URL,
        ttl_seconds: int = DEFAULT_QR_TTL_SECONDS,
    ):
        if not secret_key:
            raise ValueError("secret_key is required")
        self._serializer = URLSafeTimedSerializer(secret_key, salt=_SALT)
        self._attendance_url = attendance_url
        self._ttl = int(ttl_seconds)

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def issue(self) -> QRIssuance:
        issued_at = datetime.now(timezone.utc)
        token = self._serializer.dumps({"n": secrets.token_urlsafe(8)})
        url = _with_token(self._attendance_url, token)
        png = render_qr_png(url)

        return QRIssuance(
            token=token,
            attendance_url=url,
            qr_image="data:image/png;base64," + base64.b64encode(png).decode("ascii"),
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self._ttl),
        )

    def verify(self, token: str) -> bool:
        try:
            self._serializer.loads((token or "").strip(), max_age=self._ttl)
        except SignatureExpired:
            logger.info("expired attendance QR token presented")
            return False
        except BadSignature:
            return False
        return True

    def require_valid(self, token: str) -> None:
        if not self.verify(token):
            raise InvalidQRToken()

    @staticmethod
    def token_from_scan(scanned: str) -> str:
        """Accept either a bare token or the full attendance URL from a scan."""
        text = (scanned or "").strip()
        parts = urlsplit(text)
        if parts.scheme and parts.query:
            for k, v in parse_qsl(parts.query):
                if k == "t":
                    return v
        return text
