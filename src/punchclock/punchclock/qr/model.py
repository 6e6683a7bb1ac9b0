from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class QRIssuance:
    """Ephemeral check-in QR: opaque token plus the URL it points to.

    Carries no employee identity; the employee is resolved from the session
    when the punch is submitted.
    """

    token: str
    attendance_url: str
    qr_image: str
    issued_at: datetime
    expires_at: datetime
