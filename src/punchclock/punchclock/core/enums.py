from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    ADMIN = "admin"
    STAFF = "staff"


class PunchType(str, Enum):
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"


class PunchState(str, Enum):
    """Trạng thái chấm công của một nhân viên trong một ngày."""

    NO_PUNCH = "NO_PUNCH"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"


class TrustLevel(str, Enum):
    TRUSTED = "TRUSTED"
    UNTRUSTED = "UNTRUSTED"


class TrustPolicy(str, Enum):
    """Which evidence may establish trust for a punch."""

    IP_ONLY = "IP_ONLY"
    IP_OR_GEO = "IP_OR_GEO"


class EnforcementMode(str, Enum):
    """What happens to an Untrusted punch.

    AUDIT_ONLY records it and flags it for review, STRICT rejects it.
    """

    AUDIT_ONLY = "AUDIT_ONLY"
    STRICT = "STRICT"


class PunchSource(str, Enum):
    ORIGINAL = "ORIGINAL"
    CORRECTED = "CORRECTED"


class CorrectionStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu điều chỉnh chấm công."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
