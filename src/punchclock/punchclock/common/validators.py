from __future__ import annotations

import ipaddress
import math
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .geo import Geolocation


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} không hợp lệ", code="required")
    return value.strip()


def normalize_ip(value: str) -> Optional[str]:
    """Canonical text form of an IP address, or None when it does not parse."""
    try:
        return str(ipaddress.ip_address((value or "").strip()))
    except ValueError:
        return None


def require_ip(value: str) -> str:
    ip = normalize_ip(value)
    if ip is None:
        raise ValidationError("Địa chỉ IP không hợp lệ", code="invalid-ip")
    return ip


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def parse_geolocation(longitude: Any, latitude: Any) -> Optional[Geolocation]:
    """Return a Geolocation, or None when the reading is missing or invalid.

    An invalid reading is absent evidence, not an error.
    """
    lon = _as_float(longitude)
    lat = _as_float(latitude)
    if lon is None or lat is None:
        return None
    if not -180.0 <= lon <= 180.0 or not -90.0 <= lat <= 90.0:
        return None
    return Geolocation(longitude=lon, latitude=lat)


def require_geolocation(longitude: Any, latitude: Any) -> Optional[Geolocation]:
    """Strict variant for admin input: both blank is fine, anything else must be valid."""
    if _is_blank(longitude) and _is_blank(latitude):
        return None
    geo = parse_geolocation(longitude, latitude)
    if geo is None:
        raise ValidationError("Toạ độ không hợp lệ", code="invalid-geolocation")
    return geo
