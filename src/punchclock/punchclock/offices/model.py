from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.geo import Geolocation


@dataclass(frozen=True)
class OfficeNetwork:
    """Một địa điểm làm việc được quản trị viên đăng ký là tin cậy."""

    office_id: int
    office_name: str
    ip_address: str
    anchor: Optional[Geolocation] = None
    created_at: Optional[datetime] = None
