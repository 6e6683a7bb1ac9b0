from __future__ import annotations

import logging
from typing import Any, Sequence

from ..common.validators import require_geolocation, require_ip, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DuplicateRecord, ValidationError
from .model import OfficeNetwork
from .repository import OfficeNetworkRepository

logger = logging.getLogger(__name__)


class OfficeNetworkService:
    """Admin-facing management of the trusted office registry."""

    def __init__(self, offices: OfficeNetworkRepository):
        self._offices = offices

    def register(
        self,
        *,
        current_role: Role,
        office_name: str,
        ip_address: str,
        latitude: Any = None,
        longitude: Any = None,
    ) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Bạn không có quyền")

        name = require_non_empty(office_name, "Tên văn phòng")
        ip = require_ip(ip_address)
        anchor = require_geolocation(longitude, latitude)

        try:
            office_id = self._offices.create(office_name=name, ip_address=ip, anchor=anchor)
        except DuplicateRecord:
            raise ValidationError("Địa chỉ IP này đã được đăng ký", code="duplicate-office-ip")

        logger.info("office network registered: id=%s name=%r ip=%s", office_id, name, ip)
        return office_id

    def remove(self, *, current_role: Role, office_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Bạn không có quyền")
        if not self._offices.delete_by_id(int(office_id)):
            raise ValidationError("Văn phòng không tồn tại", code="office-not-found")
        logger.info("office network removed: id=%s", office_id)

    def list_offices(self) -> Sequence[OfficeNetwork]:
        return self._offices.list_all()
