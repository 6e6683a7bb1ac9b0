from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.geo import Geolocation
from .model import OfficeNetwork


class OfficeNetworkRepository(Protocol):
    """Registry of trusted office networks.

    Implementations raise ``RegistryUnavailable`` on I/O failure or timeout.
    """

    def list_all(self) -> Sequence[OfficeNetwork]:
        raise NotImplementedError

    def create(self, *, office_name: str, ip_address: str, anchor: Optional[Geolocation] = None) -> int:
        """Raises ``DuplicateRecord`` when the address is already registered."""

        raise NotImplementedError

    def delete_by_id(self, office_id: int) -> bool:
        raise NotImplementedError
