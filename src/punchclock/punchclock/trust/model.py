from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.geo import Geolocation
from ..core.enums import TrustLevel
from ..offices.model import OfficeNetwork


@dataclass(frozen=True)
class TrustResult:
    level: TrustLevel
    reason: str
    office_id: Optional[int] = None

    @property
    def trusted(self) -> bool:
        return self.level == TrustLevel.TRUSTED


@dataclass(frozen=True)
class TrustEvidence:
    """What a strategy sees: the request's signals plus one registry snapshot."""

    network_address: Optional[str]
    geolocation: Optional[Geolocation]
    offices: Sequence[OfficeNetwork]
