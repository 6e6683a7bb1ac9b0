from __future__ import annotations

from typing import Optional

from ...core.constants import REASON_NETWORK_ALLOWLIST
from ...core.enums import TrustLevel
from ..model import TrustEvidence, TrustResult
from .base import TrustStrategy


class NetworkAllowlistStrategy(TrustStrategy):
    """Exact match of the client address against registered office IPs."""

    def assess(self, evidence: TrustEvidence) -> Optional[TrustResult]:
        if not evidence.network_address:
            return None
        for office in evidence.offices:
            if office.ip_address == evidence.network_address:
                return TrustResult(TrustLevel.TRUSTED, REASON_NETWORK_ALLOWLIST, office.office_id)
        return None
