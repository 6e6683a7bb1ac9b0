from __future__ import annotations

from typing import Optional

from ...core.constants import LOOPBACK_ADDRESSES, REASON_LOOPBACK_DEV
from ...core.enums import TrustLevel
from ..model import TrustEvidence, TrustResult
from .base import TrustStrategy


class LoopbackStrategy(TrustStrategy):
    """Development only: requests from the local machine are trusted."""

    def assess(self, evidence: TrustEvidence) -> Optional[TrustResult]:
        if evidence.network_address in LOOPBACK_ADDRESSES:
            return TrustResult(TrustLevel.TRUSTED, REASON_LOOPBACK_DEV)
        return None
