from __future__ import annotations

from typing import Optional

from ...common.geo import haversine_meters
from ...core.constants import DEFAULT_GEO_RADIUS_METERS, REASON_GEO_PROXIMITY
from ...core.enums import TrustLevel
from ..model import TrustEvidence, TrustResult
from .base import TrustStrategy


class GeoProximityStrategy(TrustStrategy):
    """Point/radius check against each office's geolocation anchor."""

    def __init__(self, radius_meters: float = DEFAULT_GEO_RADIUS_METERS):
        self._radius = float(radius_meters)

    def assess(self, evidence: TrustEvidence) -> Optional[TrustResult]:
        if evidence.geolocation is None:
            return None

        best = None
        for office in evidence.offices:
            if office.anchor is None:
                continue
            distance = haversine_meters(evidence.geolocation, office.anchor)
            if distance <= self._radius and (best is None or distance < best[0]):
                best = (distance, office)

        if best is None:
            return None
        return TrustResult(TrustLevel.TRUSTED, REASON_GEO_PROXIMITY, best[1].office_id)
