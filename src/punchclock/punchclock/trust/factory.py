from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..core.constants import DEFAULT_GEO_RADIUS_METERS
from ..core.enums import TrustPolicy
from .strategies.base import TrustStrategy
from .strategies.geo_strategy import GeoProximityStrategy
from .strategies.loopback_strategy import LoopbackStrategy
from .strategies.network_strategy import NetworkAllowlistStrategy


@dataclass
class TrustStrategyFactory:
    """Factory Pattern: build the ordered strategy chain for a policy."""

    geo_radius_meters: float = DEFAULT_GEO_RADIUS_METERS

    def for_policy(self, policy: TrustPolicy, *, dev_loopback: bool = False) -> Sequence[TrustStrategy]:
        chain: list[TrustStrategy] = []
        if dev_loopback:
            chain.append(LoopbackStrategy())
        chain.append(NetworkAllowlistStrategy())
        if policy == TrustPolicy.IP_OR_GEO:
            chain.append(GeoProximityStrategy(self.geo_radius_meters))
        return tuple(chain)
