from __future__ import annotations

import logging
from typing import Optional

from ..common.geo import Geolocation
from ..common.validators import normalize_ip
from ..core.constants import REASON_NO_MATCH
from ..core.enums import TrustLevel, TrustPolicy
from ..offices.repository import OfficeNetworkRepository
from .factory import TrustStrategyFactory
from .model import TrustEvidence, TrustResult

logger = logging.getLogger(__name__)


class TrustEvaluator:
    """Decide whether a punch comes from an authorized workplace.

    Pure with respect to one registry snapshot: the registry is read once per
    call and the same (address, geolocation) against the same snapshot always
    yields the same result. Malformed input is Untrusted, never an error;
    registry failures propagate as ``RegistryUnavailable``.
    """

    def __init__(
        self,
        offices: OfficeNetworkRepository,
        *,
        policy: TrustPolicy = TrustPolicy.IP_OR_GEO,
        dev_loopback: bool = False,
        strategy_factory: TrustStrategyFactory | None = None,
    ):
        self._offices = offices
        self._policy = policy
        self._strategies = (strategy_factory or TrustStrategyFactory()).for_policy(policy, dev_loopback=dev_loopback)

    @property
    def policy(self) -> TrustPolicy:
        return self._policy

    def evaluate(self, network_address: str | None, geolocation: Optional[Geolocation] = None) -> TrustResult:
        evidence = TrustEvidence(
            network_address=normalize_ip(network_address or ""),
            geolocation=geolocation,
            offices=tuple(self._offices.list_all()),
        )

        for strategy in self._strategies:
            result = strategy.assess(evidence)
            if result is not None:
                return result

        logger.debug("no trust match for ip=%s geo=%s", network_address, geolocation)
        return TrustResult(TrustLevel.UNTRUSTED, REASON_NO_MATCH)
