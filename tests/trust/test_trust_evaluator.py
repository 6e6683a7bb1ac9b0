import math

import pytest

from punchclock.common.geo import Geolocation, haversine_meters
from punchclock.core.enums import TrustLevel, TrustPolicy
from punchclock.core.exceptions import RegistryUnavailable
from punchclock.offices.model import OfficeNetwork
from punchclock.trust.service import TrustEvaluator

HQ_ANCHOR = Geolocation(longitude=106.7009, latitude=10.7769)


class FakeOffices:
    def __init__(self, offices):
        self._offices = list(offices)
        self.calls = 0

    def list_all(self):
        self.calls += 1
        return list(self._offices)


class BrokenOffices:
    def list_all(self):
        raise RegistryUnavailable("registry down")


def _offices():
    return FakeOffices(
        [
            OfficeNetwork(office_id=1, office_name="HQ", ip_address="203.0.113.10", anchor=HQ_ANCHOR),
            OfficeNetwork(office_id=2, office_name="Branch", ip_address="2001:db8::1"),
        ]
    )


def test_registered_ip_is_trusted_by_allowlist():
    result = TrustEvaluator(_offices()).evaluate("203.0.113.10")

    assert result.level == TrustLevel.TRUSTED
    assert result.reason == "network-allowlist"
    assert result.office_id == 1


def test_ipv6_address_is_normalized_before_matching():
    result = TrustEvaluator(_offices()).evaluate("2001:0db8:0000::0001")

    assert result.trusted
    assert result.office_id == 2


def test_nearby_geolocation_is_trusted_when_ip_unknown():
    nearby = Geolocation(longitude=106.7010, latitude=10.7770)
    assert haversine_meters(nearby, HQ_ANCHOR) < 200

    result = TrustEvaluator(_offices()).evaluate("198.51.100.7", nearby)

    assert result.level == TrustLevel.TRUSTED
    assert result.reason == "geo-proximity"
    assert result.office_id == 1


def test_far_geolocation_and_unknown_ip_is_untrusted():
    far = Geolocation(longitude=105.8342, latitude=21.0278)

    result = TrustEvaluator(_offices()).evaluate("198.51.100.7", far)

    assert result.level == TrustLevel.UNTRUSTED
    assert result.reason == "no-match"


def test_ip_only_policy_never_consults_geolocation():
    nearby = Geolocation(longitude=106.7010, latitude=10.7770)

    result = TrustEvaluator(_offices(), policy=TrustPolicy.IP_ONLY).evaluate("198.51.100.7", nearby)

    assert result.level == TrustLevel.UNTRUSTED


@pytest.mark.parametrize("address", ["", "not-an-ip", "999.1.1.1", None])
def test_malformed_address_is_untrusted_not_an_error(address):
    result = TrustEvaluator(_offices()).evaluate(address)

    assert result.level == TrustLevel.UNTRUSTED
    assert result.reason == "no-match"


def test_loopback_only_trusted_in_dev_mode():
    assert not TrustEvaluator(_offices()).evaluate("127.0.0.1").trusted

    result = TrustEvaluator(_offices(), dev_loopback=True).evaluate("::1")
    assert result.trusted
    assert result.reason == "loopback-dev"


def test_evaluation_reads_registry_once_and_is_deterministic():
    offices = _offices()
    evaluator = TrustEvaluator(offices)

    first = evaluator.evaluate("198.51.100.7", HQ_ANCHOR)
    second = evaluator.evaluate("198.51.100.7", HQ_ANCHOR)

    assert first == second
    assert offices.calls == 2


def test_registry_failure_propagates():
    with pytest.raises(RegistryUnavailable):
        TrustEvaluator(BrokenOffices()).evaluate("203.0.113.10")


def test_near_antipodal_reading_is_untrusted_not_an_error():
    offices = FakeOffices(
        [OfficeNetwork(office_id=3, office_name="Far", ip_address="192.0.2.50", anchor=Geolocation(5.23, -44.53))]
    )
    reading = Geolocation(longitude=-174.77, latitude=44.53)

    result = TrustEvaluator(offices).evaluate("198.51.100.7", reading)

    assert result.level == TrustLevel.UNTRUSTED
    assert haversine_meters(reading, Geolocation(5.23, -44.53)) == pytest.approx(math.pi * 6_371_000, rel=1e-3)
