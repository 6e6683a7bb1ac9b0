from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone

import pytest

from punchclock.attendance.service import AttendanceService
from punchclock.common.geo import Geolocation
from punchclock.core.enums import EnforcementMode, PunchState, PunchType, TrustLevel
from punchclock.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    NotCheckedInYet,
    UntrustedPunch,
    ValidationError,
)
from punchclock.reports.service import work_hours
from punchclock.trust.service import TrustEvaluator

OFFICE_IP = "203.0.113.10"
HOME_IP = "198.51.100.7"
DAY = date(2026, 3, 9)


def _punch(service, punch_type, at, *, user_id=7, ip=OFFICE_IP, **kwargs):
    return service.submit_punch(
        user_id=user_id,
        punch_type=punch_type,
        fingerprint="fp-abc",
        network_address=ip,
        now=at,
        **kwargs,
    )


def test_full_day_from_office_network(attendance_service):
    rec_in = _punch(attendance_service, "check-in", datetime(2026, 3, 9, 8, 58))
    assert rec_in.state == PunchState.CHECKED_IN
    assert rec_in.check_in.trust.reason == "network-allowlist"

    rec_out = _punch(attendance_service, "check-out", datetime(2026, 3, 9, 17, 31))

    assert rec_out.state == PunchState.CHECKED_OUT
    assert rec_out.attendance_id == rec_in.attendance_id
    assert work_hours(rec_out) == timedelta(hours=8, minutes=33)
    assert not rec_out.flagged


def test_second_check_in_same_day_is_rejected(attendance_service, attendance_repo):
    _punch(attendance_service, "check-in", datetime(2026, 3, 9, 8, 58))

    with pytest.raises(AlreadyCheckedIn):
        _punch(attendance_service, "check-in", datetime(2026, 3, 9, 9, 5))

    assert len(attendance_repo.all()) == 1
    assert attendance_repo.all()[0].check_in_time == datetime(2026, 3, 9, 8, 58)


def test_check_out_without_check_in_creates_nothing(attendance_service, attendance_repo):
    with pytest.raises(NotCheckedInYet):
        _punch(attendance_service, "check-out", datetime(2026, 3, 9, 17, 0))

    assert attendance_repo.all() == []


def test_second_check_out_is_rejected(attendance_service, attendance_repo):
    _punch(attendance_service, "check-in", datetime(2026, 3, 9, 8, 0))
    _punch(attendance_service, "check-out", datetime(2026, 3, 9, 17, 0))

    with pytest.raises(AlreadyCheckedOut):
        _punch(attendance_service, "check-out", datetime(2026, 3, 9, 18, 0))

    assert attendance_repo.all()[0].check_out_time == datetime(2026, 3, 9, 17, 0)


def test_new_day_starts_from_no_punch(attendance_service):
    _punch(attendance_service, "check-in", datetime(2026, 3, 9, 8, 0))

    state, record = attendance_service.today_status(7, now=datetime(2026, 3, 10, 7, 0))

    assert state == PunchState.NO_PUNCH
    assert record is None


def test_work_date_comes_from_organization_time_zone(attendance_service):
    # 01:58 UTC is 08:58 in Ho Chi Minh City; 23:30 UTC the day before is 06:30 local.
    rec = _punch(attendance_service, "check-in", datetime(2026, 3, 8, 23, 30, tzinfo=timezone.utc))

    assert rec.work_date == DAY
    assert rec.check_in_time == datetime(2026, 3, 9, 6, 30)


def test_concurrent_check_ins_produce_exactly_one_record(attendance_service, attendance_repo):
    at = datetime(2026, 3, 9, 8, 0)

    def attempt(_):
        try:
            _punch(attendance_service, "check-in", at)
            return "ok"
        except AlreadyCheckedIn:
            return "conflict"

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(16)))

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 15
    assert len(attendance_repo.all()) == 1


def test_concurrent_check_outs_produce_exactly_one_success(attendance_service, attendance_repo):
    _punch(attendance_service, "check-in", datetime(2026, 3, 9, 8, 0))

    def attempt(minute):
        try:
            _punch(attendance_service, "check-out", datetime(2026, 3, 9, 17, minute))
            return "ok"
        except AlreadyCheckedOut:
            return "conflict"

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(12)))

    assert outcomes.count("ok") == 1
    assert attendance_repo.all()[0].state == PunchState.CHECKED_OUT


def test_untrusted_punch_is_recorded_and_flagged_in_audit_mode(attendance_service):
    rec = _punch(attendance_service, "check-in", datetime(2026, 3, 9, 8, 0), ip=HOME_IP)

    assert rec.check_in.trust.level == TrustLevel.UNTRUSTED
    assert rec.check_in.trust.reason == "no-match"
    assert rec.flagged


def test_untrusted_punch_is_refused_in_strict_mode(attendance_repo, trust_evaluator):
    service = AttendanceService(attendance_repo, trust_evaluator, enforcement=EnforcementMode.STRICT)

    with pytest.raises(UntrustedPunch) as exc:
        _punch(service, "check-in", datetime(2026, 3, 9, 8, 0), ip=HOME_IP)

    assert exc.value.code == "untrusted-punch"
    assert attendance_repo.all() == []


def test_geolocation_near_office_is_trusted(attendance_repo, office_repo):
    office_repo.create(office_name="Site", ip_address="192.0.2.1", anchor=Geolocation(106.7009, 10.7769))
    service = AttendanceService(attendance_repo, TrustEvaluator(office_repo))

    rec = _punch(service, "check-in", datetime(2026, 3, 9, 8, 0), ip=HOME_IP, longitude="106.7010", latitude="10.7770")

    assert rec.check_in.trust.reason == "geo-proximity"
    assert rec.check_in.geolocation.latitude == pytest.approx(10.7770)


def test_recorded_punches_are_published(attendance_service):
    events = []
    attendance_service.subscribe(events.append)

    _punch(attendance_service, "check-in", datetime(2026, 3, 9, 8, 0))
    _punch(attendance_service, "check-out", datetime(2026, 3, 9, 17, 0))

    assert [e.punch_type for e in events] == [PunchType.CHECK_IN, PunchType.CHECK_OUT]
    assert events[0].work_date == DAY


def test_failing_subscriber_does_not_undo_the_punch(attendance_service, attendance_repo):
    def broken(event):
        raise RuntimeError("boom")

    attendance_service.subscribe(broken)
    _punch(attendance_service, "check-in", datetime(2026, 3, 9, 8, 0))

    assert len(attendance_repo.all()) == 1


@pytest.mark.parametrize(
    "kwargs,code",
    [
        ({"user_id": 0}, "invalid-identity"),
        ({"punch_type": "lunch"}, "invalid-punch-type"),
        ({"ip": "not-an-ip"}, "invalid-ip"),
        ({"fingerprint": "x" * 256}, "invalid-fingerprint"),
    ],
)
def test_submit_punch_validation_codes(attendance_service, attendance_repo, kwargs, code):
    params = {
        "user_id": 7,
        "punch_type": "check-in",
        "fingerprint": "fp",
        "network_address": kwargs.pop("ip", OFFICE_IP),
        "now": datetime(2026, 3, 9, 8, 0),
    }
    params.update(kwargs)

    with pytest.raises(ValidationError) as exc:
        attendance_service.submit_punch(**params)

    assert exc.value.code == code
    assert attendance_repo.all() == []
