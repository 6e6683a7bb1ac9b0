from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import now_local, to_org_local
from ..common.validators import normalize_ip, parse_geolocation
from ..core.constants import DEFAULT_ORG_TIMEZONE
from ..core.enums import EnforcementMode, PunchState, PunchType
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    DuplicateRecord,
    NotCheckedInYet,
    UntrustedPunch,
    ValidationError,
)
from ..trust.service import TrustEvaluator
from .events import PunchSubscriber
from .model import AttendanceRecord, OriginalPunch, PunchEvidence, PunchRecorded
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

MAX_FINGERPRINT_LENGTH = 255


class AttendanceService:
    """Per (employee, day) state machine: NO_PUNCH -> CHECKED_IN -> CHECKED_OUT.

    The work date always comes from the server clock in the organization's
    time zone, never from the client. Uniqueness and the check-out
    compare-and-set are enforced by the store, so concurrent duplicates
    resolve to exactly one success.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        trust: TrustEvaluator,
        *,
        timezone: str = DEFAULT_ORG_TIMEZONE,
        enforcement: EnforcementMode = EnforcementMode.AUDIT_ONLY,
    ):
        self._attendance = attendance
        self._trust = trust
        self._tz = ZoneInfo(timezone)
        self._enforcement = enforcement
        self._subscribers: list[PunchSubscriber] = []

    # Observer Pattern: outbound audit events.
    def subscribe(self, subscriber: PunchSubscriber) -> None:
        self._subscribers.append(subscriber)

    def _publish(self, event: PunchRecorded) -> None:
        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception:
                logger.exception("punch subscriber %r failed", subscriber)

    def _now(self, now: datetime | None) -> datetime:
        return to_org_local(now, self._tz) if now is not None else now_local(self._tz)

    def _enforce(self, evidence: PunchEvidence) -> None:
        if self._enforcement == EnforcementMode.STRICT and not evidence.trust.trusted:
            raise UntrustedPunch()

    def submit_punch(
        self,
        *,
        user_id: int,
        punch_type: str | PunchType,
        fingerprint: str | None,
        network_address: str,
        longitude: Any = None,
        latitude: Any = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Validate the request, evaluate trust and apply the transition."""

        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
            raise ValidationError("Không xác định được nhân viên", code="invalid-identity")

        try:
            kind = PunchType(punch_type)
        except ValueError:
            raise ValidationError("Loại chấm công không hợp lệ", code="invalid-punch-type")

        ip = normalize_ip(network_address)
        if ip is None:
            raise ValidationError("Không tìm thấy địa chỉ IP", code="invalid-ip")

        fp = (fingerprint or "").strip() or None
        if fp and len(fp) > MAX_FINGERPRINT_LENGTH:
            raise ValidationError("Fingerprint không hợp lệ", code="invalid-fingerprint")

        geo = parse_geolocation(longitude, latitude)
        evidence = PunchEvidence(
            network_address=ip,
            geolocation=geo,
            fingerprint=fp,
            trust=self._trust.evaluate(ip, geo),
        )

        if kind == PunchType.CHECK_IN:
            return self.check_in(user_id, evidence, now=now)
        return self.check_out(user_id, evidence, now=now)

    def check_in(self, user_id: int, evidence: PunchEvidence, *, now: datetime | None = None) -> AttendanceRecord:
        now = self._now(now)
        today = now.date()

        existing = self._attendance.get_for_user_and_date(user_id, today)
        if existing and existing.check_in is not None:
            raise AlreadyCheckedIn()

        self._enforce(evidence)

        punch = OriginalPunch.from_evidence(now, evidence)
        try:
            attendance_id = self._attendance.create_checkin(user_id=user_id, work_date=today, punch=punch)
        except DuplicateRecord:
            # Lost the race to a concurrent check-in for the same day.
            raise AlreadyCheckedIn()

        record = AttendanceRecord(attendance_id=attendance_id, user_id=user_id, work_date=today, check_in=punch)
        if record.flagged:
            logger.warning("untrusted check-in recorded for review: user_id=%s date=%s", user_id, today)
        self._publish(PunchRecorded(attendance_id, user_id, today, PunchType.CHECK_IN, now, evidence.trust))
        return record

    def check_out(self, user_id: int, evidence: PunchEvidence, *, now: datetime | None = None) -> AttendanceRecord:
        now = self._now(now)
        today = now.date()

        record = self._attendance.get_for_user_and_date(user_id, today)
        if not record or record.check_in is None:
            raise NotCheckedInYet()
        if record.check_out is not None:
            raise AlreadyCheckedOut()
        if now < record.check_in.at:
            raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào", code="checkout-before-checkin")

        self._enforce(evidence)

        punch = OriginalPunch.from_evidence(now, evidence)
        if not self._attendance.update_checkout(attendance_id=record.attendance_id, punch=punch):
            raise AlreadyCheckedOut()

        updated = AttendanceRecord(
            attendance_id=record.attendance_id,
            user_id=record.user_id,
            work_date=record.work_date,
            check_in=record.check_in,
            check_out=punch,
        )
        if not evidence.trust.trusted:
            logger.warning("untrusted check-out recorded for review: user_id=%s date=%s", user_id, today)
        self._publish(PunchRecorded(record.attendance_id, user_id, today, PunchType.CHECK_OUT, now, evidence.trust))
        return updated

    def today_status(self, user_id: int, *, now: datetime | None = None) -> tuple[PunchState, Optional[AttendanceRecord]]:
        today = self._now(now).date()
        record = self._attendance.get_for_user_and_date(user_id, today)
        return (record.state if record else PunchState.NO_PUNCH), record

    def today(self, *, now: datetime | None = None):
        return self._now(now).date()
