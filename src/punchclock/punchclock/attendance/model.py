from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar, Optional, Union

from ..common.geo import Geolocation
from ..core.enums import PunchSource, PunchState, PunchType, TrustLevel
from ..trust.model import TrustResult


@dataclass(frozen=True)
class PunchEvidence:
    """Signals collected with a punch request."""

    network_address: Optional[str]
    geolocation: Optional[Geolocation]
    fingerprint: Optional[str]
    trust: TrustResult


@dataclass(frozen=True)
class OriginalPunch:
    """A punch as the employee submitted it."""

    source: ClassVar[PunchSource] = PunchSource.ORIGINAL

    at: datetime
    network_address: Optional[str]
    geolocation: Optional[Geolocation]
    fingerprint: Optional[str]
    trust: TrustResult

    @classmethod
    def from_evidence(cls, at: datetime, evidence: PunchEvidence) -> "OriginalPunch":
        return cls(
            at=at,
            network_address=evidence.network_address,
            geolocation=evidence.geolocation,
            fingerprint=evidence.fingerprint,
            trust=evidence.trust,
        )


@dataclass(frozen=True)
class CorrectedPunch:
    """A punch time applied by an accepted correction request."""

    source: ClassVar[PunchSource] = PunchSource.CORRECTED

    at: datetime
    request_id: int
    corrected_by: int


Punch = Union[OriginalPunch, CorrectedPunch]


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công, một bản ghi cho mỗi (nhân viên, ngày)."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in: Optional[Punch]
    check_out: Optional[Punch] = None

    @property
    def check_in_time(self) -> Optional[datetime]:
        return self.check_in.at if self.check_in else None

    @property
    def check_out_time(self) -> Optional[datetime]:
        return self.check_out.at if self.check_out else None

    @property
    def state(self) -> PunchState:
        if self.check_out is not None:
            return PunchState.CHECKED_OUT
        if self.check_in is not None:
            return PunchState.CHECKED_IN
        return PunchState.NO_PUNCH

    @property
    def is_consistent(self) -> bool:
        """Check-out never exists without check-in and never precedes it."""
        if self.check_out is None:
            return True
        if self.check_in is None:
            return False
        return self.check_out.at >= self.check_in.at

    @property
    def flagged(self) -> bool:
        """True when any submitted punch was Untrusted (needs review)."""
        return any(
            isinstance(p, OriginalPunch) and p.trust.level == TrustLevel.UNTRUSTED
            for p in (self.check_in, self.check_out)
        )


@dataclass(frozen=True)
class PunchRecorded:
    """Audit event emitted after a punch is durably stored."""

    attendance_id: int
    user_id: int
    work_date: date
    punch_type: PunchType
    at: datetime
    trust: TrustResult
