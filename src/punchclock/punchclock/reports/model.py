from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..attendance.model import AttendanceRecord


@dataclass(frozen=True)
class RosterView:
    """Who is present on a date; anomalous records are counted, not listed."""

    work_date: date
    records: tuple[AttendanceRecord, ...]
    anomalous_count: int = 0

    @property
    def present_user_ids(self) -> frozenset[int]:
        return frozenset(r.user_id for r in self.records if r.check_in is not None)

    @property
    def flagged(self) -> tuple[AttendanceRecord, ...]:
        return tuple(r for r in self.records if r.flagged)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]
    excluded_count: int = 0


@dataclass(frozen=True)
class RateResult:
    """An attendance percentage plus how many anomalous records were left out of it."""

    rate: float
    excluded_count: int = 0
