from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, OriginalPunch


class AttendanceRepository(Protocol):
    """Durable store of attendance records, unique per (user_id, work_date).

    Every write is a single atomic statement; readers never observe a
    half-written record. I/O failures raise ``StoreUnavailable``.
    """

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Most recent work_date first."""

        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_between(self, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(self, *, user_id: int, work_date: date, punch: OriginalPunch) -> int:
        """Insert the day's record. Raises ``DuplicateRecord`` if one already exists."""

        raise NotImplementedError

    def update_checkout(self, *, attendance_id: int, punch: OriginalPunch) -> bool:
        """Compare-and-set: only succeeds while the record has no check-out."""

        raise NotImplementedError
