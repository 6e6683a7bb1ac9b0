from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from ..attendance.model import CorrectedPunch
from ..core.enums import CorrectionStatus
from .model import Amendment, CorrectionRequest


class CorrectionRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        claimed_check_in: Optional[time],
        claimed_check_out: Optional[time],
        message: str,
    ) -> int:
        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[CorrectionStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        raise NotImplementedError

    def reject(self, *, request_id: int, decided_by: int, admin_note: Optional[str] = None) -> bool:
        """PENDING -> REJECTED; False when the request is not pending."""

        raise NotImplementedError

    def accept(
        self,
        *,
        request_id: int,
        decided_by: int,
        admin_note: Optional[str],
        user_id: int,
        work_date: date,
        expected_check_in: Optional[datetime],
        expected_check_out: Optional[datetime],
        check_in: Optional[CorrectedPunch],
        check_out: Optional[CorrectedPunch],
    ) -> bool:
        """PENDING -> ACCEPTED and amend the record, in one transaction.

        Returns False when the request is no longer pending. Raises
        ``StaleRecord`` when the record no longer holds the expected times.
        """

        raise NotImplementedError

    def list_amendments(self, *, attendance_id: int) -> Sequence[Amendment]:
        raise NotImplementedError
