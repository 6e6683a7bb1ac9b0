from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import CorrectionStatus


@dataclass(frozen=True)
class CorrectionRequest:
    """Yêu cầu điều chỉnh chấm công do nhân viên gửi."""

    request_id: int
    user_id: int
    work_date: date
    claimed_check_in: Optional[time]
    claimed_check_out: Optional[time]
    message: str
    status: CorrectionStatus
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    admin_note: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.status != CorrectionStatus.PENDING


@dataclass(frozen=True)
class Amendment:
    """Audit row written when an accepted correction changes a record."""

    amendment_id: int
    attendance_id: int
    request_id: int
    previous_check_in: Optional[datetime]
    previous_check_out: Optional[datetime]
    new_check_in: Optional[datetime]
    new_check_out: Optional[datetime]
    amended_by: int
    amended_at: datetime
