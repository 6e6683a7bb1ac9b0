from __future__ import annotations

import logging
from typing import Callable

from .model import PunchRecorded

logger = logging.getLogger("punchclock.audit")

PunchSubscriber = Callable[[PunchRecorded], None]


def log_punch_event(event: PunchRecorded) -> None:
    """Default subscriber: one audit line per recorded punch."""
    logger.info(
        "punch recorded: attendance_id=%s user_id=%s date=%s type=%s at=%s trust=%s(%s)",
        event.attendance_id,
        event.user_id,
        event.work_date.isoformat(),
        event.punch_type.value,
        event.at.strftime("%H:%M:%S"),
        event.trust.level.value,
        event.trust.reason,
    )
