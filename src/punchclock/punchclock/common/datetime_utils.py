from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Ngày không hợp lệ (YYYY-MM-DD)", code="invalid-date")


def parse_hhmm(value: str | None) -> time | None:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError("Giờ không hợp lệ (HH:MM)", code="invalid-time")


def now_local(tz: ZoneInfo) -> datetime:
    """Current wall-clock time in the organization's zone, tz-naive.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz).replace(tzinfo=None)


def to_org_local(moment: datetime, tz: ZoneInfo) -> datetime:
    """Convert to naive organization-local time.

    Naive input is assumed to already be organization-local.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz).replace(tzinfo=None)


def iter_days(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def format_duration(value: timedelta) -> str:
    minutes = int(value.total_seconds() // 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
