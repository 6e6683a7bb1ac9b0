from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from ..attendance.model import AttendanceRecord, CorrectedPunch
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_duration, iter_days, now_local
from ..core.constants import DEFAULT_LOG_DAYS, DEFAULT_ORG_TIMEZONE, DEFAULT_WORKING_WEEKDAYS, MAX_LOG_DAYS
from ..core.exceptions import DataIntegrityError, ValidationError
from ..employees.repository import EmployeeDirectory
from .model import RateResult, ReportData, RosterView

logger = logging.getLogger(__name__)


def round_percent(value: float) -> float:
    """Round half-up to one decimal place for display."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def work_hours(record: AttendanceRecord) -> timedelta:
    """check_out - check_in, zero when either punch is missing.

    A record whose check-out precedes its check-in (or exists without one)
    is a data-integrity error, never coerced to zero.
    """
    if not record.is_consistent:
        raise DataIntegrityError(
            f"attendance record {record.attendance_id} has check-out before check-in",
            attendance_id=record.attendance_id,
        )
    if record.check_in is None or record.check_out is None:
        return timedelta(0)
    return record.check_out.at - record.check_in.at


class AttendanceAggregator:
    """Read-only reporting over the attendance store.

    Every query is parameterized by date and goes to the store; nothing is
    cached between calls.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        employees: EmployeeDirectory | None = None,
        timezone: str = DEFAULT_ORG_TIMEZONE,
        working_weekdays: Iterable[int] = DEFAULT_WORKING_WEEKDAYS,
    ):
        self._attendance = attendance
        self._employees = employees
        self._tz = ZoneInfo(timezone)
        self._working_weekdays = frozenset(int(d) for d in working_weekdays)

    def _today(self, today: date | None) -> date:
        return today or now_local(self._tz).date()

    @staticmethod
    def _partition(records: Sequence[AttendanceRecord]) -> tuple[list[AttendanceRecord], int]:
        valid: list[AttendanceRecord] = []
        anomalous = 0
        for r in records:
            if r.is_consistent:
                valid.append(r)
            else:
                anomalous += 1
                logger.warning(
                    "excluding anomalous attendance record %s (user_id=%s date=%s)",
                    r.attendance_id,
                    r.user_id,
                    r.work_date,
                )
        return valid, anomalous

    work_hours = staticmethod(work_hours)

    def daily_roster(self, day: date) -> RosterView:
        valid, anomalous = self._partition(self._attendance.list_for_date(day))
        return RosterView(work_date=day, records=tuple(valid), anomalous_count=anomalous)

    def absentees(self, day: date, employee_ids: Optional[Iterable[int]] = None) -> list[int]:
        """Logical complement of the roster: employees with no record for ``day``."""
        if employee_ids is None:
            if self._employees is None:
                raise ValidationError("Thiếu danh sách nhân viên", code="employees-required")
            employee_ids = [e.user_id for e in self._employees.list_active()]

        present = self.daily_roster(day).present_user_ids
        return sorted(set(int(i) for i in employee_ids) - present)

    def last_n_days_log(self, user_id: int, n: int = DEFAULT_LOG_DAYS, *, today: date | None = None) -> tuple[AttendanceRecord, ...]:
        """Records of the last ``n`` days, most recent first, at most ``n`` items."""
        if not isinstance(n, int) or not 1 <= n <= MAX_LOG_DAYS:
            raise ValidationError(f"Số ngày phải từ 1 đến {MAX_LOG_DAYS}", code="invalid-days")

        end = self._today(today)
        start = end - timedelta(days=n - 1)
        records = self._attendance.list_for_user_between(int(user_id), start, end)
        ordered = sorted(records, key=lambda r: r.work_date, reverse=True)
        return tuple(ordered[:n])

    def attendance_rate(self, start: date, end: date, total_employees: int) -> RateResult:
        """distinct employees with a check-in / total * 100, one decimal place, plus the anomalous records left out."""
        if end < start:
            raise ValidationError("Ngày kết thúc phải >= ngày bắt đầu", code="invalid-range")
        if int(total_employees) <= 0:
            raise ValidationError("Tổng số nhân viên phải lớn hơn 0", code="invalid-total")

        valid, excluded = self._partition(self._attendance.list_between(start, end))
        present = {r.user_id for r in valid if r.check_in is not None}
        return RateResult(round_percent(len(present) / int(total_employees) * 100), excluded)

    def monthly_rate(self, year: int, month: int, total_employees: int, *, today: date | None = None) -> RateResult:
        """Average of the daily rates over the month's working days.

        Days after ``today`` are not counted, so a month in progress is
        averaged over the working days seen so far.
        """
        if not 1 <= int(month) <= 12:
            raise ValidationError("Tháng không hợp lệ", code="invalid-month")
        if int(total_employees) <= 0:
            raise ValidationError("Tổng số nhân viên phải lớn hơn 0", code="invalid-total")

        first = date(int(year), int(month), 1)
        last = date(int(year), int(month), calendar.monthrange(int(year), int(month))[1])
        last = min(last, self._today(today))

        working_days = [d for d in iter_days(first, last) if d.weekday() in self._working_weekdays]
        if not working_days:
            return RateResult(0.0)

        valid, excluded = self._partition(self._attendance.list_between(first, last))
        present_by_day: dict[date, set[int]] = {}
        for r in valid:
            if r.check_in is not None:
                present_by_day.setdefault(r.work_date, set()).add(r.user_id)

        total = int(total_employees)
        daily = [len(present_by_day.get(d, ())) / total * 100 for d in working_days]
        return RateResult(round_percent(sum(daily) / len(daily)), excluded)

    def employee_weekly_rate(self, user_id: int, *, today: date | None = None) -> float:
        """Attended days among the last 7 / 7 * 100."""
        records = self.last_n_days_log(user_id, 7, today=today)
        valid, _ = self._partition(records)
        attended = sum(1 for r in valid if r.check_in is not None)
        return round_percent(attended / 7 * 100)

    def _full_name(self, user_id: int, cache: dict[int, str]) -> str:
        if user_id not in cache:
            employee = self._employees.get_by_id(user_id) if self._employees else None
            cache[user_id] = employee.full_name if employee else f"#{user_id}"
        return cache[user_id]

    def work_hours_report(self, *, start: date, end: date, user_id: Optional[int] = None) -> ReportData:
        if end < start:
            raise ValidationError("Ngày kết thúc phải >= ngày bắt đầu", code="invalid-range")

        if user_id is not None:
            records = self._attendance.list_for_user_between(int(user_id), start, end)
        else:
            records = self._attendance.list_between(start, end)
        valid, excluded = self._partition(records)

        names: dict[int, str] = {}
        totals: dict[int, timedelta] = {}
        out_rows: list[dict] = []

        for r in valid:
            worked = work_hours(r)
            out_rows.append(
                {
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "user_id": r.user_id,
                    "full_name": self._full_name(r.user_id, names),
                    "check_in": r.check_in_time.strftime("%H:%M") if r.check_in_time else "-",
                    "check_out": r.check_out_time.strftime("%H:%M") if r.check_out_time else "-",
                    "worked_hours": format_duration(worked),
                    "flagged": r.flagged,
                    "corrected": isinstance(r.check_in, CorrectedPunch) or isinstance(r.check_out, CorrectedPunch),
                }
            )
            totals[r.user_id] = totals.get(r.user_id, timedelta(0)) + worked

        summary = [
            {
                "user_id": uid,
                "full_name": self._full_name(uid, names),
                "total_hours": format_duration(total),
            }
            for uid, total in sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
        ]
        return ReportData(rows=out_rows, summary=summary, excluded_count=excluded)
