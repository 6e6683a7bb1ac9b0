from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.geo import Geolocation
from ..core.enums import PunchSource, TrustLevel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_float
from ..trust.model import TrustResult
from .model import AttendanceRecord, CorrectedPunch, OriginalPunch, Punch
from .repository import AttendanceRepository

_PUNCH_FIELDS = (
    "time",
    "source",
    "ip",
    "latitude",
    "longitude",
    "fingerprint",
    "trust",
    "trust_reason",
    "request_id",
    "corrected_by",
)

SELECT_RECORD_COLUMNS = ", ".join(
    ["attendance_id", "user_id", "work_date"]
    + [f"{side}_{field}" for side in ("check_in", "check_out") for field in _PUNCH_FIELDS]
)


def _row_to_punch(r: dict, side: str) -> Optional[Punch]:
    at = r.get(f"{side}_time")
    if at is None:
        return None

    if r.get(f"{side}_source") == PunchSource.CORRECTED.value:
        return CorrectedPunch(
            at=at,
            request_id=int(r[f"{side}_request_id"]),
            corrected_by=int(r[f"{side}_corrected_by"]),
        )

    lat = optional_float(r.get(f"{side}_latitude"))
    lon = optional_float(r.get(f"{side}_longitude"))
    return OriginalPunch(
        at=at,
        network_address=r.get(f"{side}_ip"),
        geolocation=Geolocation(longitude=lon, latitude=lat) if lat is not None and lon is not None else None,
        fingerprint=r.get(f"{side}_fingerprint"),
        trust=TrustResult(
            level=TrustLevel(r.get(f"{side}_trust") or TrustLevel.UNTRUSTED.value),
            reason=r.get(f"{side}_trust_reason") or "",
        ),
    )


def row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in=_row_to_punch(r, "check_in"),
        check_out=_row_to_punch(r, "check_out"),
    )


def _original_punch_params(punch: OriginalPunch) -> tuple:
    geo = punch.geolocation
    return (
        punch.at,
        PunchSource.ORIGINAL.value,
        punch.network_address,
        geo.latitude if geo else None,
        geo.longitude if geo else None,
        punch.fingerprint,
        punch.trust.level.value,
        punch.trust.reason,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SELECT_RECORD_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SELECT_RECORD_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC
                """,
                (int(user_id), start, end),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SELECT_RECORD_COLUMNS}
                FROM attendance_records
                WHERE work_date=%s
                ORDER BY check_in_time ASC, user_id ASC
                """,
                (work_date,),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def list_between(self, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SELECT_RECORD_COLUMNS}
                FROM attendance_records
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date DESC, user_id ASC
                """,
                (start, end),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def create_checkin(self, *, user_id: int, work_date: date, punch: OriginalPunch) -> int:
        # UNIQUE(user_id, work_date) turns a concurrent second insert into DuplicateRecord.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    user_id, work_date,
                    check_in_time, check_in_source, check_in_ip, check_in_latitude, check_in_longitude,
                    check_in_fingerprint, check_in_trust, check_in_trust_reason
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), work_date) + _original_punch_params(punch),
            )
            return int(cur.lastrowid)

    def update_checkout(self, *, attendance_id: int, punch: OriginalPunch) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_source=%s, check_out_ip=%s,
                    check_out_latitude=%s, check_out_longitude=%s,
                    check_out_fingerprint=%s, check_out_trust=%s, check_out_trust_reason=%s
                WHERE attendance_id=%s AND check_in_time IS NOT NULL AND check_out_time IS NULL
                """,
                _original_punch_params(punch) + (int(attendance_id),),
            )
            return cur.rowcount > 0
