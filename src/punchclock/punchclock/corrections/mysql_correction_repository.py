from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..attendance.model import CorrectedPunch
from ..core.enums import CorrectionStatus, PunchSource
from ..core.exceptions import DuplicateRecord, StaleRecord
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Amendment, CorrectionRequest
from .repository import CorrectionRepository

_COLUMNS = """
    request_id, user_id, work_date, claimed_check_in, claimed_check_out, message,
    status, created_at, decided_by, decided_at, admin_note
"""


def _to_request(r: dict) -> CorrectionRequest:
    return CorrectionRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        claimed_check_in=normalize_mysql_time(r.get("claimed_check_in")),
        claimed_check_out=normalize_mysql_time(r.get("claimed_check_out")),
        message=r["message"],
        status=CorrectionStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        admin_note=r.get("admin_note"),
    )


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        claimed_check_in: Optional[time],
        claimed_check_out: Optional[time],
        message: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    user_id, work_date, claimed_check_in, claimed_check_out, message, status
                )
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    work_date,
                    claimed_check_in,
                    claimed_check_out,
                    message,
                    CorrectionStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, request_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_corrections WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_requests(
        self,
        *,
        status: Optional[CorrectionStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

    @staticmethod
    def _decide(cur, *, request_id: int, status: CorrectionStatus, decided_by: int, admin_note: Optional[str]) -> bool:
        cur.execute(
            """
            UPDATE attendance_corrections
            SET status=%s, decided_by=%s, decided_at=NOW(), admin_note=%s
            WHERE request_id=%s AND status=%s
            """,
            (status.value, int(decided_by), admin_note, int(request_id), CorrectionStatus.PENDING.value),
        )
        return cur.rowcount > 0

    def reject(self, *, request_id: int, decided_by: int, admin_note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._decide(
                cur,
                request_id=request_id,
                status=CorrectionStatus.REJECTED,
                decided_by=decided_by,
                admin_note=admin_note,
            )

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if not self._decide(
                    cur,
                    request_id=request_id,
                    status=CorrectionStatus.ACCEPTED,
                    decided_by=decided_by,
                    admin_note=admin_note,
                ):
                    return False

                cur.execute(
                    """
                    SELECT attendance_id, check_in_time, check_out_time
                    FROM attendance_records
                    WHERE user_id=%s AND work_date=%s
                    FOR UPDATE
                    """,
                    (int(user_id), work_date),
                )
                current = fetchone(cur)

                previous_in = current["check_in_time"] if current else None
                previous_out = current["check_out_time"] if current else None
                if previous_in != expected_check_in or previous_out != expected_check_out:
                    raise StaleRecord("Bản ghi chấm công vừa thay đổi, vui lòng thử lại")

                if current is None:
                    attendance_id = self._insert_corrected(cur, user_id=user_id, work_date=work_date, check_in=check_in, check_out=check_out)
                else:
                    attendance_id = int(current["attendance_id"])
                    for side, punch in (("check_in", check_in), ("check_out", check_out)):
                        if punch is not None:
                            self._apply_corrected(cur, attendance_id=attendance_id, side=side, punch=punch)

                cur.execute(
                    """
                    INSERT INTO attendance_amendments(
                        attendance_id, request_id, previous_check_in, previous_check_out,
                        new_check_in, new_check_out, amended_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        attendance_id,
                        int(request_id),
                        previous_in,
                        previous_out,
                        check_in.at if check_in else previous_in,
                        check_out.at if check_out else previous_out,
                        int(decided_by),
                    ),
                )
                return True
        except DuplicateRecord as e:
            # A check-in landed between our read and the insert.
            raise StaleRecord("Bản ghi chấm công vừa thay đổi, vui lòng thử lại") from e

    @staticmethod
    def _insert_corrected(cur, *, user_id: int, work_date: date, check_in: Optional[CorrectedPunch], check_out: Optional[CorrectedPunch]) -> int:
        cur.execute(
            """
            INSERT INTO attendance_records(
                user_id, work_date,
                check_in_time, check_in_source, check_in_request_id, check_in_corrected_by,
                check_out_time, check_out_source, check_out_request_id, check_out_corrected_by
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(user_id),
                work_date,
                check_in.at if check_in else None,
                PunchSource.CORRECTED.value if check_in else None,
                check_in.request_id if check_in else None,
                check_in.corrected_by if check_in else None,
                check_out.at if check_out else None,
                PunchSource.CORRECTED.value if check_out else None,
                check_out.request_id if check_out else None,
                check_out.corrected_by if check_out else None,
            ),
        )
        return int(cur.lastrowid)

    @staticmethod
    def _apply_corrected(cur, *, attendance_id: int, side: str, punch: CorrectedPunch) -> None:
        # side is one of two literals chosen above, never user input.
        cur.execute(
            f"""
            UPDATE attendance_records
            SET {side}_time=%s, {side}_source=%s, {side}_request_id=%s, {side}_corrected_by=%s
            WHERE attendance_id=%s
            """,
            (punch.at, PunchSource.CORRECTED.value, punch.request_id, punch.corrected_by, int(attendance_id)),
        )

    def list_amendments(self, *, attendance_id: int) -> Sequence[Amendment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT amendment_id, attendance_id, request_id, previous_check_in, previous_check_out,
                       new_check_in, new_check_out, amended_by, amended_at
                FROM attendance_amendments
                WHERE attendance_id=%s
                ORDER BY amended_at ASC, amendment_id ASC
                """,
                (int(attendance_id),),
            )
            return [
                Amendment(
                    amendment_id=int(r["amendment_id"]),
                    attendance_id=int(r["attendance_id"]),
                    request_id=int(r["request_id"]),
                    previous_check_in=r.get("previous_check_in"),
                    previous_check_out=r.get("previous_check_out"),
                    new_check_in=r.get("new_check_in"),
                    new_check_out=r.get("new_check_out"),
                    amended_by=int(r["amended_by"]),
                    amended_at=r["amended_at"],
                )
                for r in fetchall(cur)
            ]
