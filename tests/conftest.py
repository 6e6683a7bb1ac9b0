from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime

import pytest

from punchclock.attendance.model import AttendanceRecord
from punchclock.attendance.service import AttendanceService
from punchclock.core.enums import CorrectionStatus, Role
from punchclock.core.exceptions import DuplicateRecord, StaleRecord
from punchclock.corrections.model import Amendment, CorrectionRequest
from punchclock.corrections.service import CorrectionService
from punchclock.employees.model import Employee
from punchclock.offices.model import OfficeNetwork
from punchclock.reports.service import AttendanceAggregator
from punchclock.trust.service import TrustEvaluator

ORG_TZ = "Asia/Ho_Chi_Minh"
OFFICE_IP = "203.0.113.10"


class InMemoryOffices:
    def __init__(self, offices=()):
        self._rows = {o.office_id: o for o in offices}
        self._next_id = max(self._rows, default=0) + 1
        self.list_calls = 0

    def list_all(self):
        self.list_calls += 1
        return list(self._rows.values())

    def create(self, *, office_name, ip_address, anchor=None):
        if any(o.ip_address == ip_address for o in self._rows.values()):
            raise DuplicateRecord(ip_address)
        office_id = self._next_id
        self._next_id += 1
        self._rows[office_id] = OfficeNetwork(office_id, office_name, ip_address, anchor)
        return office_id

    def delete_by_id(self, office_id):
        return self._rows.pop(int(office_id), None) is not None


class InMemoryAttendance:
    """Thread-safe store mirroring the UNIQUE(user_id, work_date) constraint."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[tuple[int, date], AttendanceRecord] = {}
        self._next_id = 1

    def put(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            self._rows[(record.user_id, record.work_date)] = record
            self._next_id = max(self._next_id, record.attendance_id + 1)
        return record

    def all(self):
        return list(self._rows.values())

    def by_id(self, attendance_id):
        return next((r for r in self._rows.values() if r.attendance_id == attendance_id), None)

    def get_for_user_and_date(self, user_id, work_date):
        return self._rows.get((user_id, work_date))

    def list_for_user_between(self, user_id, start, end):
        rows = [r for r in self._rows.values() if r.user_id == user_id and start <= r.work_date <= end]
        return sorted(rows, key=lambda r: r.work_date, reverse=True)

    def list_for_date(self, work_date):
        return sorted((r for r in self._rows.values() if r.work_date == work_date), key=lambda r: r.user_id)

    def list_between(self, start, end):
        rows = [r for r in self._rows.values() if start <= r.work_date <= end]
        return sorted(rows, key=lambda r: (r.work_date, r.user_id))

    def create_checkin(self, *, user_id, work_date, punch):
        with self._lock:
            if (user_id, work_date) in self._rows:
                raise DuplicateRecord(f"{user_id}/{work_date}")
            attendance_id = self._next_id
            self._next_id += 1
            self._rows[(user_id, work_date)] = AttendanceRecord(attendance_id, user_id, work_date, punch)
        return attendance_id

    def update_checkout(self, *, attendance_id, punch):
        with self._lock:
            for key, rec in self._rows.items():
                if rec.attendance_id == attendance_id and rec.check_out is None:
                    self._rows[key] = replace(rec, check_out=punch)
                    return True
        return False


class InMemoryCorrections:
    def __init__(self, attendance: InMemoryAttendance):
        self._attendance = attendance
        self._requests: dict[int, CorrectionRequest] = {}
        self._amendments: list[Amendment] = []
        self._next_id = 1

    def create(self, *, user_id, work_date, claimed_check_in, claimed_check_out, message):
        request_id = self._next_id
        self._next_id += 1
        self._requests[request_id] = CorrectionRequest(
            request_id=request_id,
            user_id=user_id,
            work_date=work_date,
            claimed_check_in=claimed_check_in,
            claimed_check_out=claimed_check_out,
            message=message,
            status=CorrectionStatus.PENDING,
            created_at=datetime(2026, 3, 10, 9, 0),
        )
        return request_id

    def get(self, *, request_id):
        return self._requests.get(int(request_id))

    def list_requests(self, *, status=None, user_id=None, limit=200):
        rows = [
            r
            for r in self._requests.values()
            if (status is None or r.status == status) and (user_id is None or r.user_id == user_id)
        ]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)[:limit]

    def _decide(self, request_id, status, decided_by, admin_note):
        req = self._requests.get(int(request_id))
        if not req or req.status != CorrectionStatus.PENDING:
            return False
        self._requests[req.request_id] = replace(
            req,
            status=status,
            decided_by=decided_by,
            decided_at=datetime(2026, 3, 10, 10, 0),
            admin_note=admin_note,
        )
        return True

    def reject(self, *, request_id, decided_by, admin_note=None):
        return self._decide(request_id, CorrectionStatus.REJECTED, decided_by, admin_note)

    def accept(
        self,
        *,
        request_id,
        decided_by,
        admin_note,
        user_id,
        work_date,
        expected_check_in,
        expected_check_out,
        check_in,
        check_out,
    ):
        req = self._requests.get(int(request_id))
        if not req or req.status != CorrectionStatus.PENDING:
            return False

        rec = self._attendance.get_for_user_and_date(user_id, work_date)
        current = (rec.check_in_time, rec.check_out_time) if rec else (None, None)
        if current != (expected_check_in, expected_check_out):
            raise StaleRecord()

        if rec is None:
            attendance_id = self._attendance.create_checkin(user_id=user_id, work_date=work_date, punch=check_in)
            if check_out is not None:
                self._attendance.update_checkout(attendance_id=attendance_id, punch=check_out)
        else:
            attendance_id = rec.attendance_id
            self._attendance.put(
                replace(rec, check_in=check_in or rec.check_in, check_out=check_out or rec.check_out)
            )
        new = self._attendance.get_for_user_and_date(user_id, work_date)

        self._decide(request_id, CorrectionStatus.ACCEPTED, decided_by, admin_note)
        self._amendments.append(
            Amendment(
                amendment_id=len(self._amendments) + 1,
                attendance_id=attendance_id,
                request_id=int(request_id),
                previous_check_in=expected_check_in,
                previous_check_out=expected_check_out,
                new_check_in=new.check_in_time,
                new_check_out=new.check_out_time,
                amended_by=decided_by,
                amended_at=datetime(2026, 3, 10, 10, 0),
            )
        )
        return True

    def list_amendments(self, *, attendance_id):
        return [a for a in self._amendments if a.attendance_id == attendance_id]


class InMemoryEmployees:
    def __init__(self, employees=()):
        self._rows = {e.user_id: e for e in employees}

    def get_by_id(self, user_id):
        return self._rows.get(user_id)

    def list_active(self):
        return [e for e in self._rows.values() if e.is_active]

    def count_active(self):
        return len(self.list_active())


@pytest.fixture
def office_repo():
    return InMemoryOffices([OfficeNetwork(office_id=1, office_name="HQ", ip_address=OFFICE_IP)])


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def corrections_repo(attendance_repo):
    return InMemoryCorrections(attendance_repo)


@pytest.fixture
def employees():
    return InMemoryEmployees(
        [
            Employee(user_id=i, full_name=f"Nhân viên {i}", username=f"nv{i}", role=Role.STAFF)
            for i in range(1, 6)
        ]
    )


@pytest.fixture
def trust_evaluator(office_repo):
    return TrustEvaluator(office_repo)


@pytest.fixture
def attendance_service(attendance_repo, trust_evaluator):
    return AttendanceService(attendance_repo, trust_evaluator, timezone=ORG_TZ)


@pytest.fixture
def aggregator(attendance_repo, employees):
    return AttendanceAggregator(attendance_repo, employees=employees, timezone=ORG_TZ)


@pytest.fixture
def correction_service(corrections_repo, attendance_repo):
    return CorrectionService(corrections_repo, attendance_repo, timezone=ORG_TZ)
