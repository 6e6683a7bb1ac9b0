from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Any

from .attendance.events import log_punch_event
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_ATTENDANCE_URL,
    DEFAULT_GEO_RADIUS_METERS,
    DEFAULT_ORG_TIMEZONE,
    DEFAULT_QR_TTL_SECONDS,
    DEFAULT_WORKING_WEEKDAYS,
)
from .core.enums import EnforcementMode, TrustPolicy
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_directory import MySQLEmployeeDirectory
from .offices.mysql_office_repository import MySQLOfficeNetworkRepository
from .offices.service import OfficeNetworkService
from .qr.service import AttendanceQRIssuer
from .reports.service import AttendanceAggregator
from .trust.factory import TrustStrategyFactory
from .trust.service import TrustEvaluator


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_repo: MySQLAttendanceRepository
    offices_repo: MySQLOfficeNetworkRepository
    corrections_repo: MySQLCorrectionRepository
    employees: MySQLEmployeeDirectory

    office_service: OfficeNetworkService
    trust_evaluator: TrustEvaluator
    attendance_service: AttendanceService
    aggregator: AttendanceAggregator
    qr_issuer: AttendanceQRIssuer
    correction_service: CorrectionService


def _setting(settings: ModuleType, name: str, default: Any) -> Any:
    return getattr(settings, name, default)


def build_container(*, settings: ModuleType) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(_setting(settings, "DB_CONFIG", {})))
    timezone = str(_setting(settings, "ORG_TIMEZONE", DEFAULT_ORG_TIMEZONE))

    attendance_repo = MySQLAttendanceRepository(conn)
    offices_repo = MySQLOfficeNetworkRepository(conn)
    corrections_repo = MySQLCorrectionRepository(conn)
    employees = MySQLEmployeeDirectory(conn)

    office_service = OfficeNetworkService(offices_repo)
    trust_evaluator = TrustEvaluator(
        offices_repo,
        policy=TrustPolicy(_setting(settings, "TRUST_POLICY", TrustPolicy.IP_OR_GEO.value)),
        dev_loopback=bool(_setting(settings, "DEV_LOOPBACK_TRUST", False)),
        strategy_factory=TrustStrategyFactory(
            geo_radius_meters=float(_setting(settings, "GEO_RADIUS_METERS", DEFAULT_GEO_RADIUS_METERS))
        ),
    )
    attendance_service = AttendanceService(
        attendance_repo,
        trust_evaluator,
        timezone=timezone,
        enforcement=EnforcementMode(_setting(settings, "ENFORCEMENT_MODE", EnforcementMode.AUDIT_ONLY.value)),
    )
    attendance_service.subscribe(log_punch_event)

    aggregator = AttendanceAggregator(
        attendance_repo,
        employees=employees,
        timezone=timezone,
        working_weekdays=_setting(settings, "WORKING_WEEKDAYS", DEFAULT_WORKING_WEEKDAYS),
    )
    qr_issuer = AttendanceQRIssuer(
        str(_setting(settings, "SECRET_KEY", "")),
        attendance_url=str(_setting(settings, "ATTENDANCE_URL", DEFAULT_ATTENDANCE_URL)),
        ttl_seconds=int(_setting(settings, "QR_TTL_SECONDS", DEFAULT_QR_TTL_SECONDS)),
    )
    correction_service = CorrectionService(corrections_repo, attendance_repo, timezone=timezone)

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        offices_repo=offices_repo,
        corrections_repo=corrections_repo,
        employees=employees,
        office_service=office_service,
        trust_evaluator=trust_evaluator,
        attendance_service=attendance_service,
        aggregator=aggregator,
        qr_issuer=qr_issuer,
        correction_service=correction_service,
    )
