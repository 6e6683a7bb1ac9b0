from __future__ import annotations

import csv
import io
from datetime import timedelta

from flask import Flask, jsonify, request

from ..attendance.controller import record_to_dict
from ..common.datetime_utils import format_duration, parse_iso_date
from ..common.web import admin_required, current_role, current_user_id, login_required
from ..container import Container
from ..core.constants import DEFAULT_LOG_DAYS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


def register(app: Flask, container: Container) -> None:
    def _today():
        return container.attendance_service.today()

    def _date_arg(name: str, default):
        value = request.args.get(name)
        return parse_iso_date(value) if value else default

    def _int_arg(name: str, default: int) -> int:
        value = request.args.get(name)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ValidationError(f"Tham số {name} không hợp lệ", code="invalid-parameter")

    @app.route("/api/attendance/roster", methods=["GET"], endpoint="api_roster")
    @admin_required
    def api_roster():
        """Who is present on a date (defaults to today)."""
        day = _date_arg("date", _today())
        roster = container.aggregator.daily_roster(day)
        absent = container.aggregator.absentees(day)
        return jsonify(
            {
                "date": day.isoformat(),
                "present": [record_to_dict(r) for r in roster.records],
                "absent_user_ids": absent,
                "flagged_count": len(roster.flagged),
                "anomalous_count": roster.anomalous_count,
            }
        )

    @app.route("/api/attendance/employees/<int:user_id>/log", methods=["GET"], endpoint="api_employee_log")
    @login_required
    def api_employee_log(user_id: int):
        if current_role() != Role.ADMIN and user_id != current_user_id():
            raise AuthorizationError("Bạn không có quyền")

        days = _int_arg("days", DEFAULT_LOG_DAYS)
        records = container.aggregator.last_n_days_log(user_id, days, today=_today())
        rows = []
        for r in records:
            row = record_to_dict(r)
            row["worked_hours"] = format_duration(container.aggregator.work_hours(r)) if r.is_consistent else None
            rows.append(row)
        return jsonify(
            {
                "user_id": user_id,
                "days": days,
                "records": rows,
                "weekly_rate": container.aggregator.employee_weekly_rate(user_id, today=_today()),
            }
        )

    @app.route("/api/attendance/rate", methods=["GET"], endpoint="api_attendance_rate")
    @admin_required
    def api_attendance_rate():
        today = _today()
        start = _date_arg("start", today)
        end = _date_arg("end", today)
        total = _int_arg("total", container.employees.count_active())
        result = container.aggregator.attendance_rate(start, end, total)
        return jsonify(
            {
                "start": start.isoformat(),
                "end": end.isoformat(),
                "total_employees": total,
                "rate": result.rate,
                "excluded_count": result.excluded_count,
            }
        )

    @app.route("/api/attendance/rate/monthly", methods=["GET"], endpoint="api_monthly_rate")
    @admin_required
    def api_monthly_rate():
        today = _today()
        year = _int_arg("year", today.year)
        month = _int_arg("month", today.month)
        total = _int_arg("total", container.employees.count_active())
        result = container.aggregator.monthly_rate(year, month, total, today=today)
        return jsonify(
            {
                "year": year,
                "month": month,
                "total_employees": total,
                "rate": result.rate,
                "excluded_count": result.excluded_count,
            }
        )

    @app.route("/api/attendance/report.csv", methods=["GET"], endpoint="api_report_csv")
    @admin_required
    def api_report_csv():
        today = _today()
        start = _date_arg("start", today - timedelta(days=7))
        end = _date_arg("end", today)

        data = container.aggregator.work_hours_report(start=start, end=end)

        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=[
                "work_date",
                "user_id",
                "full_name",
                "check_in",
                "check_out",
                "worked_hours",
                "flagged",
                "corrected",
            ],
        )
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        filename = f"attendance_report_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "X-Excluded-Records": str(data.excluded_count),
            },
        )
