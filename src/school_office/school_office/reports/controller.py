from __future__ import annotations

import csv
import io
from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import error_response, roles_required
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container

REPORT_FIELDS = [
    "date",
    "class_name",
    "section",
    "student_id",
    "student_name",
    "registration_number",
    "status",
    "remarks",
    "updated_at",
]


def register(app: Flask, container: Container) -> None:
    report_roles = roles_required(Role.ADMIN, Role.STAFF, Role.ATTENDANCE_STAFF)

    def _range_from_args() -> tuple[date, date]:
        today = date.today()
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        end = parse_iso_date(end_s) if end_s else today
        start = parse_iso_date(start_s) if start_s else end - timedelta(days=DEFAULT_REPORT_DAYS - 1)
        return start, end

    def _build():
        start, end = _range_from_args()
        data = container.report_service.build(
            start=start,
            end=end,
            class_id=request.args.get("class_id", type=int),
            student_id=request.args.get("student_id", type=int),
        )
        return start, end, data

    def _write_report_csv(*, data, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        # BOM so spreadsheet apps pick up UTF-8 names
        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/attendance/report", methods=["GET"], endpoint="attendance_report")
    @report_roles
    def attendance_report():
        try:
            start, end, data = _build()
        except ValueError:
            return jsonify({"success": False, "error": "ValidationError", "message": "Date must be YYYY-MM-DD"}), 400
        except DomainError as e:
            return error_response(e)
        return jsonify(
            {
                "success": True,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "rows": data.rows,
                "summary": data.summary,
            }
        )

    @app.route("/attendance/report.csv", methods=["GET"], endpoint="attendance_report_csv")
    @report_roles
    def attendance_report_csv():
        try:
            start, end, data = _build()
        except ValueError:
            return jsonify({"success": False, "error": "ValidationError", "message": "Date must be YYYY-MM-DD"}), 400
        except DomainError as e:
            return error_response(e)

        filename = f"attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(data=data, filename=filename)
