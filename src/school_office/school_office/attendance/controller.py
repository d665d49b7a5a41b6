from __future__ import annotations

import logging
from datetime import date

from flask import Flask, jsonify, request

from ..common.web import as_bool, current_user_id, error_response, json_body, roles_required
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from .model import AttendanceSheet

logger = logging.getLogger(__name__)


def _sheet_json(sheet: AttendanceSheet) -> dict:
    return {
        "id": sheet.sheet_id,
        "date": sheet.attendance_date.isoformat(),
        "class_id": sheet.class_id,
        "section": sheet.section,
        "records": [e.to_dict() for e in sheet.records],
        "marked_by": sheet.marked_by,
        "is_holiday": sheet.is_holiday,
        "holiday_reason": sheet.holiday_reason,
        "created_at": sheet.created_at.isoformat(),
        "updated_at": sheet.updated_at.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    attendance_roles = roles_required(Role.ADMIN, Role.STAFF, Role.ATTENDANCE_STAFF)

    @app.route("/attendance/classes", methods=["GET"], endpoint="attendance_classes")
    @attendance_roles
    def attendance_classes():
        try:
            classes = container.attendance_service.get_classes_for_attendance()
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "classes": [{"id": c.class_id, "name": c.name} for c in classes]})

    @app.route("/attendance/students", methods=["GET"], endpoint="attendance_students")
    @attendance_roles
    def attendance_students():
        try:
            day = container.attendance_service.get_students_for_attendance(
                request.args.get("class_id"),
                request.args.get("section") or "",
                request.args.get("date") or date.today(),
            )
        except DomainError as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "date": day.attendance_date.isoformat(),
                "class_id": day.class_id,
                "section": day.section,
                "is_holiday": day.is_holiday,
                "holiday_reason": day.holiday_reason,
                "students": [
                    {
                        "id": line.student_id,
                        "name": line.name,
                        "registration_number": line.registration_number,
                        "roll_number": line.roll_number,
                        "father_name": line.father_name,
                        "current_status": line.current_status.value if line.current_status else None,
                        "remarks": line.remarks,
                    }
                    for line in day.students
                ],
            }
        )

    @app.route("/attendance", methods=["POST"], endpoint="attendance_submit")
    @attendance_roles
    def attendance_submit():
        data = json_body()
        try:
            sheet = container.attendance_service.submit_attendance(
                data.get("date"),
                data.get("class_id") or data.get("classId"),
                data.get("section") or "",
                current_user_id(),
                data.get("records") or data.get("attendance") or [],
                override_holiday=as_bool(data.get("override_holiday")),
            )
            return jsonify({"success": True, "sheet": _sheet_json(sheet)})
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("attendance submit failed")
            return jsonify({"success": False, "message": "System error while saving attendance"}), 500

    @app.route("/attendance/sheet", methods=["GET"], endpoint="attendance_sheet")
    @attendance_roles
    def attendance_sheet():
        try:
            sheet = container.attendance_service.get_sheet(
                request.args.get("date"),
                request.args.get("class_id"),
                request.args.get("section") or "",
            )
        except DomainError as e:
            return error_response(e)
        if not sheet:
            return jsonify({"success": False, "error": "NotFoundError", "message": "No attendance recorded"}), 404
        return jsonify({"success": True, "sheet": _sheet_json(sheet)})
