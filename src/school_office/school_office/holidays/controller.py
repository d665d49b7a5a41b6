from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_role, error_response, json_body, roles_required
from ..core.constants import DEFAULT_HOLIDAY_LIST_LIMIT
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    attendance_roles = roles_required(Role.ADMIN, Role.STAFF, Role.ATTENDANCE_STAFF)
    manager_roles = roles_required(Role.ADMIN, Role.ATTENDANCE_STAFF)

    def _invalid_date():
        return jsonify({"success": False, "error": "ValidationError", "message": "Date must be YYYY-MM-DD"}), 400

    @app.route("/holidays", methods=["GET"], endpoint="holidays")
    @attendance_roles
    def holidays():
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        try:
            if start_s and end_s:
                rows = container.holiday_service.list_range(start=parse_iso_date(start_s), end=parse_iso_date(end_s))
            else:
                rows = container.holiday_service.list_recent(
                    limit=request.args.get("limit", DEFAULT_HOLIDAY_LIST_LIMIT, type=int)
                )
        except ValueError:
            return _invalid_date()
        except DomainError as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "holidays": [
                    {"id": h.holiday_id, "date": h.holiday_date.isoformat(), "description": h.description}
                    for h in rows
                ],
            }
        )

    @app.route("/holidays", methods=["POST"], endpoint="holidays_add")
    @manager_roles
    def holidays_add():
        data = json_body()
        try:
            holiday_id = container.holiday_service.add(
                current_role=current_role(),
                holiday_date=data.get("date") or "",
                description=data.get("description") or "",
            )
            return jsonify({"success": True, "holiday_id": holiday_id}), 201
        except (TypeError, ValueError):
            return _invalid_date()
        except DomainError as e:
            return error_response(e)

    @app.route("/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="holidays_delete")
    @manager_roles
    def holidays_delete(holiday_id: int):
        try:
            container.holiday_service.delete(current_role=current_role(), holiday_id=holiday_id)
            return jsonify({"success": True})
        except DomainError as e:
            return error_response(e)

    @app.route("/holidays/check", methods=["GET"], endpoint="holidays_check")
    @attendance_roles
    def holidays_check():
        try:
            result = container.holiday_service.check(request.args.get("date") or date.today())
        except (TypeError, ValueError):
            return _invalid_date()
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "is_holiday": result.is_holiday, "reason": result.reason})
