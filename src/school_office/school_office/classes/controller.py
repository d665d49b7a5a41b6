from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, current_role, error_response, json_body, login_required
from ..core.exceptions import DomainError
from ..container import Container


def _class_json(c) -> dict:
    return {"id": c.class_id, "name": c.name, "exams": list(c.exams)}


def register(app: Flask, container: Container) -> None:
    @app.route("/classes", methods=["GET"], endpoint="classes")
    @login_required
    def classes():
        return jsonify({"success": True, "classes": [_class_json(c) for c in container.class_service.list_active()]})

    @app.route("/admin/classes", methods=["GET"], endpoint="admin_classes")
    @admin_required
    def admin_classes():
        rows = [
            {
                "id": c.class_id,
                "name": c.name,
                "exams": list(c.exams),
                "monthly_fee": str(c.monthly_fee),
                "exam_fee": str(c.exam_fee),
                "admission_fee": str(c.admission_fee),
                "registration_fee": str(c.registration_fee),
            }
            for c in container.class_service.list_with_fees()
        ]
        return jsonify({"success": True, "classes": rows})

    @app.route("/admin/classes", methods=["POST"], endpoint="admin_classes_create")
    @admin_required
    def admin_classes_create():
        data = json_body()
        try:
            class_id = container.class_service.create_class(
                current_role=current_role(),
                name=data.get("name") or "",
                exams=data.get("exams"),
            )
            return jsonify({"success": True, "class_id": class_id}), 201
        except DomainError as e:
            return error_response(e)

    @app.route("/admin/classes/<int:class_id>/exams", methods=["POST"], endpoint="admin_classes_exams")
    @admin_required
    def admin_classes_exams(class_id: int):
        data = json_body()
        try:
            container.class_service.update_exams(current_role=current_role(), class_id=class_id, exams=data.get("exams") or [])
            return jsonify({"success": True})
        except DomainError as e:
            return error_response(e)

    @app.route("/admin/classes/<int:class_id>/fees", methods=["POST"], endpoint="admin_classes_fees")
    @admin_required
    def admin_classes_fees(class_id: int):
        data = json_body()
        try:
            fee_id = container.class_service.add_fee(
                current_role=current_role(),
                class_id=class_id,
                fee_type=data.get("type") or "",
                amount=data.get("amount"),
                effective_from=data.get("effective_from") or "",
            )
            return jsonify({"success": True, "fee_id": fee_id}), 201
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "Effective date is invalid"}), 400
        except DomainError as e:
            return error_response(e)
