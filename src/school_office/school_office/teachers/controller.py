from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_role, error_response, json_body, roles_required
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from .model import Teacher, TeacherForm

_FORM_FIELDS = (
    ("name", "name"),
    ("phone", "phone"),
    ("aadhaar", "aadhaar"),
    ("joining_date", "joiningDate"),
    ("email", "email"),
    ("father_name", "fatherName"),
    ("mother_name", "motherName"),
    ("government_teacher_id", "governmentTeacherId"),
    ("salary_amount", "salaryAmount"),
    ("total_experience", "totalExperience"),
)


def _form_from(data: dict) -> TeacherForm:
    values = {}
    for field_name, alias in _FORM_FIELDS:
        value = data.get(field_name, data.get(alias))
        if value is not None:
            values[field_name] = value
    return TeacherForm(**values)


def _teacher_json(t: Teacher) -> dict:
    return {
        "id": t.teacher_id,
        "teacher_code": t.teacher_code,
        "name": t.name,
        "phone": t.phone,
        "aadhaar": t.aadhaar,
        "joining_date": t.joining_date.isoformat(),
        "email": t.email,
        "father_name": t.father_name,
        "mother_name": t.mother_name,
        "government_teacher_id": t.government_teacher_id,
        "salary": {
            "amount": str(t.salary_amount),
            "effective_date": t.salary_effective_date.isoformat() if t.salary_effective_date else None,
        },
        "total_experience": str(t.total_experience),
    }


def register(app: Flask, container: Container) -> None:
    office_required = roles_required(Role.ADMIN, Role.STAFF)

    @app.route("/teachers", methods=["GET"], endpoint="teachers")
    @office_required
    def teachers():
        try:
            rows = container.teacher_service.list_teachers(request.args.get("q"))
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "teachers": [_teacher_json(t) for t in rows]})

    @app.route("/teachers", methods=["POST"], endpoint="teachers_create")
    @office_required
    def teachers_create():
        data = json_body()
        try:
            teacher = container.teacher_service.create(current_role=current_role(), form=_form_from(data))
            return jsonify({"success": True, "teacher": _teacher_json(teacher)}), 201
        except DomainError as e:
            return error_response(e)

    @app.route("/teachers/<int:teacher_id>", methods=["GET"], endpoint="teachers_get")
    @office_required
    def teachers_get(teacher_id: int):
        try:
            return jsonify({"success": True, "teacher": _teacher_json(container.teacher_service.get(teacher_id))})
        except DomainError as e:
            return error_response(e)

    @app.route("/teachers/<int:teacher_id>", methods=["PUT"], endpoint="teachers_update")
    @office_required
    def teachers_update(teacher_id: int):
        data = json_body()
        try:
            teacher = container.teacher_service.update(
                current_role=current_role(), teacher_id=teacher_id, form=_form_from(data)
            )
            return jsonify({"success": True, "teacher": _teacher_json(teacher)})
        except DomainError as e:
            return error_response(e)

    @app.route("/teachers/<int:teacher_id>", methods=["DELETE"], endpoint="teachers_delete")
    @admin_required
    def teachers_delete(teacher_id: int):
        try:
            container.teacher_service.delete(current_role=current_role(), teacher_id=teacher_id)
            return jsonify({"success": True})
        except DomainError as e:
            return error_response(e)
