from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, as_bool, current_role, error_response, json_body, roles_required
from ..core.constants import DEFAULT_SECTION
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .model import AdmissionForm, Student


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(",")
    return [str(v) for v in value]


def _student_json(s: Student) -> dict:
    return {
        "id": s.student_id,
        "registration_number": s.registration_number,
        "name": s.name,
        "class_id": s.class_id,
        "section": s.section,
        "roll_number": s.roll_number,
        "date_of_birth": s.date_of_birth.isoformat(),
        "gender": s.gender.value if s.gender else None,
        "father_name": s.father.name,
        "mother_name": s.mother.name,
        "address": s.address,
        "mobiles": list(s.mobiles),
        "emails": list(s.emails),
        "pen": s.pen,
        "date_of_admission": s.date_of_admission.isoformat(),
        "last_institution": s.last_institution,
        "tc_number": s.tc_number,
        "is_active": s.is_active,
    }


def _form_from(data: dict) -> AdmissionForm:
    try:
        class_id = int(data.get("class_id") or data.get("classId"))
    except (TypeError, ValueError):
        raise ValidationError("Class is required")

    return AdmissionForm(
        name=data.get("name") or "",
        class_id=class_id,
        date_of_birth=data.get("date_of_birth") or "",
        address=data.get("address") or "",
        mobiles=_as_list(data.get("mobiles") or data.get("mobile")),
        section=data.get("section") or DEFAULT_SECTION,
        registration_number=data.get("registration_number"),
        roll_number=data.get("roll_number"),
        date_of_admission=data.get("date_of_admission"),
        gender=data.get("gender"),
        father_name=data.get("father_name"),
        father_aadhaar=data.get("father_aadhaar"),
        mother_name=data.get("mother_name"),
        mother_aadhaar=data.get("mother_aadhaar"),
        emails=_as_list(data.get("emails") or data.get("email")),
        pen=data.get("pen"),
        last_institution=data.get("last_institution"),
        tc_number=data.get("tc_number"),
    )


def register(app: Flask, container: Container) -> None:
    office_required = roles_required(Role.ADMIN, Role.STAFF)

    @app.route("/students", methods=["GET"], endpoint="students")
    @office_required
    def students():
        try:
            class_id = request.args.get("class_id", type=int)
            section = (request.args.get("section") or "").strip().upper() or None
            rows = container.student_service.list_students(
                class_id=class_id,
                section=section,
                active_only=not as_bool(request.args.get("include_inactive")),
                search=request.args.get("q") or request.args.get("search"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "students": [_student_json(s) for s in rows]})

    @app.route("/students", methods=["POST"], endpoint="students_admit")
    @office_required
    def students_admit():
        data = json_body()
        try:
            student = container.student_service.admit(current_role=current_role(), form=_form_from(data))
            return jsonify({"success": True, "student": _student_json(student)}), 201
        except DomainError as e:
            return error_response(e)

    @app.route("/students/next-registration-number", methods=["GET"], endpoint="students_next_number")
    @office_required
    def students_next_number():
        try:
            number = container.student_service.next_registration_number()
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "registration_number": number})

    @app.route("/students/<int:student_id>", methods=["GET"], endpoint="students_get")
    @office_required
    def students_get(student_id: int):
        try:
            return jsonify({"success": True, "student": _student_json(container.student_service.get(student_id))})
        except DomainError as e:
            return error_response(e)

    @app.route("/students/<int:student_id>/status", methods=["POST"], endpoint="students_status")
    @admin_required
    def students_status(student_id: int):
        data = json_body()
        try:
            container.student_service.set_active(
                current_role=current_role(),
                student_id=student_id,
                is_active=as_bool(data.get("is_active")),
            )
            return jsonify({"success": True})
        except DomainError as e:
            return error_response(e)

    @app.route("/students/<int:student_id>", methods=["PUT"], endpoint="students_update")
    @office_required
    def students_update(student_id: int):
        data = json_body()
        try:
            student = container.student_service.update(
                current_role=current_role(), student_id=student_id, form=_form_from(data)
            )
            return jsonify({"success": True, "student": _student_json(student)})
        except DomainError as e:
            return error_response(e)
