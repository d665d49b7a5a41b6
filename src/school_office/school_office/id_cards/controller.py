from __future__ import annotations

import io

from flask import Flask, jsonify, send_file

from ..common.web import error_response, roles_required
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from .model import IdCard


def _card_json(card: IdCard) -> dict:
    return {
        "student_id": card.student_id,
        "name": card.name,
        "registration_number": card.registration_number,
        "class_name": card.class_name,
        "section": card.section,
        "father_name": card.father_name,
        "date_of_birth": card.date_of_birth.strftime("%d/%m/%Y"),
        "address": card.address,
        "mobile": card.mobile,
    }


def register(app: Flask, container: Container) -> None:
    office_required = roles_required(Role.ADMIN, Role.STAFF)

    @app.route("/id-cards/student/<int:student_id>", methods=["GET"], endpoint="id_card_student")
    @office_required
    def id_card_student(student_id: int):
        try:
            card = container.id_card_service.card_for_student(student_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "card": _card_json(card)})

    @app.route("/id-cards/class/<int:class_id>", methods=["GET"], endpoint="id_card_class")
    @office_required
    def id_card_class(class_id: int):
        try:
            cards = container.id_card_service.cards_for_class(class_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "cards": [_card_json(c) for c in cards]})

    @app.route("/id-cards/student/<int:student_id>/qr.png", methods=["GET"], endpoint="id_card_qr")
    @office_required
    def id_card_qr(student_id: int):
        try:
            png = container.id_card_service.qr_png(student_id)
        except DomainError as e:
            return error_response(e)
        return send_file(io.BytesIO(png), mimetype="image/png")
