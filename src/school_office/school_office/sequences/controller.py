from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, current_role, error_response, json_body
from ..core.constants import REGISTRATION_SEQUENCE
from ..core.exceptions import DomainError
from ..container import Container
from .service import format_registration_number


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/counter", methods=["GET"], endpoint="admin_counter")
    @admin_required
    def admin_counter():
        try:
            next_value = container.sequence_service.peek_next(REGISTRATION_SEQUENCE)
        except DomainError as e:
            return error_response(e)
        return jsonify(
            {
                "success": True,
                "current_seq": next_value - 1,
                "next_registration_number": format_registration_number(next_value),
            }
        )

    @app.route("/admin/counter", methods=["POST"], endpoint="admin_counter_update")
    @admin_required
    def admin_counter_update():
        data = json_body()
        seq = data.get("seq")
        if isinstance(seq, str) and seq.strip().isdigit():
            seq = int(seq)
        try:
            container.sequence_service.reset(current_role=current_role(), sequence_name=REGISTRATION_SEQUENCE, value=seq)
            return jsonify({"success": True, "current_seq": seq})
        except DomainError as e:
            return error_response(e)
