from __future__ import annotations

import logging

from flask import Flask, jsonify, session

from ..common.web import admin_required, as_bool, current_role, current_user_id, error_response, json_body, login_required
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.before_request
    def _drop_inactive_session():
        user_id = session.get("user_id")
        if user_id is None:
            return None
        try:
            if not container.auth_service.is_session_valid(int(user_id)):
                session.clear()
        except DomainError:
            # session stays as is when the store is unreachable
            logger.warning("could not verify session for user %s", user_id)
        return None

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        try:
            s_user = container.auth_service.authenticate(
                data.get("login") or data.get("username") or data.get("email") or "",
                data.get("password") or "",
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("login failed unexpectedly")
            return jsonify({"success": False, "message": "System error while logging in"}), 500

        session.clear()
        session.permanent = as_bool(data.get("remember_me"))

        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

        return jsonify(
            {
                "success": True,
                "user": {
                    "user_id": s_user.user_id,
                    "full_name": s_user.full_name,
                    "role": s_user.role.value,
                    "requires_password_change": s_user.requires_password_change,
                },
            }
        )

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/me", endpoint="me")
    @login_required
    def me():
        return jsonify(
            {"success": True, "user": {"user_id": session["user_id"], "full_name": session.get("name"), "role": session.get("role")}}
        )

    @app.route("/me/password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = json_body()
        try:
            container.user_service.change_password(
                user_id=current_user_id(),
                current_password=data.get("current_password") or "",
                new_password=data.get("new_password") or "",
            )
            return jsonify({"success": True})
        except DomainError as e:
            return error_response(e)

    @app.route("/admin/staff", methods=["GET"], endpoint="admin_staff")
    @admin_required
    def admin_staff():
        return jsonify({"success": True, "users": container.user_service.list_admin_view()})

    @app.route("/admin/staff", methods=["POST"], endpoint="admin_staff_create")
    @admin_required
    def admin_staff_create():
        data = json_body()
        try:
            try:
                role = Role(data.get("role") or Role.STAFF.value)
            except ValueError:
                raise ValidationError("Invalid account type")

            user_id = container.user_service.create_staff(
                current_role=current_role(),
                full_name=data.get("full_name") or data.get("name") or "",
                email=data.get("email") or "",
                password=data.get("password") or "",
                role=role,
            )
            return jsonify({"success": True, "user_id": user_id}), 201
        except DomainError as e:
            return error_response(e)

    @app.route("/admin/staff/<int:user_id>/status", methods=["POST"], endpoint="admin_staff_status")
    @admin_required
    def admin_staff_status(user_id: int):
        data = json_body()
        try:
            container.user_service.set_active(
                current_role=current_role(),
                user_id=user_id,
                is_active=as_bool(data.get("is_active")),
            )
            return jsonify({"success": True})
        except DomainError as e:
            return error_response(e)
