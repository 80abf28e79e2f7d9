from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, request, session

from ..common.web import (
    as_bool,
    current_role,
    current_user_id,
    json_body,
    login_required,
    ok,
    optional_int,
    required,
    serialize,
)
from ..core.enums import Action, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import require
from ..container import Container
from .model import Employee

logger = logging.getLogger(__name__)


def public_employee(user: Employee) -> dict:
    data = serialize(user)
    data.pop("password_hash", None)
    return data


def _role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Unknown role: {value!r}")


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    employees = container.employee_service

    def _start_session(user_id: int, full_name: str, role: Role, remember: bool) -> None:
        session.clear()
        session.permanent = remember
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = user_id
        session["name"] = full_name
        session["role"] = role.value

    @app.before_request
    def refresh_principal():
        # Session role always mirrors the stored user.
        user_id = session.get("user_id")
        if user_id is None:
            return None
        try:
            user = employees.get_employee(user_id)
        except NotFoundError:
            user = None
        if user is None or not user.is_active:
            logger.warning("Ending session of user %s: account missing or inactive", user_id)
            session.clear()
        elif session.get("role") != user.role.value:
            session["role"] = user.role.value
        return None

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        data = json_body()
        s_user = auth.authenticate(str(data.get("username", "")), str(data.get("password", "")))
        _start_session(s_user.user_id, s_user.full_name, s_user.role, as_bool(data.get("remember_me")))
        logger.info("User %s logged in", s_user.user_id)
        return ok(s_user)

    @app.route("/api/auth/signup", methods=["POST"], endpoint="api_signup")
    def signup():
        data = json_body()
        user = auth.sign_up(
            full_name=data.get("full_name", ""),
            username=data.get("username", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            phone=data.get("phone"),
        )
        _start_session(user.user_id, user.full_name, user.role, False)
        return ok(public_employee(user), status=201)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @login_required
    def me():
        return ok(public_employee(employees.get_employee(current_user_id())))

    @app.route("/api/users", methods=["GET"], endpoint="api_users")
    @login_required
    def list_users():
        role = request.args.get("role")
        users = employees.list_employees(
            current_role=current_role(),
            active_only=as_bool(request.args.get("active_only", "0")),
            role=_role(role) if role else None,
        )
        return ok([public_employee(u) for u in users])

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="api_user")
    @login_required
    def get_user(user_id: int):
        if user_id != current_user_id():
            require(current_role(), Action.MANAGE_EMPLOYEES)
        return ok(public_employee(employees.get_employee(user_id)))

    @app.route("/api/users/<int:user_id>/role", methods=["PATCH"], endpoint="api_user_role")
    @login_required
    def change_role(user_id: int):
        data = json_body()
        user = employees.change_role(
            current_role=current_role(),
            actor_id=current_user_id(),
            user_id=user_id,
            new_role=_role(required(data, "role")),
        )
        return ok(public_employee(user))

    @app.route("/api/users/<int:user_id>/deactivate", methods=["POST"], endpoint="api_user_deactivate")
    @login_required
    def deactivate(user_id: int):
        employees.deactivate(current_role=current_role(), actor_id=current_user_id(), user_id=user_id)
        return ok(message="Employee deactivated")

    @app.route("/api/users/<int:user_id>/reactivate", methods=["POST"], endpoint="api_user_reactivate")
    @login_required
    def reactivate(user_id: int):
        employees.reactivate(current_role=current_role(), user_id=user_id)
        return ok(message="Employee reactivated")

    @app.route("/api/pre-registrations", methods=["GET"], endpoint="api_pre_registrations")
    @login_required
    def list_pre_registrations():
        include_used = as_bool(request.args.get("include_used", "0"))
        return ok(employees.list_pre_registrations(current_role=current_role(), include_used=include_used))

    @app.route("/api/pre-registrations", methods=["POST"], endpoint="api_pre_registration_create")
    @login_required
    def create_pre_registration():
        data = json_body()
        pre_id = employees.pre_register(
            current_role=current_role(),
            created_by=current_user_id(),
            full_name=data.get("full_name", ""),
            email=data.get("email"),
            phone=data.get("phone"),
            role=_role(data.get("role", Role.EMPLOYEE.value)),
            position_id=optional_int(data.get("position_id"), "position_id"),
            site_id=optional_int(data.get("site_id"), "site_id"),
        )
        return ok({"pre_registration_id": pre_id}, status=201)
