from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    PolicyError,
    ValidationError,
)
from .datetime_utils import parse_iso_date, parse_iso_datetime

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int, str], ...] = (
    (ValidationError, 400, "validation"),
    (AuthenticationError, 401, "authentication"),
    (AuthorizationError, 403, "authorization"),
    (NotFoundError, 404, "not_found"),
    (ConflictError, 409, "conflict"),
    (InvalidStateError, 409, "invalid_state"),
    (PolicyError, 422, "policy"),
)


def serialize(value: Any) -> Any:
    """Turn domain objects into JSON-ready values (ISO dates, enum values)."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: serialize(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialize(v) for v in value]
    return value


def ok(data: Any = None, *, status: int = 200, message: Optional[str] = None):
    payload: dict[str, Any] = {"success": True, "data": serialize(data)}
    if message:
        payload["message"] = message
    return jsonify(payload), status


def error_status(exc: DomainError) -> tuple[int, str]:
    for exc_type, status, kind in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            return status, kind
    return 400, "domain"


def register_error_handlers(app: Flask) -> None:
    def handle_domain_error(exc: DomainError):
        status, kind = error_status(exc)
        logger.warning("%s %s -> %s: %s", request.method, request.path, kind, exc)
        return jsonify({"success": False, "message": str(exc), "error": kind}), status

    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"success": False, "message": exc.description, "error": exc.name}), exc.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "message": "Internal server error", "error": "internal"}), 500

    app.register_error_handler(DomainError, handle_domain_error)
    app.register_error_handler(Exception, handle_unexpected)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Login required", "error": "authentication"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(session["role"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def required(data: dict, name: str) -> Any:
    value = data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required")
    return value


def as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


def optional_int(value: Any, name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return as_int(value, name)


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def optional_date(value: Optional[str]) -> Optional[date]:
    return parse_iso_date(value) if value else None


def optional_datetime(value: Optional[str]) -> Optional[datetime]:
    return parse_iso_datetime(value) if value else None
