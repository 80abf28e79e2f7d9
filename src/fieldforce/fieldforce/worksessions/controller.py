from __future__ import annotations

from flask import Flask, request

from ..common.geo import Coordinates
from ..common.web import (
    as_int,
    current_role,
    current_user_id,
    json_body,
    login_required,
    ok,
    optional_date,
    optional_datetime,
    optional_int,
    required,
)
from ..core.enums import SessionStatus
from ..core.exceptions import ValidationError
from ..container import Container
from ..storage.controller import stored_upload
from .model import ProductUsage, VoiceMeta


def _payload() -> dict:
    # Check-in accepts multipart (with a photo file) or JSON.
    if request.mimetype == "multipart/form-data":
        return request.form.to_dict()
    return json_body()


def _product_usages(items) -> list[ProductUsage]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError("products must be a list")
    usages = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each product entry must be an object")
        usages.append(
            ProductUsage(
                product_id=as_int(required(item, "product_id"), "product_id"),
                quantity=required(item, "quantity"),
                notes=item.get("notes"),
            )
        )
    return usages


def _voice(data) -> VoiceMeta | None:
    if not data:
        return None
    if not isinstance(data, dict):
        raise ValidationError("voice must be an object")
    return VoiceMeta(
        transcription=data.get("transcription"),
        translation=data.get("translation"),
        recording_url=data.get("recording_url"),
        language=data.get("language"),
    )


def _status(value) -> SessionStatus | None:
    if not value:
        return None
    try:
        return SessionStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown session status: {value!r}")


def register(app: Flask, container: Container) -> None:
    service = container.work_session_service
    store = container.photo_store

    @app.route("/api/check-ins", methods=["POST"], endpoint="api_check_in")
    @login_required
    def check_in():
        data = _payload()
        with stored_upload(store, folder="check-ins", photo_url=data.get("photo_url")) as photo_url:
            session = service.check_in(
                current_role=current_role(),
                employee_id=current_user_id(),
                site_id=as_int(required(data, "site_id"), "site_id"),
                location=Coordinates.from_payload(data),
                photo_url=photo_url,
                notes=data.get("notes"),
                schedule_id=optional_int(data.get("schedule_id"), "schedule_id"),
            )
        return ok(session, status=201, message="Checked in")

    @app.route("/api/check-ins/<int:session_id>/check-out", methods=["POST"], endpoint="api_check_out")
    @login_required
    def check_out(session_id: int):
        data = json_body()
        session = service.check_out(
            current_role=current_role(),
            user_id=current_user_id(),
            session_id=session_id,
            location=Coordinates.from_payload(data),
            notes=data.get("notes"),
        )
        return ok(session, message="Checked out")

    @app.route("/api/check-ins/active", methods=["GET"], endpoint="api_active_session")
    @login_required
    def active_session():
        return ok(service.active_session_for(current_user_id()))

    @app.route("/api/check-ins/my", methods=["GET"], endpoint="api_my_sessions")
    @login_required
    def my_sessions():
        return ok(
            service.sessions_for(
                current_user_id(),
                start=optional_date(request.args.get("start")),
                end=optional_date(request.args.get("end")),
            )
        )

    @app.route("/api/check-ins", methods=["GET"], endpoint="api_sessions")
    @login_required
    def list_sessions():
        return ok(
            service.list_sessions(
                current_role=current_role(),
                employee_id=optional_int(request.args.get("employee_id"), "employee_id"),
                site_id=optional_int(request.args.get("site_id"), "site_id"),
                status=_status(request.args.get("status")),
                start=optional_date(request.args.get("start")),
                end=optional_date(request.args.get("end")),
            )
        )

    @app.route("/api/check-ins/<int:session_id>", methods=["PATCH"], endpoint="api_session_correct")
    @login_required
    def correct_session(session_id: int):
        data = json_body()
        session = service.correct_session(
            current_role=current_role(),
            session_id=session_id,
            check_in_time=optional_datetime(data.get("check_in_time")),
            check_out_time=optional_datetime(data.get("check_out_time")),
            notes=data.get("notes"),
        )
        return ok(session)

    @app.route("/api/work-summary", methods=["POST"], endpoint="api_work_summary")
    @login_required
    def attach_work_summary():
        data = json_body()
        summary = service.attach_work_summary(
            current_role=current_role(),
            user_id=current_user_id(),
            session_id=as_int(required(data, "session_id"), "session_id"),
            notes=data.get("notes"),
            products=_product_usages(data.get("products")),
            voice=_voice(data.get("voice")),
        )
        return ok(summary, status=201)

    @app.route("/api/check-ins/<int:session_id>/summary", methods=["GET"], endpoint="api_work_summary_get")
    @login_required
    def get_work_summary(session_id: int):
        return ok(service.get_work_summary(current_role=current_role(), user_id=current_user_id(), session_id=session_id))
