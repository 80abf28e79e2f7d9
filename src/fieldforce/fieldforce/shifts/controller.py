from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.web import (
    as_int,
    current_role,
    current_user_id,
    json_body,
    login_required,
    ok,
    optional_datetime,
    optional_int,
    required,
)
from ..core.enums import Recurrence
from ..core.exceptions import ValidationError
from ..container import Container


def _recurrence(value) -> Recurrence:
    try:
        return Recurrence(value or Recurrence.NONE.value)
    except ValueError:
        raise ValidationError(f"Unknown recurrence: {value!r}")


def register(app: Flask, container: Container) -> None:
    service = container.shift_service

    @app.route("/api/shifts/my", methods=["GET"], endpoint="api_my_shifts")
    @login_required
    def my_shifts():
        return ok(
            service.shifts_for(
                current_user_id(),
                start=optional_datetime(request.args.get("start")),
                end=optional_datetime(request.args.get("end")),
            )
        )

    @app.route("/api/shifts", methods=["GET"], endpoint="api_shifts")
    @login_required
    def list_shifts():
        return ok(
            service.list_shifts(
                current_role=current_role(),
                employee_id=optional_int(request.args.get("employee_id"), "employee_id"),
                start=optional_datetime(request.args.get("start")),
                end=optional_datetime(request.args.get("end")),
            )
        )

    @app.route("/api/shifts", methods=["POST"], endpoint="api_shift_create")
    @login_required
    def create_shift():
        data = json_body()
        view = service.create_shift(
            current_role=current_role(),
            employee_id=as_int(required(data, "employee_id"), "employee_id"),
            title=data.get("title", ""),
            start_time=parse_iso_datetime(required(data, "start_time")),
            end_time=parse_iso_datetime(required(data, "end_time")),
            site_id=optional_int(data.get("site_id"), "site_id"),
            recurrence=_recurrence(data.get("recurrence")),
            notes=data.get("notes"),
        )
        return ok(view, status=201)

    @app.route("/api/shifts/<int:shift_id>/cancel", methods=["POST"], endpoint="api_shift_cancel")
    @login_required
    def cancel_shift(shift_id: int):
        return ok(service.cancel_shift(current_role=current_role(), shift_id=shift_id))

    @app.route("/api/shifts/<int:shift_id>/complete", methods=["POST"], endpoint="api_shift_complete")
    @login_required
    def complete_shift(shift_id: int):
        data = json_body()
        return ok(
            service.complete_shift(
                current_role=current_role(),
                shift_id=shift_id,
                overtime_hours=data.get("overtime_hours", 0),
            )
        )
