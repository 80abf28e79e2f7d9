from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.web import (
    as_bool,
    as_int,
    current_role,
    current_user_id,
    json_body,
    login_required,
    ok,
    optional_date,
    optional_int,
    required,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route("/api/schedules/my", methods=["GET"], endpoint="api_my_schedules")
    @login_required
    def my_schedules():
        return ok(
            service.schedules_for(
                current_user_id(),
                start=optional_date(request.args.get("start")),
                end=optional_date(request.args.get("end")),
            )
        )

    @app.route("/api/schedules", methods=["GET"], endpoint="api_schedules")
    @login_required
    def list_schedules():
        return ok(
            service.list_schedules(
                current_role=current_role(),
                employee_id=optional_int(request.args.get("employee_id"), "employee_id"),
                start=optional_date(request.args.get("start")),
                end=optional_date(request.args.get("end")),
                include_cancelled=as_bool(request.args.get("include_cancelled", "0")),
            )
        )

    @app.route("/api/schedules", methods=["POST"], endpoint="api_schedule_create")
    @login_required
    def create_schedule():
        data = json_body()
        schedule = service.create_schedule(
            current_role=current_role(),
            created_by=current_user_id(),
            employee_id=as_int(required(data, "employee_id"), "employee_id"),
            site_id=as_int(required(data, "site_id"), "site_id"),
            title=data.get("title", ""),
            start_date=parse_iso_date(required(data, "start_date")),
            end_date=parse_iso_date(required(data, "end_date")),
            start_time=parse_hhmm(required(data, "start_time")),
            end_time=parse_hhmm(required(data, "end_time")),
            description=data.get("description"),
        )
        return ok(schedule, status=201)

    @app.route("/api/schedules/<int:schedule_id>/cancel", methods=["POST"], endpoint="api_schedule_cancel")
    @login_required
    def cancel_schedule(schedule_id: int):
        service.cancel_schedule(current_role=current_role(), schedule_id=schedule_id)
        return ok(message="Schedule cancelled")
