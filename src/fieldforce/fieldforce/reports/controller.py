from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.web import current_role, current_user_id, login_required, ok, optional_int, required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.report_service

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="api_report_attendance")
    @login_required
    def attendance_report():
        user_id = current_user_id()
        employee_id = optional_int(request.args.get("employee_id"), "employee_id") or user_id
        year = optional_int(request.args.get("year"), "year") or now_local().year
        return ok(
            service.attendance_report(
                current_role=current_role(),
                user_id=user_id,
                employee_id=employee_id,
                year=year,
            )
        )

    @app.route("/api/reports/client-visits", methods=["GET"], endpoint="api_report_client_visits")
    @login_required
    def client_visit_report():
        return ok(
            service.client_visit_report(
                current_role=current_role(),
                site_id=optional_int(request.args.get("site_id"), "site_id"),
            )
        )

    @app.route("/api/reports/billing", methods=["GET"], endpoint="api_report_billing")
    @login_required
    def billing_report():
        args = request.args.to_dict()
        return ok(
            service.billing_report(
                current_role=current_role(),
                start_date=parse_iso_date(required(args, "start_date")),
                end_date=parse_iso_date(required(args, "end_date")),
            )
        )
