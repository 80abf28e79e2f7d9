from __future__ import annotations

from flask import Flask

from ..common.web import current_role, current_user_id, json_body, login_required, ok, optional_date
from ..core.enums import AnnouncementType, TargetRole
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.announcement_service

    @app.route("/api/announcements", methods=["GET"], endpoint="api_announcements")
    @login_required
    def list_announcements():
        return ok(service.list_active(role=current_role()))

    @app.route("/api/announcements", methods=["POST"], endpoint="api_announcement_create")
    @login_required
    def create_announcement():
        data = json_body()
        try:
            a_type = AnnouncementType(data.get("type", AnnouncementType.GENERAL.value))
            target = TargetRole(data.get("target_role", TargetRole.ALL.value))
        except ValueError as e:
            raise ValidationError(str(e))
        announcement = service.create_announcement(
            current_role=current_role(),
            created_by=current_user_id(),
            title=data.get("title", ""),
            content=data.get("content", ""),
            type=a_type,
            target_role=target,
            restricted_start_date=optional_date(data.get("restricted_start_date")),
            restricted_end_date=optional_date(data.get("restricted_end_date")),
        )
        return ok(announcement, status=201)

    @app.route("/api/announcements/<int:announcement_id>", methods=["DELETE"], endpoint="api_announcement_deactivate")
    @login_required
    def deactivate_announcement(announcement_id: int):
        service.deactivate_announcement(current_role=current_role(), announcement_id=announcement_id)
        return ok(message="Announcement deactivated")

    @app.route("/api/restricted-periods", methods=["GET"], endpoint="api_restricted_periods")
    @login_required
    def restricted_periods():
        return ok(service.restricted_periods())
