from __future__ import annotations

from flask import Flask, request

from ..common.web import as_bool, current_user_id, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.notification_service

    @app.route("/api/notifications", methods=["GET"], endpoint="api_notifications")
    @login_required
    def list_notifications():
        unread_only = as_bool(request.args.get("unread", "0"))
        return ok(service.list_for(current_user_id(), unread_only=unread_only))

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="api_notifications_unread_count")
    @login_required
    def unread_count():
        return ok({"count": service.unread_count(current_user_id())})

    @app.route("/api/notifications/<int:notification_id>/read", methods=["PATCH", "POST"], endpoint="api_notification_read")
    @login_required
    def mark_read(notification_id: int):
        service.mark_read(user_id=current_user_id(), notification_id=notification_id)
        return ok(message="Marked as read")

    @app.route("/api/notifications/read-all", methods=["PATCH", "POST"], endpoint="api_notifications_read_all")
    @login_required
    def mark_all_read():
        updated = service.mark_all_read(user_id=current_user_id())
        return ok({"updated": updated})

    @app.route("/api/notifications/<int:notification_id>", methods=["DELETE"], endpoint="api_notification_delete")
    @login_required
    def delete(notification_id: int):
        service.delete(user_id=current_user_id(), notification_id=notification_id)
        return ok(message="Notification deleted")
