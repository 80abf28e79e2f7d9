from __future__ import annotations

from flask import Flask, request

from ..common.geo import Coordinates
from ..common.web import (
    as_bool,
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
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import ValidationError
from ..container import Container
from ..storage.controller import stored_upload


def _enum(enum_cls, value, default=None):
    if value in (None, ""):
        return default
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {enum_cls.__name__}: {value!r}")


def register(app: Flask, container: Container) -> None:
    service = container.task_service
    store = container.photo_store

    @app.route("/api/tasks/my", methods=["GET"], endpoint="api_my_tasks")
    @login_required
    def my_tasks():
        return ok(service.tasks_for(current_user_id()))

    @app.route("/api/tasks", methods=["GET"], endpoint="api_tasks")
    @login_required
    def list_tasks():
        return ok(
            service.list_tasks(
                current_role=current_role(),
                assigned_to=optional_int(request.args.get("assigned_to"), "assigned_to"),
            )
        )

    @app.route("/api/tasks", methods=["POST"], endpoint="api_task_create")
    @login_required
    def create_task():
        data = json_body()
        view = service.create_task(
            current_role=current_role(),
            assigned_by=current_user_id(),
            assigned_to=as_int(required(data, "assigned_to"), "assigned_to"),
            title=data.get("title", ""),
            description=data.get("description"),
            site_id=optional_int(data.get("site_id"), "site_id"),
            priority=_enum(TaskPriority, data.get("priority"), TaskPriority.MEDIUM),
            due_date=optional_datetime(data.get("due_date")),
            requires_photo=as_bool(data.get("requires_photo")),
            requires_location=as_bool(data.get("requires_location")),
            estimated_hours=data.get("estimated_hours"),
        )
        return ok(view, status=201)

    @app.route("/api/tasks/<int:task_id>", methods=["GET"], endpoint="api_task_get")
    @login_required
    def get_task(task_id: int):
        return ok(service.get_task(current_role=current_role(), user_id=current_user_id(), task_id=task_id))

    @app.route("/api/tasks/<int:task_id>/updates", methods=["GET"], endpoint="api_task_updates")
    @login_required
    def task_updates(task_id: int):
        return ok(service.updates_for(current_role=current_role(), user_id=current_user_id(), task_id=task_id))

    @app.route("/api/tasks/<int:task_id>/updates", methods=["POST"], endpoint="api_task_update_add")
    @login_required
    def add_update(task_id: int):
        if request.mimetype == "multipart/form-data":
            data = request.form.to_dict()
        else:
            data = json_body()
        with stored_upload(store, folder="tasks", photo_url=data.get("photo_url")) as photo_url:
            update = service.add_update(
                current_role=current_role(),
                user_id=current_user_id(),
                task_id=task_id,
                status=_enum(TaskStatus, required(data, "status")),
                notes=data.get("notes"),
                photo_url=photo_url,
                location=Coordinates.from_payload(data),
                hours_spent=data.get("hours_spent"),
            )
        return ok(update, status=201)
