from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import Clock, now_local
from ..common.geo import Coordinates
from ..common.validators import optional_text, require_non_empty, require_non_negative
from ..core.enums import Action, NotificationPriority, NotificationType, Role, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from ..core.permissions import can, require
from ..database.unit_of_work import UnitOfWork
from ..notifications.service import NotificationService
from ..sites.repository import SiteRepository
from ..users.repository import UserRepository
from .model import TERMINAL_STATUSES, Task, TaskUpdate, TaskView, current_status
from .repository import TaskRepository

logger = logging.getLogger(__name__)

_PRIORITY_TO_NOTIFICATION = {
    TaskPriority.LOW: NotificationPriority.LOW,
    TaskPriority.MEDIUM: NotificationPriority.NORMAL,
    TaskPriority.HIGH: NotificationPriority.HIGH,
    TaskPriority.URGENT: NotificationPriority.URGENT,
}


class TaskService:
    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        sites: SiteRepository,
        notifications: NotificationService,
        uow: UnitOfWork,
        *,
        clock: Clock = now_local,
    ):
        self._tasks = tasks
        self._users = users
        self._sites = sites
        self._notifications = notifications
        self._uow = uow
        self._clock = clock

    def create_task(
        self,
        *,
        current_role: Role,
        assigned_by: int,
        assigned_to: int,
        title: str,
        description: Optional[str] = None,
        site_id: Optional[int] = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: Optional[datetime] = None,
        requires_photo: bool = False,
        requires_location: bool = False,
        estimated_hours: Optional[float] = None,
    ) -> TaskView:
        require(current_role, Action.ASSIGN_TASKS)
        title = require_non_empty(title, "Title")
        priority = TaskPriority(priority)
        if estimated_hours in (None, ""):
            estimated_hours = None
        else:
            estimated_hours = require_non_negative(estimated_hours, "Estimated hours")

        assignee = self._users.get_by_id(int(assigned_to))
        if not assignee or not assignee.is_active:
            raise ValidationError("Assignee does not exist or is inactive")
        if site_id is not None:
            site = self._sites.get_by_id(int(site_id))
            if not site or not site.is_active:
                raise ValidationError("Site does not exist or is inactive")

        with self._uow.transaction():
            task_id = self._tasks.create(
                title=title,
                description=optional_text(description),
                assigned_to=assignee.user_id,
                assigned_by=int(assigned_by),
                site_id=site_id,
                priority=priority,
                due_date=due_date,
                requires_photo=bool(requires_photo),
                requires_location=bool(requires_location),
                estimated_hours=estimated_hours,
                created_at=self._clock(),
            )
            due = f" (due {due_date:%Y-%m-%d %H:%M})" if due_date else ""
            self._notifications.notify(
                user_id=assignee.user_id,
                title="New task assigned",
                body=f"{title}{due}",
                type=NotificationType.TASK,
                related_id=task_id,
                priority=_PRIORITY_TO_NOTIFICATION[priority],
            )

        logger.info("Task %s assigned to %s by %s", task_id, assignee.user_id, assigned_by)
        return self.get_task(current_role=current_role, user_id=int(assigned_by), task_id=task_id)

    def add_update(
        self,
        *,
        current_role: Role,
        user_id: int,
        task_id: int,
        status: TaskStatus,
        notes: Optional[str] = None,
        photo_url: Optional[str] = None,
        location: Optional[Coordinates] = None,
        hours_spent: Optional[float] = None,
    ) -> TaskUpdate:
        task = self._visible(current_role, user_id, task_id)
        status = TaskStatus(status)
        if hours_spent in (None, ""):
            hours_spent = None
        else:
            hours_spent = require_non_negative(hours_spent, "Hours spent")
        photo_url = optional_text(photo_url)

        with self._uow.transaction():
            updates = list(self._tasks.list_updates(task.task_id))
            now_status = current_status(updates)
            if now_status in TERMINAL_STATUSES:
                raise InvalidStateError(f"Task is already {now_status.value}")
            if status == TaskStatus.PENDING and updates:
                raise InvalidStateError("A started task cannot go back to pending")
            if status == TaskStatus.CANCELLED and not can(current_role, Action.ASSIGN_TASKS):
                raise AuthorizationError("Only a manager can cancel a task")
            if status == TaskStatus.COMPLETED:
                if task.requires_photo and not photo_url:
                    raise ValidationError("This task needs a photo to be completed")
                if task.requires_location and location is None:
                    raise ValidationError("This task needs a GPS location to be completed")

            update_id = self._tasks.add_update(
                task_id=task.task_id,
                user_id=int(user_id),
                status=status,
                notes=optional_text(notes),
                photo_url=photo_url,
                location=location,
                hours_spent=hours_spent,
                created_at=self._clock(),
            )

            if status == TaskStatus.COMPLETED:
                total = sum(u.hours_spent or 0.0 for u in updates) + (hours_spent or 0.0)
                self._tasks.set_actual_hours(task.task_id, round(total, 2))
                self._notify_other_party(task, int(user_id), "Task completed", f"'{task.title}' was completed")
            elif status == TaskStatus.CANCELLED:
                self._notify_other_party(task, int(user_id), "Task cancelled", f"'{task.title}' was cancelled")

        logger.info("Task %s -> %s by user %s", task.task_id, status.value, user_id)
        return next(u for u in self._tasks.list_updates(task.task_id) if u.update_id == update_id)

    def get_task(self, *, current_role: Role, user_id: int, task_id: int) -> TaskView:
        task = self._visible(current_role, user_id, task_id)
        return TaskView(task=task, status=current_status(self._tasks.list_updates(task.task_id)))

    def updates_for(self, *, current_role: Role, user_id: int, task_id: int) -> list[TaskUpdate]:
        task = self._visible(current_role, user_id, task_id)
        return list(self._tasks.list_updates(task.task_id))

    def tasks_for(self, employee_id: int) -> list[TaskView]:
        return self._views(self._tasks.list_tasks(assigned_to=int(employee_id)))

    def list_tasks(self, *, current_role: Role, assigned_to: Optional[int] = None) -> list[TaskView]:
        require(current_role, Action.ASSIGN_TASKS)
        return self._views(self._tasks.list_tasks(assigned_to=assigned_to))

    def _views(self, tasks) -> list[TaskView]:
        tasks = list(tasks)
        statuses = self._tasks.latest_statuses([t.task_id for t in tasks])
        return [TaskView(task=t, status=statuses.get(t.task_id, TaskStatus.PENDING)) for t in tasks]

    def _visible(self, current_role: Role, user_id: int, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        if int(user_id) not in (task.assigned_to, task.assigned_by) and not can(current_role, Action.ASSIGN_TASKS):
            raise AuthorizationError("This task is assigned to someone else")
        return task

    def _notify_other_party(self, task: Task, actor_id: int, title: str, body: str) -> None:
        # The assigner hears about the assignee's progress and vice versa.
        recipient = task.assigned_by if actor_id == task.assigned_to else task.assigned_to
        if recipient == actor_id:
            return
        self._notifications.notify(
            user_id=recipient,
            title=title,
            body=body,
            type=NotificationType.TASK,
            related_id=task.task_id,
        )
