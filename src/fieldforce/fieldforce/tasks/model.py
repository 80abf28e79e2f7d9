from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.geo import Coordinates
from ..core.enums import TaskPriority, TaskStatus

TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})


@dataclass(frozen=True)
class Task:
    task_id: int
    title: str
    assigned_to: int
    assigned_by: int
    created_at: datetime
    description: Optional[str] = None
    site_id: Optional[int] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    requires_photo: bool = False
    requires_location: bool = False
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None


@dataclass(frozen=True)
class TaskUpdate:
    """Append-only progress entry; the latest one defines the task status."""

    update_id: int
    task_id: int
    user_id: int
    status: TaskStatus
    created_at: datetime
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    location: Optional[Coordinates] = None
    hours_spent: Optional[float] = None


@dataclass(frozen=True)
class TaskView:
    task: Task
    status: TaskStatus


def current_status(updates: Sequence[TaskUpdate]) -> TaskStatus:
    if not updates:
        return TaskStatus.PENDING
    return max(updates, key=lambda u: u.update_id).status
