from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.geo import Coordinates
from ..core.enums import TaskPriority, TaskStatus
from .model import Task, TaskUpdate


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        assigned_to: int,
        assigned_by: int,
        site_id: Optional[int],
        priority: TaskPriority,
        due_date: Optional[datetime],
        requires_photo: bool,
        requires_location: bool,
        estimated_hours: Optional[float],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_tasks(self, *, assigned_to: Optional[int] = None, assigned_by: Optional[int] = None) -> Sequence[Task]:
        raise NotImplementedError

    def set_actual_hours(self, task_id: int, hours: float) -> bool:
        raise NotImplementedError

    def add_update(
        self,
        *,
        task_id: int,
        user_id: int,
        status: TaskStatus,
        notes: Optional[str],
        photo_url: Optional[str],
        location: Optional[Coordinates],
        hours_spent: Optional[float],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_updates(self, task_id: int) -> Sequence[TaskUpdate]:
        """Oldest first."""
        raise NotImplementedError

    def latest_statuses(self, task_ids: Sequence[int]) -> dict[int, TaskStatus]:
        """Status of the newest update per task; tasks without updates are absent."""
        raise NotImplementedError
