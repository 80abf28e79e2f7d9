from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for authorization."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class SessionStatus(str, Enum):
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class RequestStatus(str, Enum):
    """Approval workflow states (time-off / shift swap)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestKind(str, Enum):
    TIME_OFF = "time_off"
    SHIFT_SWAP = "shift_swap"


class Decision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ShiftStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Recurrence(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NotificationType(str, Enum):
    TIME_OFF = "time_off"
    SHIFT_SWAP = "shift_swap"
    SHIFT = "shift"
    TASK = "task"
    SCHEDULE = "schedule"
    GENERAL = "general"


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class AnnouncementType(str, Enum):
    GENERAL = "general"
    CLOSURE = "closure"
    RESTRICTION = "restriction"
    EMERGENCY = "emergency"


class TargetRole(str, Enum):
    ALL = "all"
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class Action(str, Enum):
    """Protected actions checked by ``core.permissions.can``."""

    CHECK_IN = "check_in"
    SUBMIT_REQUEST = "submit_request"
    VIEW_ALL_SESSIONS = "view_all_sessions"
    EDIT_ANY_SESSION = "edit_any_session"
    RESOLVE_REQUEST = "resolve_request"
    MANAGE_SITES = "manage_sites"
    MANAGE_EMPLOYEES = "manage_employees"
    ASSIGN_ADMIN_ROLE = "assign_admin_role"
    MANAGE_SHIFTS = "manage_shifts"
    MANAGE_SCHEDULES = "manage_schedules"
    ASSIGN_TASKS = "assign_tasks"
    MANAGE_ANNOUNCEMENTS = "manage_announcements"
    VIEW_REPORTS = "view_reports"
