from __future__ import annotations

from .enums import Action, Role
from .exceptions import AuthorizationError

_STAFF = frozenset({Role.MANAGER, Role.ADMIN})
_EVERYONE = frozenset(Role)

_ALLOWED: dict[Action, frozenset[Role]] = {
    Action.CHECK_IN: _EVERYONE,
    Action.SUBMIT_REQUEST: _EVERYONE,
    Action.VIEW_ALL_SESSIONS: _STAFF,
    Action.EDIT_ANY_SESSION: frozenset({Role.ADMIN}),
    Action.RESOLVE_REQUEST: _STAFF,
    Action.MANAGE_SITES: _STAFF,
    Action.MANAGE_EMPLOYEES: _STAFF,
    Action.ASSIGN_ADMIN_ROLE: frozenset({Role.ADMIN}),
    Action.MANAGE_SHIFTS: _STAFF,
    Action.MANAGE_SCHEDULES: _STAFF,
    Action.ASSIGN_TASKS: _STAFF,
    Action.MANAGE_ANNOUNCEMENTS: _STAFF,
    Action.VIEW_REPORTS: _STAFF,
}


def can(role: Role, action: Action) -> bool:
    return Role(role) in _ALLOWED.get(action, frozenset())


def require(role: Role, action: Action, message: str = "You do not have permission") -> None:
    if not can(role, action):
        raise AuthorizationError(message)
