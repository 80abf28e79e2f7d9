from __future__ import annotations

import pytest

from src.fieldforce.fieldforce.core.enums import Action, Role
from src.fieldforce.fieldforce.core.exceptions import AuthorizationError
from src.fieldforce.fieldforce.core.permissions import can, require


@pytest.mark.parametrize("role", list(Role))
def test_everyone_can_check_in_and_submit_requests(role):
    assert can(role, Action.CHECK_IN)
    assert can(role, Action.SUBMIT_REQUEST)


def test_employee_cannot_resolve_or_view_reports():
    assert not can(Role.EMPLOYEE, Action.RESOLVE_REQUEST)
    assert not can(Role.EMPLOYEE, Action.VIEW_REPORTS)
    assert not can(Role.EMPLOYEE, Action.MANAGE_SITES)


def test_manager_is_staff_but_not_admin():
    assert can(Role.MANAGER, Action.RESOLVE_REQUEST)
    assert can(Role.MANAGER, Action.ASSIGN_TASKS)
    assert not can(Role.MANAGER, Action.EDIT_ANY_SESSION)
    assert not can(Role.MANAGER, Action.ASSIGN_ADMIN_ROLE)


def test_admin_can_do_everything():
    assert all(can(Role.ADMIN, action) for action in Action)


def test_role_values_from_session_strings_are_accepted():
    assert can("manager", Action.VIEW_REPORTS)


def test_require_raises_with_message():
    with pytest.raises(AuthorizationError, match="admins only"):
        require(Role.MANAGER, Action.EDIT_ANY_SESSION, "admins only")
