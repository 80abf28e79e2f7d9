from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Action, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..core.permissions import can, require
from ..database.unit_of_work import UnitOfWork
from ..sites.repository import PositionRepository, SiteRepository
from .model import Employee, PreRegistration
from .repository import PreRegistrationRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    site_id: Optional[int]


def _session_user(user: Employee) -> SessionUser:
    return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role, site_id=user.site_id)


class AuthService:
    """Use case: sign in and first-time sign-up."""

    def __init__(self, users: UserRepository, pre_registrations: PreRegistrationRepository, uow: UnitOfWork):
        self._users = users
        self._pre_registrations = pre_registrations
        self._uow = uow

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            logger.warning("Failed login for %r (unknown or inactive)", username)
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # Placeholder or corrupted hash values.
            ok = False

        if not ok:
            logger.warning("Failed login for %r (bad password)", username)
            raise AuthenticationError("Invalid username or password")

        return _session_user(user)

    def sign_up(
        self,
        *,
        full_name: str,
        username: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
    ) -> Employee:
        full_name = require_non_empty(full_name, "Full name")
        username = require_non_empty(username, "Username")
        email = require_non_empty(email, "Email").lower()
        if "@" not in email:
            raise ValidationError("Email is not valid")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        phone = optional_text(phone)

        with self._uow.transaction():
            if self._users.get_by_username(username):
                raise ConflictError("Username already exists")
            if self._users.get_by_email(email):
                raise ConflictError("Email already registered")

            pre = self._pre_registrations.find_unused(email=email, phone=phone)
            role = pre.role if pre else Role.EMPLOYEE
            user_id = self._users.create_user(
                full_name=full_name,
                username=username,
                email=email,
                phone=phone,
                password_hash=generate_password_hash(password),
                role=role,
                position_id=pre.position_id if pre else None,
                site_id=pre.site_id if pre else None,
            )
            if pre and not self._pre_registrations.mark_used(pre.pre_registration_id):
                raise ConflictError("Pre-registration was already used")

        logger.info(
            "User %s signed up as %s%s",
            user_id,
            role.value,
            f" (pre-registration {pre.pre_registration_id})" if pre else "",
        )
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Employee not found")
        return user


class EmployeeService:
    """Use case: manage employees and pre-registrations (manager/admin)."""

    def __init__(
        self,
        users: UserRepository,
        pre_registrations: PreRegistrationRepository,
        *,
        sites: Optional[SiteRepository] = None,
        positions: Optional[PositionRepository] = None,
    ):
        self._users = users
        self._pre_registrations = pre_registrations
        self._sites = sites
        self._positions = positions

    def get_employee(self, user_id: int) -> Employee:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("Employee not found")
        return user

    def list_employees(self, *, current_role: Role, active_only: bool = False, role: Optional[Role] = None) -> list[Employee]:
        require(current_role, Action.MANAGE_EMPLOYEES)
        return list(self._users.list_all(active_only=active_only, role=role))

    def _check_references(self, *, position_id: Optional[int], site_id: Optional[int]) -> None:
        if position_id is not None and self._positions and not self._positions.get_by_id(int(position_id)):
            raise ValidationError("Position does not exist")
        if site_id is not None and self._sites:
            site = self._sites.get_by_id(int(site_id))
            if not site or not site.is_active:
                raise ValidationError("Site does not exist or is inactive")

    def pre_register(
        self,
        *,
        current_role: Role,
        created_by: int,
        full_name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        role: Role = Role.EMPLOYEE,
        position_id: Optional[int] = None,
        site_id: Optional[int] = None,
    ) -> int:
        require(current_role, Action.MANAGE_EMPLOYEES)
        role = Role(role)
        if role == Role.ADMIN:
            require(current_role, Action.ASSIGN_ADMIN_ROLE, "Only an admin can grant the admin role")

        full_name = require_non_empty(full_name, "Full name")
        email = (optional_text(email) or "").lower() or None
        phone = optional_text(phone)
        if not email and not phone:
            raise ValidationError("Email or phone is required for pre-registration")
        self._check_references(position_id=position_id, site_id=site_id)

        pre_id = self._pre_registrations.create(
            full_name=full_name,
            email=email,
            phone=phone,
            role=role,
            position_id=position_id,
            site_id=site_id,
            created_by=int(created_by),
        )
        logger.info("Pre-registration %s created for %s as %s", pre_id, email or phone, role.value)
        return pre_id

    def list_pre_registrations(self, *, current_role: Role, include_used: bool = False) -> list[PreRegistration]:
        require(current_role, Action.MANAGE_EMPLOYEES)
        return list(self._pre_registrations.list_all(include_used=include_used))

    def change_role(self, *, current_role: Role, actor_id: int, user_id: int, new_role: Role) -> Employee:
        require(current_role, Action.MANAGE_EMPLOYEES)
        new_role = Role(new_role)
        user = self.get_employee(user_id)

        if new_role == Role.ADMIN or user.role == Role.ADMIN:
            if not can(current_role, Action.ASSIGN_ADMIN_ROLE):
                raise AuthorizationError("Only an admin can grant or revoke the admin role")
        if user.user_id == int(actor_id) and new_role != user.role:
            raise ValidationError("You cannot change your own role")

        if user.role != new_role:
            self._users.set_role(user.user_id, new_role)
            logger.info("User %s role %s -> %s by %s", user.user_id, user.role.value, new_role.value, actor_id)
        return self.get_employee(user.user_id)

    def deactivate(self, *, current_role: Role, actor_id: int, user_id: int) -> None:
        require(current_role, Action.MANAGE_EMPLOYEES)
        user = self.get_employee(user_id)
        if user.user_id == int(actor_id):
            raise ValidationError("You cannot deactivate your own account")
        if user.role == Role.ADMIN and not can(current_role, Action.ASSIGN_ADMIN_ROLE):
            raise AuthorizationError("Only an admin can deactivate an admin")
        self._users.set_active(user.user_id, is_active=False)
        logger.info("User %s deactivated by %s", user.user_id, actor_id)

    def reactivate(self, *, current_role: Role, user_id: int) -> None:
        require(current_role, Action.MANAGE_EMPLOYEES)
        user = self.get_employee(user_id)
        self._users.set_active(user.user_id, is_active=True)
        logger.info("User %s reactivated", user.user_id)
