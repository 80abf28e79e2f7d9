from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee, PreRegistration


class UserRepository(Protocol):
    """Repository interface for employees.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def lock(self, user_id: int) -> bool:
        """Row-lock the employee for the rest of the current transaction."""
        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        username: str,
        email: Optional[str],
        phone: Optional[str],
        password_hash: str,
        role: Role,
        position_id: Optional[int],
        site_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def set_role(self, user_id: int, role: Role) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False, role: Optional[Role] = None) -> Sequence[Employee]:
        raise NotImplementedError


class PreRegistrationRepository(Protocol):
    def create(
        self,
        *,
        full_name: str,
        email: Optional[str],
        phone: Optional[str],
        role: Role,
        position_id: Optional[int],
        site_id: Optional[int],
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def find_unused(self, *, email: Optional[str], phone: Optional[str]) -> Optional[PreRegistration]:
        """Match by email first, then phone."""
        raise NotImplementedError

    def mark_used(self, pre_registration_id: int) -> bool:
        raise NotImplementedError

    def list_all(self, *, include_used: bool = False) -> Sequence[PreRegistration]:
        raise NotImplementedError
