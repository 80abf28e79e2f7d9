from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an account that can sign in.

    Plain data object; no DB access here.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    phone: Optional[str] = None
    position_id: Optional[int] = None
    site_id: Optional[int] = None
    is_active: bool = True


@dataclass(frozen=True)
class PreRegistration:
    """Manager-entered record that sets role/position/site on first sign-up."""

    pre_registration_id: int
    full_name: str
    role: Role
    created_by: int
    email: Optional[str] = None
    phone: Optional[str] = None
    position_id: Optional[int] = None
    site_id: Optional[int] = None
    is_used: bool = False
