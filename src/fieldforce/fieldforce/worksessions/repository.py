from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.geo import Coordinates
from ..core.enums import SessionStatus
from .model import ProductUsage, SessionReportRow, VoiceMeta, WorkSession, WorkSummary


class WorkSessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def get_active_for_employee(self, employee_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        employee_id: int,
        site_id: int,
        schedule_id: Optional[int],
        check_in_time: datetime,
        location: Optional[Coordinates],
        photo_url: Optional[str],
        notes: Optional[str],
    ) -> int:
        """Insert a checked_in session; raises ConflictError if one is already open."""
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        session_id: int,
        check_out_time: datetime,
        location: Optional[Coordinates],
        notes: Optional[str],
    ) -> bool:
        """Close an open session; False when it was already checked out."""
        raise NotImplementedError

    def admin_update(
        self,
        *,
        session_id: int,
        check_in_time: datetime,
        check_out_time: Optional[datetime],
        status: SessionStatus,
        notes: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def list_sessions(
        self,
        *,
        employee_id: Optional[int] = None,
        site_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 200,
    ) -> Sequence[WorkSession]:
        """Sessions whose check-in falls in [start, end)."""
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        employee_id: Optional[int] = None,
        site_id: Optional[int] = None,
    ) -> Sequence[SessionReportRow]:
        raise NotImplementedError


class WorkSummaryRepository(Protocol):
    def get_for_session(self, session_id: int) -> Optional[WorkSummary]:
        raise NotImplementedError

    def create(
        self,
        *,
        session_id: int,
        notes: str,
        products: Sequence[ProductUsage],
        voice: Optional[VoiceMeta],
        created_at: datetime,
    ) -> int:
        """Raises ConflictError when the session already has a summary."""
        raise NotImplementedError
