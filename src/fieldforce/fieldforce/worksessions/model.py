from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..common.geo import Coordinates
from ..core.enums import SessionStatus


@dataclass(frozen=True)
class WorkSession:
    """One check-in at a site, closed by a single check-out."""

    session_id: int
    employee_id: int
    site_id: int
    check_in_time: datetime
    status: SessionStatus
    check_out_time: Optional[datetime] = None
    check_in_location: Optional[Coordinates] = None
    check_out_location: Optional[Coordinates] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    schedule_id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.CHECKED_IN


@dataclass(frozen=True)
class ProductUsage:
    product_id: int
    quantity: float
    notes: Optional[str] = None


@dataclass(frozen=True)
class VoiceMeta:
    transcription: Optional[str] = None
    translation: Optional[str] = None
    recording_url: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class WorkSummary:
    summary_id: int
    session_id: int
    notes: str
    created_at: datetime
    products: list[ProductUsage] = field(default_factory=list)
    voice: Optional[VoiceMeta] = None


@dataclass(frozen=True)
class SessionReportRow:
    """Flattened session row joined with employee and site names."""

    session_id: int
    employee_id: int
    employee_name: str
    site_id: int
    site_name: str
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: SessionStatus
