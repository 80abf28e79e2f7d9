from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, day_bounds, now_local
from ..common.geo import Coordinates
from ..common.validators import optional_text, require_positive
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import Action, Role, SessionStatus
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..core.permissions import can, require
from ..database.unit_of_work import UnitOfWork
from ..schedules.repository import ScheduleRepository
from ..sites.repository import ProductRepository, SiteRepository
from ..users.repository import UserRepository
from .factory import CheckInPolicyFactory
from .model import ProductUsage, VoiceMeta, WorkSession, WorkSummary
from .policies.base import CheckInEvidence
from .repository import WorkSessionRepository, WorkSummaryRepository
from .translator import PassthroughTranslator, Translator

logger = logging.getLogger(__name__)


class WorkSessionService:
    """Check-in -> check-out -> work summary lifecycle.

    At most one ``checked_in`` session exists per employee. The check is made
    under a row lock on the employee and backed by a unique index.
    """

    def __init__(
        self,
        sessions: WorkSessionRepository,
        summaries: WorkSummaryRepository,
        users: UserRepository,
        sites: SiteRepository,
        products: ProductRepository,
        uow: UnitOfWork,
        *,
        schedules: Optional[ScheduleRepository] = None,
        policy_factory: Optional[CheckInPolicyFactory] = None,
        translator: Optional[Translator] = None,
        require_summary_products: bool = True,
        summary_language: str = "en",
        clock: Clock = now_local,
    ):
        self._sessions = sessions
        self._summaries = summaries
        self._users = users
        self._sites = sites
        self._products = products
        self._uow = uow
        self._schedules = schedules
        self._policies = policy_factory or CheckInPolicyFactory()
        self._translator = translator or PassthroughTranslator()
        self._require_summary_products = bool(require_summary_products)
        self._summary_language = summary_language
        self._clock = clock

    def check_in(
        self,
        *,
        current_role: Role,
        employee_id: int,
        site_id: int,
        location: Optional[Coordinates] = None,
        photo_url: Optional[str] = None,
        notes: Optional[str] = None,
        schedule_id: Optional[int] = None,
    ) -> WorkSession:
        require(current_role, Action.CHECK_IN)
        employee_id = int(employee_id)
        employee = self._users.get_by_id(employee_id)
        if not employee or not employee.is_active:
            raise ValidationError("Employee does not exist or is inactive")

        site = self._sites.get_by_id(int(site_id))
        if not site or not site.is_active:
            raise ValidationError("Site does not exist or is inactive")

        if schedule_id is not None:
            self._check_schedule(employee_id, site.site_id, int(schedule_id))

        evidence = CheckInEvidence(site=site, location=location, photo_url=optional_text(photo_url))
        for policy in self._policies.for_site(site):
            policy.check(evidence)

        with self._uow.transaction():
            self._users.lock(employee_id)
            active = self._sessions.get_active_for_employee(employee_id)
            if active:
                logger.warning("Employee %s already checked in (session %s)", employee_id, active.session_id)
                raise ConflictError("You are already checked in; check out first")
            session_id = self._sessions.create_checkin(
                employee_id=employee_id,
                site_id=site.site_id,
                schedule_id=schedule_id,
                check_in_time=self._clock(),
                location=location,
                photo_url=evidence.photo_url,
                notes=optional_text(notes),
            )

        logger.info("Employee %s checked in at site %s (session %s)", employee_id, site.site_id, session_id)
        return self._get(session_id)

    def check_out(
        self,
        *,
        current_role: Role,
        user_id: int,
        session_id: int,
        location: Optional[Coordinates] = None,
        notes: Optional[str] = None,
    ) -> WorkSession:
        session = self._owned(current_role, user_id, session_id)
        if not session.is_active:
            raise InvalidStateError("Session is already checked out")

        check_out_time = max(self._clock(), session.check_in_time)
        closed = self._sessions.update_checkout(
            session_id=session.session_id,
            check_out_time=check_out_time,
            location=location,
            notes=optional_text(notes),
        )
        if not closed:
            raise InvalidStateError("Session is already checked out")

        logger.info("Session %s checked out by user %s", session.session_id, user_id)
        return self._get(session.session_id)

    def attach_work_summary(
        self,
        *,
        current_role: Role,
        user_id: int,
        session_id: int,
        notes: Optional[str],
        products: Sequence[ProductUsage] = (),
        voice: Optional[VoiceMeta] = None,
    ) -> WorkSummary:
        session = self._owned(current_role, user_id, session_id)
        if session.is_active:
            raise InvalidStateError("Check out before submitting the work summary")

        notes = optional_text(notes)
        voice = self._complete_voice(voice)
        if not notes and not (voice and voice.transcription):
            raise ValidationError("Summary notes are required")
        usages = self._validated_products(products)

        with self._uow.transaction():
            if self._summaries.get_for_session(session.session_id):
                raise ConflictError("A work summary was already submitted for this session")
            self._summaries.create(
                session_id=session.session_id,
                notes=notes or voice.transcription,
                products=usages,
                voice=voice,
                created_at=self._clock(),
            )

        logger.info("Work summary for session %s (%d products)", session.session_id, len(usages))
        return self._summaries.get_for_session(session.session_id)

    def get_work_summary(self, *, current_role: Role, user_id: int, session_id: int) -> WorkSummary:
        session = self._owned(current_role, user_id, session_id, viewing=True)
        summary = self._summaries.get_for_session(session.session_id)
        if not summary:
            raise NotFoundError("No work summary for this session")
        return summary

    def active_session_for(self, employee_id: int) -> Optional[WorkSession]:
        return self._sessions.get_active_for_employee(int(employee_id))

    def sessions_for(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[WorkSession]:
        window_start, window_end = self._window(start, end)
        return list(
            self._sessions.list_sessions(employee_id=int(employee_id), start=window_start, end=window_end, limit=limit)
        )

    def list_sessions(
        self,
        *,
        current_role: Role,
        employee_id: Optional[int] = None,
        site_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[WorkSession]:
        require(current_role, Action.VIEW_ALL_SESSIONS)
        window_start, window_end = self._window(start, end)
        return list(
            self._sessions.list_sessions(
                employee_id=employee_id,
                site_id=site_id,
                status=status,
                start=window_start,
                end=window_end,
                limit=limit,
            )
        )

    def correct_session(
        self,
        *,
        current_role: Role,
        session_id: int,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> WorkSession:
        """Admin corrective edit of recorded times/notes."""
        require(current_role, Action.EDIT_ANY_SESSION, "Only an admin can correct sessions")
        session = self._get(session_id)

        new_in = check_in_time or session.check_in_time
        new_out = check_out_time or session.check_out_time
        if new_out is not None and new_out < new_in:
            raise ValidationError("Check-out time cannot be earlier than check-in time")
        status = SessionStatus.CHECKED_OUT if new_out is not None else session.status
        new_notes = optional_text(notes) if notes is not None else session.notes

        self._sessions.admin_update(
            session_id=session.session_id,
            check_in_time=new_in,
            check_out_time=new_out,
            status=status,
            notes=new_notes,
        )
        logger.info("Session %s corrected (in=%s, out=%s)", session.session_id, new_in, new_out)
        return self._get(session.session_id)

    # -------- Helpers --------
    def _get(self, session_id: int) -> WorkSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Work session not found")
        return session

    def _owned(self, current_role: Role, user_id: int, session_id: int, *, viewing: bool = False) -> WorkSession:
        session = self._get(session_id)
        if session.employee_id == int(user_id):
            return session
        action = Action.VIEW_ALL_SESSIONS if viewing else Action.EDIT_ANY_SESSION
        if not can(current_role, action):
            raise AuthorizationError("This session belongs to another employee")
        return session

    def _check_schedule(self, employee_id: int, site_id: int, schedule_id: int) -> None:
        if not self._schedules:
            return
        schedule = self._schedules.get_by_id(schedule_id)
        if not schedule or schedule.employee_id != employee_id:
            raise ValidationError("Schedule does not belong to this employee")
        if schedule.site_id != site_id:
            raise ValidationError("Schedule is for a different site")
        if not schedule.covers(self._clock().date()):
            raise ValidationError("Schedule is not active today")

    def _validated_products(self, products: Sequence[ProductUsage]) -> list[ProductUsage]:
        usages = [
            dataclasses.replace(
                p,
                product_id=int(p.product_id),
                quantity=require_positive(p.quantity, "Quantity"),
                notes=optional_text(p.notes),
            )
            for p in products
        ]
        if not usages:
            if self._require_summary_products:
                raise ValidationError("At least one product must be reported")
            return []

        ids = [u.product_id for u in usages]
        if len(set(ids)) != len(ids):
            raise ValidationError("Each product can be listed only once")
        known = {p.product_id: p for p in self._products.get_many(ids)}
        for product_id in ids:
            product = known.get(product_id)
            if not product or not product.is_active:
                raise ValidationError(f"Product {product_id} does not exist or is inactive")
        return usages

    def _complete_voice(self, voice: Optional[VoiceMeta]) -> Optional[VoiceMeta]:
        if voice is None:
            return None
        transcription = optional_text(voice.transcription)
        translation = optional_text(voice.translation)
        if transcription and not translation:
            translation = self._translator.translate(
                transcription, source_language=voice.language, target_language=self._summary_language
            )
        if not (transcription or translation or voice.recording_url):
            return None
        return dataclasses.replace(voice, transcription=transcription, translation=translation)

    @staticmethod
    def _window(start: Optional[date], end: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
        if start and end and end < start:
            raise ValidationError("End date must be on or after start date")
        window_start = day_bounds(start, start)[0] if start else None
        window_end = day_bounds(end, end)[1] if end else None
        return window_start, window_end
