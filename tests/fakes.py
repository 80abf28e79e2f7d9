"""In-memory repositories and helpers shared by the service tests."""
from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from datetime import datetime, timedelta

from src.fieldforce.fieldforce.core.enums import (
    RequestKind,
    RequestStatus,
    Role,
    SessionStatus,
    ShiftStatus,
    TaskStatus,
)
from src.fieldforce.fieldforce.core.exceptions import ConflictError
from src.fieldforce.fieldforce.requests.model import ApprovalRequest, ShiftSwapPayload, TimeOffPayload
from src.fieldforce.fieldforce.shifts.model import Shift, overlaps
from src.fieldforce.fieldforce.sites.model import Product, Site
from src.fieldforce.fieldforce.users.model import Employee, PreRegistration
from src.fieldforce.fieldforce.announcements.model import Announcement
from src.fieldforce.fieldforce.notifications.model import Notification
from src.fieldforce.fieldforce.tasks.model import Task, TaskUpdate
from src.fieldforce.fieldforce.worksessions.model import SessionReportRow, WorkSession, WorkSummary


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def _snapshot(repo) -> dict:
    # Entities are frozen, so copying the containers is enough.
    return {k: v.copy() if isinstance(v, (dict, list, set)) else v for k, v in vars(repo).items()}


class FakeUnitOfWork:
    """Snapshots the given repositories and restores them when the block raises."""

    def __init__(self, *repos):
        self._repos = repos
        self._depth = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self):
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = [_snapshot(r) for r in self._repos]
        self._depth = 1
        try:
            yield
        except BaseException:
            for repo, state in zip(self._repos, snapshot):
                repo.__dict__.clear()
                repo.__dict__.update(state)
            self.rollbacks += 1
            raise
        else:
            self.commits += 1
        finally:
            self._depth = 0


class _Ids:
    def __init__(self):
        self._next_id = 1

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value


class FakeUserRepo(_Ids):
    def __init__(self, *employees: Employee):
        super().__init__()
        self.users: dict[int, Employee] = {}
        for e in employees:
            self.add(e)

    def add(self, employee: Employee) -> Employee:
        self.users[employee.user_id] = employee
        self._next_id = max(self._next_id, employee.user_id + 1)
        return employee

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_username(self, username):
        return next((u for u in self.users.values() if u.username == username), None)

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def lock(self, user_id):
        return int(user_id) in self.users

    def create_user(self, *, full_name, username, email, phone, password_hash, role, position_id, site_id):
        user_id = self._new_id()
        self.users[user_id] = Employee(
            user_id=user_id,
            full_name=full_name,
            username=username,
            password_hash=password_hash,
            role=role,
            email=email,
            phone=phone,
            position_id=position_id,
            site_id=site_id,
        )
        return user_id

    def set_role(self, user_id, role):
        self.users[int(user_id)] = dataclasses.replace(self.users[int(user_id)], role=role)
        return True

    def set_active(self, user_id, *, is_active):
        self.users[int(user_id)] = dataclasses.replace(self.users[int(user_id)], is_active=is_active)
        return True

    def list_all(self, *, active_only=False, role=None):
        return [
            u
            for u in self.users.values()
            if (not active_only or u.is_active) and (role is None or u.role == role)
        ]


class FakePreRegistrationRepo(_Ids):
    def __init__(self):
        super().__init__()
        self.items: dict[int, PreRegistration] = {}

    def create(self, *, full_name, email, phone, role, position_id, site_id, created_by):
        pid = self._new_id()
        self.items[pid] = PreRegistration(
            pre_registration_id=pid,
            full_name=full_name,
            role=role,
            created_by=created_by,
            email=email,
            phone=phone,
            position_id=position_id,
            site_id=site_id,
        )
        return pid

    def find_unused(self, *, email, phone):
        unused = [p for p in self.items.values() if not p.is_used]
        by_email = next((p for p in unused if email and p.email == email), None)
        return by_email or next((p for p in unused if phone and p.phone == phone), None)

    def mark_used(self, pre_registration_id):
        p = self.items.get(int(pre_registration_id))
        if not p or p.is_used:
            return False
        self.items[p.pre_registration_id] = dataclasses.replace(p, is_used=True)
        return True

    def list_all(self, *, include_used=False):
        return [p for p in self.items.values() if include_used or not p.is_used]


class FakeSiteRepo(_Ids):
    def __init__(self, *sites: Site):
        super().__init__()
        self.sites: dict[int, Site] = {s.site_id: s for s in sites}
        self._next_id = max(self.sites, default=0) + 1

    def get_by_id(self, site_id):
        return self.sites.get(int(site_id))

    def list_all(self, *, active_only=True):
        return [s for s in self.sites.values() if s.is_active or not active_only]

    def create(self, site):
        sid = self._new_id()
        self.sites[sid] = dataclasses.replace(site, site_id=sid)
        return sid

    def update(self, site):
        self.sites[site.site_id] = site
        return True

    def set_active(self, site_id, *, is_active):
        self.sites[int(site_id)] = dataclasses.replace(self.sites[int(site_id)], is_active=is_active)
        return True


class FakeProductRepo(_Ids):
    def __init__(self, *products: Product):
        super().__init__()
        self.products: dict[int, Product] = {p.product_id: p for p in products}
        self._next_id = max(self.products, default=0) + 1

    def get_by_id(self, product_id):
        return self.products.get(int(product_id))

    def get_many(self, product_ids):
        return [self.products[i] for i in product_ids if i in self.products]

    def list_all(self, *, active_only=True):
        return [p for p in self.products.values() if p.is_active or not active_only]

    def create(self, product):
        pid = self._new_id()
        self.products[pid] = dataclasses.replace(product, product_id=pid)
        return pid

    def update(self, product):
        self.products[product.product_id] = product
        return True

    def set_active(self, product_id, *, is_active):
        self.products[int(product_id)] = dataclasses.replace(self.products[int(product_id)], is_active=is_active)
        return True


class FakeNotificationRepo(_Ids):
    def __init__(self):
        super().__init__()
        self.items: dict[int, Notification] = {}

    def create(self, *, user_id, title, body, type, priority, related_id, created_at):
        nid = self._new_id()
        self.items[nid] = Notification(
            notification_id=nid,
            user_id=user_id,
            title=title,
            body=body,
            type=type,
            priority=priority,
            is_read=False,
            created_at=created_at,
            related_id=related_id,
        )
        return nid

    def get_by_id(self, notification_id):
        return self.items.get(int(notification_id))

    def list_for_user(self, user_id, *, unread_only=False, limit=100):
        rows = [n for n in self.items.values() if n.user_id == user_id and (not unread_only or not n.is_read)]
        return sorted(rows, key=lambda n: n.notification_id, reverse=True)[:limit]

    def count_unread(self, user_id):
        return sum(1 for n in self.items.values() if n.user_id == user_id and not n.is_read)

    def mark_read(self, notification_id):
        self.items[notification_id] = dataclasses.replace(self.items[notification_id], is_read=True)
        return True

    def mark_all_read(self, user_id):
        changed = 0
        for nid, n in list(self.items.items()):
            if n.user_id == user_id and not n.is_read:
                self.items[nid] = dataclasses.replace(n, is_read=True)
                changed += 1
        return changed

    def delete(self, notification_id):
        return self.items.pop(notification_id, None) is not None

    def for_user(self, user_id) -> list[Notification]:
        return [n for n in self.items.values() if n.user_id == user_id]


class FakeAnnouncementRepo(_Ids):
    def __init__(self):
        super().__init__()
        self.items: dict[int, Announcement] = {}

    def get_by_id(self, announcement_id):
        return self.items.get(int(announcement_id))

    def create(
        self,
        *,
        title,
        content,
        type,
        target_role,
        restricted_start_date,
        restricted_end_date,
        created_by,
        created_at,
    ):
        aid = self._new_id()
        self.items[aid] = Announcement(
            announcement_id=aid,
            title=title,
            content=content,
            type=type,
            target_role=target_role,
            created_by=created_by,
            created_at=created_at,
            restricted_start_date=restricted_start_date,
            restricted_end_date=restricted_end_date,
        )
        return aid

    def set_active(self, announcement_id, *, is_active):
        self.items[announcement_id] = dataclasses.replace(self.items[announcement_id], is_active=is_active)
        return True

    def list_active(self, *, type=None):
        return [a for a in self.items.values() if a.is_active and (type is None or a.type == type)]


class FakeShiftRepo(_Ids):
    def __init__(self):
        super().__init__()
        self.shifts: dict[int, Shift] = {}
        self.fail_reassign_of: set[int] = set()

    def add(self, shift: Shift) -> Shift:
        self.shifts[shift.shift_id] = shift
        self._next_id = max(self._next_id, shift.shift_id + 1)
        return shift

    def get_by_id(self, shift_id):
        return self.shifts.get(int(shift_id))

    def create(self, *, employee_id, title, start_time, end_time, site_id, recurrence, notes):
        sid = self._new_id()
        self.shifts[sid] = Shift(
            shift_id=sid,
            employee_id=employee_id,
            title=title,
            start_time=start_time,
            end_time=end_time,
            site_id=site_id,
            recurrence=recurrence,
            notes=notes,
        )
        return sid

    def set_status(self, shift_id, status, *, overtime_hours=None):
        shift = self.shifts[int(shift_id)]
        changes = {"status": status}
        if overtime_hours is not None:
            changes["overtime_hours"] = overtime_hours
        self.shifts[shift.shift_id] = dataclasses.replace(shift, **changes)
        return True

    def reassign(self, shift_id, *, from_employee_id, to_employee_id):
        if shift_id in self.fail_reassign_of:
            raise RuntimeError(f"injected failure reassigning shift {shift_id}")
        shift = self.shifts.get(shift_id)
        if not shift or shift.employee_id != from_employee_id or shift.status != ShiftStatus.SCHEDULED:
            return False
        self.shifts[shift_id] = dataclasses.replace(shift, employee_id=to_employee_id)
        return True

    def find_overlapping(self, *, employee_id, start_time, end_time, exclude_ids=()):
        excluded = set(exclude_ids)
        return [
            s
            for s in self.shifts.values()
            if s.employee_id == employee_id
            and s.status != ShiftStatus.CANCELLED
            and s.shift_id not in excluded
            and overlaps(s.start_time, s.end_time, start_time, end_time)
        ]

    def list_range(self, *, employee_id=None, start=None, end=None, include_cancelled=True):
        return [
            s
            for s in self.shifts.values()
            if (employee_id is None or s.employee_id == employee_id)
            and (start is None or s.end_time > start)
            and (end is None or s.start_time < end)
            and (include_cancelled or s.status != ShiftStatus.CANCELLED)
        ]


class FakeRequestRepo(_Ids):
    def __init__(self):
        super().__init__()
        self.items: dict[int, ApprovalRequest] = {}

    def create_time_off(self, *, requester_id, start_date, end_date, reason, created_at):
        rid = self._new_id()
        self.items[rid] = ApprovalRequest(
            request_id=rid,
            kind=RequestKind.TIME_OFF,
            requester_id=requester_id,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=created_at,
            payload=TimeOffPayload(start_date=start_date, end_date=end_date),
        )
        return rid

    def create_shift_swap(
        self,
        *,
        requester_id,
        original_shift_id,
        target_shift_id,
        target_employee_id,
        coverage_only,
        reason,
        created_at,
    ):
        rid = self._new_id()
        self.items[rid] = ApprovalRequest(
            request_id=rid,
            kind=RequestKind.SHIFT_SWAP,
            requester_id=requester_id,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=created_at,
            payload=ShiftSwapPayload(
                original_shift_id=original_shift_id,
                target_employee_id=target_employee_id,
                target_shift_id=target_shift_id,
                coverage_only=coverage_only,
            ),
        )
        return rid

    def get_by_id(self, request_id):
        return self.items.get(int(request_id))

    def has_pending_swap(self, original_shift_id):
        return any(
            r.is_pending and isinstance(r.payload, ShiftSwapPayload) and r.payload.original_shift_id == original_shift_id
            for r in self.items.values()
        )

    def decide(self, *, request_id, status, approver_id, resolved_at, rejection_reason=None):
        req = self.items.get(int(request_id))
        if not req or not req.is_pending:
            return False
        self.items[req.request_id] = dataclasses.replace(
            req,
            status=status,
            approver_id=approver_id,
            resolved_at=resolved_at,
            rejection_reason=rejection_reason,
        )
        return True

    def list_requests(self, *, kind=None, status=None, requester_id=None, limit=200):
        rows = [
            r
            for r in self.items.values()
            if (kind is None or r.kind == kind)
            and (status is None or r.status == status)
            and (requester_id is None or r.requester_id == requester_id)
        ]
        return rows[:limit]


class FakeTaskRepo(_Ids):
    def __init__(self):
        super().__init__()
        self.tasks: dict[int, Task] = {}
        self.updates: list[TaskUpdate] = []

    def get_by_id(self, task_id):
        return self.tasks.get(int(task_id))

    def create(
        self,
        *,
        title,
        description,
        assigned_to,
        assigned_by,
        site_id,
        priority,
        due_date,
        requires_photo,
        requires_location,
        estimated_hours,
        created_at,
    ):
        tid = self._new_id()
        self.tasks[tid] = Task(
            task_id=tid,
            title=title,
            assigned_to=assigned_to,
            assigned_by=assigned_by,
            created_at=created_at,
            description=description,
            site_id=site_id,
            priority=priority,
            due_date=due_date,
            requires_photo=requires_photo,
            requires_location=requires_location,
            estimated_hours=estimated_hours,
        )
        return tid

    def list_tasks(self, *, assigned_to=None, assigned_by=None):
        return [
            t
            for t in self.tasks.values()
            if (assigned_to is None or t.assigned_to == assigned_to)
            and (assigned_by is None or t.assigned_by == assigned_by)
        ]

    def set_actual_hours(self, task_id, hours):
        self.tasks[task_id] = dataclasses.replace(self.tasks[task_id], actual_hours=hours)
        return True

    def add_update(self, *, task_id, user_id, status, notes, photo_url, location, hours_spent, created_at):
        uid = self._new_id()
        self.updates.append(
            TaskUpdate(
                update_id=uid,
                task_id=task_id,
                user_id=user_id,
                status=status,
                created_at=created_at,
                notes=notes,
                photo_url=photo_url,
                location=location,
                hours_spent=hours_spent,
            )
        )
        return uid

    def list_updates(self, task_id):
        return [u for u in self.updates if u.task_id == task_id]

    def latest_statuses(self, task_ids):
        latest: dict[int, TaskStatus] = {}
        for u in self.updates:
            if u.task_id in task_ids:
                latest[u.task_id] = u.status
        return latest


class FakeWorkSessionRepo(_Ids):
    def __init__(self, users: FakeUserRepo | None = None, sites: FakeSiteRepo | None = None):
        super().__init__()
        self.sessions: dict[int, WorkSession] = {}
        self._users = users
        self._sites = sites

    def add(self, session: WorkSession) -> WorkSession:
        self.sessions[session.session_id] = session
        self._next_id = max(self._next_id, session.session_id + 1)
        return session

    def get_by_id(self, session_id):
        return self.sessions.get(int(session_id))

    def get_active_for_employee(self, employee_id):
        return next(
            (s for s in self.sessions.values() if s.employee_id == employee_id and s.is_active),
            None,
        )

    def create_checkin(self, *, employee_id, site_id, schedule_id, check_in_time, location, photo_url, notes):
        if self.get_active_for_employee(employee_id):
            raise ConflictError("You are already checked in; check out first")
        sid = self._new_id()
        self.sessions[sid] = WorkSession(
            session_id=sid,
            employee_id=employee_id,
            site_id=site_id,
            check_in_time=check_in_time,
            status=SessionStatus.CHECKED_IN,
            check_in_location=location,
            photo_url=photo_url,
            notes=notes,
            schedule_id=schedule_id,
        )
        return sid

    def update_checkout(self, *, session_id, check_out_time, location, notes):
        s = self.sessions.get(session_id)
        if not s or not s.is_active:
            return False
        self.sessions[session_id] = dataclasses.replace(
            s,
            status=SessionStatus.CHECKED_OUT,
            check_out_time=check_out_time,
            check_out_location=location,
            notes=notes or s.notes,
        )
        return True

    def admin_update(self, *, session_id, check_in_time, check_out_time, status, notes):
        s = self.sessions[session_id]
        self.sessions[session_id] = dataclasses.replace(
            s, check_in_time=check_in_time, check_out_time=check_out_time, status=status, notes=notes
        )
        return True

    def _matching(self, *, employee_id=None, site_id=None, status=None, start=None, end=None):
        return [
            s
            for s in sorted(self.sessions.values(), key=lambda s: s.check_in_time)
            if (employee_id is None or s.employee_id == employee_id)
            and (site_id is None or s.site_id == site_id)
            and (status is None or s.status == status)
            and (start is None or s.check_in_time >= start)
            and (end is None or s.check_in_time < end)
        ]

    def list_sessions(self, *, employee_id=None, site_id=None, status=None, start=None, end=None, limit=200):
        return self._matching(employee_id=employee_id, site_id=site_id, status=status, start=start, end=end)[:limit]

    def get_report_rows(self, *, start=None, end=None, employee_id=None, site_id=None):
        rows = []
        for s in self._matching(employee_id=employee_id, site_id=site_id, start=start, end=end):
            employee = self._users.get_by_id(s.employee_id) if self._users else None
            site = self._sites.get_by_id(s.site_id) if self._sites else None
            rows.append(
                SessionReportRow(
                    session_id=s.session_id,
                    employee_id=s.employee_id,
                    employee_name=employee.full_name if employee else f"#{s.employee_id}",
                    site_id=s.site_id,
                    site_name=site.name if site else f"#{s.site_id}",
                    check_in_time=s.check_in_time,
                    check_out_time=s.check_out_time,
                    status=s.status,
                )
            )
        return rows


class FakeWorkSummaryRepo(_Ids):
    def __init__(self):
        super().__init__()
        self.summaries: dict[int, WorkSummary] = {}

    def get_for_session(self, session_id):
        return self.summaries.get(int(session_id))

    def create(self, *, session_id, notes, products, voice, created_at):
        if session_id in self.summaries:
            raise ConflictError("A work summary was already submitted for this session")
        sid = self._new_id()
        self.summaries[session_id] = WorkSummary(
            summary_id=sid,
            session_id=session_id,
            notes=notes,
            created_at=created_at,
            products=list(products),
            voice=voice,
        )
        return sid


def employee(user_id: int, name: str, role: Role = Role.EMPLOYEE, **kwargs) -> Employee:
    return Employee(
        user_id=user_id,
        full_name=name,
        username=name.lower().replace(" ", "."),
        password_hash="x",
        role=role,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        **kwargs,
    )
