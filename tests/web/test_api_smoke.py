from __future__ import annotations

import io
from types import SimpleNamespace

import pytest
from flask import Flask
from PIL import Image
from werkzeug.security import generate_password_hash

from src.fieldforce.fieldforce.announcements.service import AnnouncementService
from src.fieldforce.fieldforce.common.web import register_error_handlers
from src.fieldforce.fieldforce.core.enums import Role
from src.fieldforce.fieldforce.main import register_routes
from src.fieldforce.fieldforce.notifications.service import NotificationService
from src.fieldforce.fieldforce.reports.service import ReportService
from src.fieldforce.fieldforce.requests.service import RequestService
from src.fieldforce.fieldforce.schedules.service import ScheduleService
from src.fieldforce.fieldforce.shifts.service import ShiftService
from src.fieldforce.fieldforce.sites.model import Product, Site
from src.fieldforce.fieldforce.sites.service import PositionService, ProductService, SiteService
from src.fieldforce.fieldforce.storage.photo_store import LocalPhotoStore
from src.fieldforce.fieldforce.tasks.service import TaskService
from src.fieldforce.fieldforce.users.model import Employee
from src.fieldforce.fieldforce.users.service import AuthService, EmployeeService
from src.fieldforce.fieldforce.worksessions.service import WorkSessionService
from tests.fakes import (
    FakeAnnouncementRepo,
    FakeNotificationRepo,
    FakePreRegistrationRepo,
    FakeProductRepo,
    FakeRequestRepo,
    FakeShiftRepo,
    FakeSiteRepo,
    FakeTaskRepo,
    FakeUnitOfWork,
    FakeUserRepo,
    FakeWorkSessionRepo,
    FakeWorkSummaryRepo,
)


def _user(user_id, username, role):
    return Employee(
        user_id=user_id,
        full_name=username.title(),
        username=username,
        password_hash=generate_password_hash("secret1"),
        role=role,
        email=f"{username}@example.com",
    )


@pytest.fixture
def client(tmp_path, clock):
    users = FakeUserRepo(_user(1, "manager", Role.MANAGER), _user(10, "alice", Role.EMPLOYEE))
    sites = FakeSiteRepo(Site(site_id=1, name="Initech"))
    products = FakeProductRepo(Product(product_id=1, name="Widget"))
    pre = FakePreRegistrationRepo()
    sessions = FakeWorkSessionRepo(users, sites)
    summaries = FakeWorkSummaryRepo()
    shifts = FakeShiftRepo()
    requests = FakeRequestRepo()
    tasks = FakeTaskRepo()
    notification_repo = FakeNotificationRepo()
    uow = FakeUnitOfWork(users, pre, sessions, summaries, shifts, requests, tasks, notification_repo)

    notifications = NotificationService(notification_repo, clock=clock)
    announcements = AnnouncementService(FakeAnnouncementRepo(), clock=clock)
    container = SimpleNamespace(
        photo_store=LocalPhotoStore(tmp_path, "/uploads"),
        auth_service=AuthService(users, pre, uow),
        employee_service=EmployeeService(users, pre, sites=sites),
        site_service=SiteService(sites),
        product_service=ProductService(products),
        position_service=PositionService(None),
        notification_service=notifications,
        announcement_service=announcements,
        schedule_service=ScheduleService(None, users, sites, notifications, uow),
        shift_service=ShiftService(shifts, users, sites, notifications, uow, clock=clock),
        request_service=RequestService(requests, shifts, users, announcements, notifications, uow, clock=clock),
        task_service=TaskService(tasks, users, sites, notifications, uow, clock=clock),
        work_session_service=WorkSessionService(sessions, summaries, users, sites, products, uow, clock=clock),
        report_service=ReportService(sessions),
    )

    app = Flask(__name__)
    app.secret_key = "test-secret"
    register_error_handlers(app)
    register_routes(app, container)
    return app.test_client()


def _login(client, username):
    resp = client.post("/api/auth/login", json={"username": username, "password": "secret1"})
    assert resp.status_code == 200
    return resp.get_json()["data"]


def test_login_required(client):
    resp = client.get("/api/check-ins/active")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "authentication"


def test_bad_login_is_401(client):
    resp = client.post("/api/auth/login", json={"username": "alice", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_check_in_conflict_and_check_out(client):
    _login(client, "alice")
    first = client.post("/api/check-ins", json={"site_id": 1})
    assert first.status_code == 201
    session = first.get_json()["data"]
    assert session["status"] == "checked_in"

    again = client.post("/api/check-ins", json={"site_id": 1})
    assert again.status_code == 409
    assert again.get_json()["error"] == "conflict"

    out = client.post(f"/api/check-ins/{session['session_id']}/check-out", json={})
    assert out.status_code == 200
    assert out.get_json()["data"]["status"] == "checked_out"

    summary = client.post(
        "/api/work-summary",
        json={"session_id": session["session_id"], "notes": "Stocked", "products": [{"product_id": 1, "quantity": 4}]},
    )
    assert summary.status_code == 201
    assert summary.get_json()["data"]["products"][0]["quantity"] == 4.0


def test_time_off_round_trip_through_manager(client):
    _login(client, "alice")
    created = client.post(
        "/api/time-off-requests",
        json={"start_date": "2024-12-20", "end_date": "2024-12-23", "reason": "Trip"},
    )
    assert created.status_code == 201
    request_id = created.get_json()["data"]["request_id"]

    assert client.get("/api/reports/billing?start_date=2024-12-01&end_date=2024-12-31").status_code == 403

    client.post("/api/auth/logout")
    _login(client, "manager")
    resolved = client.patch(f"/api/time-off-requests/{request_id}", json={"decision": "approve"})
    assert resolved.status_code == 200
    assert resolved.get_json()["data"]["status"] == "approved"

    twice = client.patch(f"/api/time-off-requests/{request_id}", json={"decision": "approve"})
    assert twice.status_code == 409
    assert twice.get_json()["error"] == "invalid_state"


def test_validation_errors_are_400(client):
    _login(client, "alice")
    resp = client.post("/api/time-off-requests", json={"start_date": "20/12/2024", "end_date": "2024-12-23"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation"


def test_unknown_route_keeps_404(client):
    assert client.get("/api/nothing-here").status_code == 404


def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color=(20, 120, 40)).save(buf, format="PNG")
    return buf.getvalue()


def test_non_text_reasons_are_400(client):
    _login(client, "alice")
    bad = client.post(
        "/api/time-off-requests",
        json={"start_date": "2024-12-20", "end_date": "2024-12-23", "reason": 123},
    )
    assert bad.status_code == 400
    assert bad.get_json()["error"] == "validation"

    created = client.post(
        "/api/time-off-requests",
        json={"start_date": "2024-12-20", "end_date": "2024-12-23", "reason": "Trip"},
    )
    request_id = created.get_json()["data"]["request_id"]

    client.post("/api/auth/logout")
    _login(client, "manager")
    resp = client.patch(f"/api/time-off-requests/{request_id}", json={"decision": "reject", "rejection_reason": 5})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation"

    rejected = client.patch(
        f"/api/time-off-requests/{request_id}", json={"decision": "reject", "rejection_reason": "Short staffed"}
    )
    assert rejected.status_code == 200
    assert rejected.get_json()["data"]["status"] == "rejected"


@pytest.mark.parametrize("quantity", ["NaN", "inf", "-Infinity"])
def test_work_summary_rejects_non_finite_quantity(client, quantity):
    _login(client, "alice")
    session_id = client.post("/api/check-ins", json={"site_id": 1}).get_json()["data"]["session_id"]
    client.post(f"/api/check-ins/{session_id}/check-out", json={})

    resp = client.post(
        "/api/work-summary",
        json={"session_id": session_id, "notes": "Stocked", "products": [{"product_id": 1, "quantity": quantity}]},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation"


def test_rejected_check_in_discards_uploaded_photo(client, tmp_path):
    _login(client, "alice")
    first = client.post(
        "/api/check-ins",
        data={"site_id": "1", "photo": (io.BytesIO(_png()), "shelf.png")},
        content_type="multipart/form-data",
    )
    assert first.status_code == 201
    assert first.get_json()["data"]["photo_url"].startswith("/uploads/check-ins/")

    second = client.post(
        "/api/check-ins",
        data={"site_id": "1", "photo": (io.BytesIO(_png()), "again.png")},
        content_type="multipart/form-data",
    )
    assert second.status_code == 409
    assert len(list((tmp_path / "check-ins").iterdir())) == 1


def test_role_change_applies_to_open_session(client):
    _login(client, "alice")
    assert client.get("/api/users").status_code == 403

    manager = client.application.test_client()
    _login(manager, "manager")
    promoted = manager.patch("/api/users/10/role", json={"role": "manager"})
    assert promoted.status_code == 200

    assert client.get("/api/users").status_code == 200


def test_deactivated_user_session_ends(client):
    _login(client, "alice")
    assert client.get("/api/check-ins/active").status_code == 200

    manager = client.application.test_client()
    _login(manager, "manager")
    assert manager.post("/api/users/10/deactivate").status_code == 200

    resp = client.get("/api/check-ins/active")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "authentication"
