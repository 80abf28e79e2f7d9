from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .announcements.mysql_announcement_repository import MySQLAnnouncementRepository
from .announcements.service import AnnouncementService
from .core.constants import DEFAULT_MAX_PHOTO_BYTES
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import MySQLUnitOfWork
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import NotificationService
from .reports.service import ReportService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.service import RequestService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftService
from .sites.mysql_position_repository import MySQLPositionRepository
from .sites.mysql_product_repository import MySQLProductRepository
from .sites.mysql_site_repository import MySQLSiteRepository
from .sites.service import PositionService, ProductService, SiteService
from .storage.photo_store import LocalPhotoStore
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.service import TaskService
from .users.mysql_pre_registration_repository import MySQLPreRegistrationRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, EmployeeService
from .worksessions.factory import CheckInPolicyFactory
from .worksessions.mysql_work_session_repository import MySQLWorkSessionRepository
from .worksessions.mysql_work_summary_repository import MySQLWorkSummaryRepository
from .worksessions.service import WorkSessionService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    photo_store: LocalPhotoStore

    auth_service: AuthService
    employee_service: EmployeeService
    site_service: SiteService
    product_service: ProductService
    position_service: PositionService
    notification_service: NotificationService
    announcement_service: AnnouncementService
    schedule_service: ScheduleService
    shift_service: ShiftService
    request_service: RequestService
    task_service: TaskService
    work_session_service: WorkSessionService
    report_service: ReportService


def build_container(
    *,
    db_config: dict,
    upload_dir: str | Path = "uploads",
    photo_base_url: str = "/uploads",
    max_photo_bytes: int = DEFAULT_MAX_PHOTO_BYTES,
    geofence_enforced: bool = True,
    require_checkin_location: bool = False,
    require_summary_products: bool = True,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    uow = MySQLUnitOfWork(conn)

    users_repo = MySQLUserRepository(conn)
    pre_registrations_repo = MySQLPreRegistrationRepository(conn)
    sites_repo = MySQLSiteRepository(conn)
    products_repo = MySQLProductRepository(conn)
    positions_repo = MySQLPositionRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)
    announcements_repo = MySQLAnnouncementRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    requests_repo = MySQLRequestRepository(conn)
    tasks_repo = MySQLTaskRepository(conn)
    sessions_repo = MySQLWorkSessionRepository(conn)
    summaries_repo = MySQLWorkSummaryRepository(conn)

    notification_service = NotificationService(notifications_repo)
    announcement_service = AnnouncementService(announcements_repo)

    work_session_service = WorkSessionService(
        sessions_repo,
        summaries_repo,
        users_repo,
        sites_repo,
        products_repo,
        uow,
        schedules=schedules_repo,
        policy_factory=CheckInPolicyFactory(
            require_location=require_checkin_location,
            geofence_enforced=geofence_enforced,
        ),
        require_summary_products=require_summary_products,
    )

    return Container(
        conn=conn,
        photo_store=LocalPhotoStore(upload_dir, photo_base_url, max_bytes=max_photo_bytes),
        auth_service=AuthService(users_repo, pre_registrations_repo, uow),
        employee_service=EmployeeService(
            users_repo,
            pre_registrations_repo,
            sites=sites_repo,
            positions=positions_repo,
        ),
        site_service=SiteService(sites_repo),
        product_service=ProductService(products_repo),
        position_service=PositionService(positions_repo),
        notification_service=notification_service,
        announcement_service=announcement_service,
        schedule_service=ScheduleService(schedules_repo, users_repo, sites_repo, notification_service, uow),
        shift_service=ShiftService(shifts_repo, users_repo, sites_repo, notification_service, uow),
        request_service=RequestService(
            requests_repo,
            shifts_repo,
            users_repo,
            announcement_service,
            notification_service,
            uow,
        ),
        task_service=TaskService(tasks_repo, users_repo, sites_repo, notification_service, uow),
        work_session_service=work_session_service,
        report_service=ReportService(sessions_repo),
    )
