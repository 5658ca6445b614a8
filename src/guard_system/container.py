from __future__ import annotations

from dataclasses import dataclass

from .activity.mysql_activity_repository import MySQLActivityLogRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLQRCodeRepository
from .attendance.analytics import AttendanceAnalyticsService
from .attendance.service import AttendanceService, QRCodeService
from .backup_requests.mysql_backup_request_repository import MySQLBackupRequestRepository
from .backup_requests.service import BackupRequestService
from .core.constants import (
    DEFAULT_DUPLICATE_WINDOW_MINUTES,
    DEFAULT_LIVE_WINDOW_MINUTES,
    DEFAULT_ON_DUTY_WINDOW_HOURS,
)
from .dashboard.mysql_dashboard_repository import MySQLDashboardRepository
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .gps.mysql_gps_repository import MySQLGPSRepository
from .gps.service import TrackingService
from .incidents.mysql_incident_repository import MySQLIncidentRepository
from .incidents.service import IncidentService
from .locations.mysql_location_repository import MySQLLocationRepository
from .locations.service import LocationService
from .organizations.mysql_organization_repository import MySQLDepartmentRepository, MySQLOrganizationRepository
from .organizations.service import DepartmentService
from .patrols.mysql_patrol_repository import (
    MySQLCheckpointVisitRepository,
    MySQLPatrolRepository,
    MySQLPatrolRouteRepository,
)
from .patrols.performance import PatrolPerformanceService
from .patrols.service import PatrolService, RouteService
from .registration.mysql_registration_repository import MySQLRegistrationTokenRepository
from .registration.service import SignupService, TokenService
from .roles.mysql_role_repository import MySQLRoleRepository
from .roles.service import RoleService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, GuardService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    department_service: DepartmentService
    role_service: RoleService
    auth_service: AuthService
    guard_service: GuardService
    user_service: UserService
    token_service: TokenService
    signup_service: SignupService
    location_service: LocationService
    qr_code_service: QRCodeService
    attendance_service: AttendanceService
    attendance_analytics_service: AttendanceAnalyticsService
    tracking_service: TrackingService
    route_service: RouteService
    patrol_service: PatrolService
    patrol_performance_service: PatrolPerformanceService
    backup_request_service: BackupRequestService
    incident_service: IncidentService
    dashboard_service: DashboardService


def build_container(
    *,
    db_config: dict,
    live_window_minutes: int = DEFAULT_LIVE_WINDOW_MINUTES,
    duplicate_window_minutes: int = DEFAULT_DUPLICATE_WINDOW_MINUTES,
    on_duty_window_hours: int = DEFAULT_ON_DUTY_WINDOW_HOURS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    organizations_repo = MySQLOrganizationRepository(conn)
    departments_repo = MySQLDepartmentRepository(conn)
    roles_repo = MySQLRoleRepository(conn)
    users_repo = MySQLUserRepository(conn)
    tokens_repo = MySQLRegistrationTokenRepository(conn)
    locations_repo = MySQLLocationRepository(conn)
    qr_codes_repo = MySQLQRCodeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    gps_repo = MySQLGPSRepository(conn)
    activity_repo = MySQLActivityLogRepository(conn)
    routes_repo = MySQLPatrolRouteRepository(conn)
    patrols_repo = MySQLPatrolRepository(conn)
    visits_repo = MySQLCheckpointVisitRepository(conn)

    token_service = TokenService(tokens_repo)
    qr_code_service = QRCodeService(qr_codes_repo, locations_repo)

    return Container(
        conn=conn,
        department_service=DepartmentService(departments_repo),
        role_service=RoleService(roles_repo),
        auth_service=AuthService(users_repo),
        guard_service=GuardService(users_repo, roles_repo),
        user_service=UserService(users_repo),
        token_service=token_service,
        signup_service=SignupService(users_repo, organizations_repo, departments_repo, roles_repo, token_service),
        location_service=LocationService(locations_repo),
        qr_code_service=qr_code_service,
        attendance_service=AttendanceService(
            attendance_repo,
            qr_code_service,
            locations_repo,
            users_repo,
            duplicate_window_minutes=duplicate_window_minutes,
        ),
        attendance_analytics_service=AttendanceAnalyticsService(attendance_repo, users_repo),
        tracking_service=TrackingService(gps_repo, live_window_minutes=live_window_minutes),
        route_service=RouteService(routes_repo, locations_repo, activity_repo),
        patrol_service=PatrolService(
            patrols_repo,
            visits_repo,
            routes_repo,
            locations_repo,
            users_repo,
            activity_repo,
            duplicate_window_minutes=duplicate_window_minutes,
        ),
        patrol_performance_service=PatrolPerformanceService(patrols_repo, attendance_repo, users_repo),
        backup_request_service=BackupRequestService(
            MySQLBackupRequestRepository(conn), locations_repo, activity_repo
        ),
        incident_service=IncidentService(MySQLIncidentRepository(conn)),
        dashboard_service=DashboardService(
            MySQLDashboardRepository(conn), on_duty_window_hours=on_duty_window_hours
        ),
    )
