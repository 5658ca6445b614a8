from __future__ import annotations

import json
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from fakes import (
    InMemoryActivity,
    InMemoryAttendance,
    InMemoryBackupRequests,
    InMemoryDepartments,
    InMemoryGPS,
    InMemoryIncidents,
    InMemoryLocations,
    InMemoryOrganizations,
    InMemoryPatrols,
    InMemoryQRCodes,
    InMemoryRoles,
    InMemoryRoutes,
    InMemoryTokens,
    InMemoryUsers,
    InMemoryVisits,
)
from guard_system import create_app
from guard_system.attendance.analytics import AttendanceAnalyticsService
from guard_system.attendance.model import QRCode
from guard_system.attendance.service import AttendanceService, QRCodeService
from guard_system.backup_requests.service import BackupRequestService
from guard_system.core.enums import LocationType, QRCodeType, TokenType
from guard_system.gps.service import TrackingService
from guard_system.incidents.service import IncidentService
from guard_system.locations.model import Location
from guard_system.locations.service import LocationService
from guard_system.organizations.service import DepartmentService
from guard_system.patrols.performance import PatrolPerformanceService
from guard_system.patrols.service import PatrolService, RouteService
from guard_system.registration.model import RegistrationToken
from guard_system.registration.service import SignupService, TokenService
from guard_system.roles.service import RoleService
from guard_system.users.model import User
from guard_system.users.service import AuthService, GuardService, UserService


class ExplodingDashboard:
    def stats(self, organization_id):
        raise RuntimeError("connection lost")


def _container():
    roles = InMemoryRoles()
    users = InMemoryUsers(
        [
            User(id="g1", organization_id="org-1", email="guard@x.io", password_hash=generate_password_hash("pw123456"),
                 first_name="Gia", last_name="Le"),
        ],
        roles=roles,
    )
    locations = InMemoryLocations(
        [
            Location(id="site-1", organization_id="org-1", name="HQ", location_type=LocationType.SITE,
                     latitude=40.0, longitude=-74.0, radius_meters=100, require_gps_validation=True),
            Location(id="cp-1", organization_id="org-1", name="Dock", location_type=LocationType.CHECKPOINT,
                     latitude=40.0005, longitude=-74.0),
        ]
    )
    qr_codes = InMemoryQRCodes(
        [QRCode(id="qr-1", organization_id="org-1", code="STC-SITE-1", type=QRCodeType.STATIC,
                valid_from=datetime(2024, 1, 1), site_id="site-1")]
    )
    tokens = InMemoryTokens(
        [RegistrationToken(id="t1", organization_id="org-1", token="ABC12", token_type=TokenType.ACCESS_CODE)]
    )
    activity = InMemoryActivity()
    routes = InMemoryRoutes()
    attendance = InMemoryAttendance()
    patrols = InMemoryPatrols()
    token_service = TokenService(tokens)
    qr_service = QRCodeService(qr_codes, locations)
    return SimpleNamespace(
        department_service=DepartmentService(InMemoryDepartments()),
        role_service=RoleService(roles),
        auth_service=AuthService(users),
        guard_service=GuardService(users, roles),
        user_service=UserService(users),
        token_service=token_service,
        signup_service=SignupService(users, InMemoryOrganizations(), InMemoryDepartments(), roles, token_service),
        location_service=LocationService(locations),
        qr_code_service=qr_service,
        attendance_service=AttendanceService(attendance, qr_service, locations, users),
        attendance_analytics_service=AttendanceAnalyticsService(attendance, users),
        tracking_service=TrackingService(InMemoryGPS()),
        route_service=RouteService(routes, locations, activity),
        patrol_service=PatrolService(patrols, InMemoryVisits(), routes, locations, users, activity),
        patrol_performance_service=PatrolPerformanceService(patrols, attendance, users),
        backup_request_service=BackupRequestService(InMemoryBackupRequests(), locations, activity),
        incident_service=IncidentService(InMemoryIncidents()),
        dashboard_service=ExplodingDashboard(),
    )


@pytest.fixture
def container():
    return _container()


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


@pytest.fixture
def guard_client(client):
    with client.session_transaction() as sess:
        sess["user_id"] = "g1"
        sess["organization_id"] = "org-1"
    return client


def test_protected_routes_need_a_session(client):
    res = client.get("/api/attendance/status")
    assert res.status_code == 401
    assert res.get_json() == {"success": False, "error": "Unauthorized - please log in"}


def test_login_then_me(client):
    res = client.post("/api/auth/login", json={"email": "guard@x.io", "password": "pw123456"})
    assert res.status_code == 200
    assert res.get_json()["user"]["id"] == "g1"
    assert "password_hash" not in res.get_json()["user"]

    me = client.get("/api/auth/me")
    assert me.get_json()["user"]["email"] == "guard@x.io"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_bad_login(client):
    res = client.post("/api/auth/login", json={"email": "guard@x.io", "password": "nope"})
    assert res.status_code == 401


def test_register_with_token_signs_in(client):
    res = client.post(
        "/api/auth/register",
        json={"email": "new@x.io", "password": "secret1", "first_name": "N", "last_name": "G", "token": "abc12"},
    )
    assert res.status_code == 201
    assert res.get_json()["user"]["organization_id"] == "org-1"
    assert client.get("/api/auth/me").status_code == 200

    again = client.post(
        "/api/auth/register",
        json={"email": "new@x.io", "password": "secret1", "first_name": "N", "last_name": "G", "token": "abc12"},
    )
    assert again.status_code == 409


def test_check_in_outside_fence(guard_client):
    res = guard_client.post(
        "/api/attendance/check-in", json={"qr_code": "STC-SITE-1", "latitude": 40.0009, "longitude": -74.0}
    )
    assert res.status_code == 400
    body = res.get_json()
    assert body["error"] == "You must be within 100m of HQ to check in"
    assert body["distance"] == 100


def test_check_in_and_out(guard_client):
    res = guard_client.post(
        "/api/attendance/check-in", json={"qr_code": "STC-SITE-1", "latitude": 40.0004, "longitude": -74.0}
    )
    assert res.status_code == 200
    assert res.get_json()["attendance"]["user_name"] == "Gia Le"
    assert guard_client.get("/api/attendance/status").get_json()["status"]["is_checked_in"] is True

    out = guard_client.post(
        "/api/attendance/check-out", json={"latitude": 40.0004, "longitude": -74.0, "shift_type": "check_in"}
    )
    assert out.status_code == 200
    assert out.get_json()["attendance"]["shift_type"] == "check_out"
    assert out.get_json()["message"] == "Successfully checked out"


def test_offline_sync_replay(guard_client):
    payload = {
        "record_id": "dev-1",
        "qr_code": "STC-SITE-1",
        "action": "check_in",
        "timestamp": (datetime.now() - timedelta(hours=1)).isoformat(),
        "location": {"lat": 40.0, "lng": -74.0},
    }
    first = guard_client.post("/api/attendance/offline-sync", json=payload)
    second = guard_client.post("/api/attendance/offline-sync", json=payload)

    assert first.get_json()["message"] == "Attendance record synced successfully"
    assert second.get_json()["message"] == "Record already synced"
    assert second.get_json()["attendance_id"] == first.get_json()["attendance_id"]


def test_offline_sync_right_after_a_scan_conflicts(guard_client):
    guard_client.post(
        "/api/attendance/check-in", json={"qr_code": "STC-SITE-1", "latitude": 40.0, "longitude": -74.0}
    )
    res = guard_client.post(
        "/api/attendance/offline-sync",
        json={
            "record_id": "dev-2",
            "qr_code": "STC-SITE-1",
            "action": "check_in",
            "timestamp": datetime.now().isoformat(),
            "location": {"lat": 40.0, "lng": -74.0},
        },
    )
    assert res.status_code == 409
    assert res.get_json()["error"] == "Duplicate check_in detected within 5 minutes"


def test_history_rejects_bad_dates(guard_client):
    res = guard_client.get("/api/attendance/history?start=01-05-2024")
    assert res.status_code == 400


def test_unknown_patrol_is_404(guard_client):
    assert guard_client.post("/api/patrols/missing/start").status_code == 404


def test_backup_request_reports_closest_checkpoint(guard_client):
    res = guard_client.post(
        "/api/backup-requests", json={"current_latitude": 40.0, "current_longitude": -74.0, "notes": "help"}
    )
    assert res.status_code == 201
    body = res.get_json()
    assert body["closest_checkpoint"]["name"] == "Dock"
    assert body["backup_request"]["distance_to_checkpoint"] == 56

    listed = guard_client.get("/api/backup-requests").get_json()["backup_requests"]
    assert [r["id"] for r in listed] == [body["backup_request"]["id"]]


def test_unexpected_errors_become_500(guard_client):
    res = guard_client.get("/api/dashboard/stats")
    assert res.status_code == 500
    assert res.get_json() == {"success": False, "error": "Internal server error"}


def test_registration_qr_url(client):
    res = client.get("/api/registration/qr-url?token=ABC12", base_url="https://guard.example.com")
    body = res.get_json()
    assert body["url"] == "https://guard.example.com/register?token=ABC12"

    png = client.get("/api/registration/qr-url?token=ABC12&format=png")
    assert png.mimetype == "image/png"
    assert png.data[:8] == b"\x89PNG\r\n\x1a\n"


def test_gps_update_and_active(guard_client):
    res = guard_client.post("/api/gps/update", json={"latitude": 40.0, "longitude": -74.0, "battery_level": 90})
    assert res.status_code == 200

    bad = guard_client.post("/api/gps/update", json={"latitude": 40.0, "longitude": -74.0, "battery_level": 120})
    assert bad.status_code == 400


def test_gps_stream_opens_with_connected_event(guard_client):
    res = guard_client.get("/api/gps/stream")
    assert res.mimetype == "text/event-stream"
    assert res.headers["Cache-Control"] == "no-cache"

    first = next(iter(res.response))
    res.close()
    chunk = first.decode() if isinstance(first, bytes) else first
    assert json.loads(chunk[len("data: "):])["type"] == "connected"


def test_incident_lifecycle(guard_client):
    res = guard_client.post(
        "/api/incidents", json={"incident_type": "theft", "title": "Laptop", "description": "Lobby desk"}
    )
    assert res.status_code == 201
    incident_id = res.get_json()["incident"]["id"]

    bad = guard_client.put(f"/api/incidents/{incident_id}", json={"status": "lost"})
    assert bad.status_code == 400

    ok = guard_client.put(f"/api/incidents/{incident_id}", json={"status": "closed"})
    assert ok.get_json()["incident"]["status"] == "closed"


def test_check_in_with_nan_latitude_is_rejected(guard_client):
    res = guard_client.post(
        "/api/attendance/check-in",
        data='{"qr_code": "STC-SITE-1", "latitude": NaN, "longitude": -74.0}',
        content_type="application/json",
    )
    assert res.status_code == 400
    assert res.get_json()["error"] == "latitude must be a finite number"
    assert guard_client.get("/api/attendance/status").get_json()["status"]["is_checked_in"] is False


def test_gps_update_with_infinite_longitude_is_rejected(guard_client):
    res = guard_client.post(
        "/api/gps/update", data='{"latitude": 40.0, "longitude": Infinity}', content_type="application/json"
    )
    assert res.status_code == 400


def test_token_expiry_must_be_a_timestamp(guard_client):
    res = guard_client.patch("/api/registration/tokens/t1", json={"expires_at": 123})
    assert res.status_code == 400
    assert res.get_json()["error"] == "expires_at must be an ISO-8601 timestamp"


def test_register_rejects_non_text_organization_name(client):
    res = client.post(
        "/api/auth/register",
        json={"email": "a@x.io", "password": "secret1", "first_name": "A", "last_name": "B", "organization_name": 7},
    )
    assert res.status_code == 400


def test_offline_sync_history(guard_client):
    guard_client.post(
        "/api/attendance/offline-sync",
        json={
            "record_id": "dev-7",
            "qr_code": "STC-SITE-1",
            "action": "check_in",
            "timestamp": (datetime.now() - timedelta(hours=2)).isoformat(),
            "location": {"lat": 40.0, "lng": -74.0},
        },
    )
    res = guard_client.get("/api/attendance/offline-sync")
    assert res.status_code == 200
    assert [r["offline_record_id"] for r in res.get_json()["synced_records"]] == ["dev-7"]


def test_analytics_live_status(guard_client):
    guard_client.post(
        "/api/attendance/check-in", json={"qr_code": "STC-SITE-1", "latitude": 40.0, "longitude": -74.0}
    )
    body = guard_client.get("/api/attendance/analytics?type=live").get_json()
    assert body["type"] == "live"
    assert body["data"]["guards_on_duty"] == 1
    assert body["data"]["active_shifts"][0]["guard_name"] == "Gia Le"


def test_analytics_metrics_need_dates(guard_client):
    res = guard_client.get("/api/attendance/analytics?type=metrics")
    assert res.status_code == 400
    assert res.get_json()["error"] == "start and end are required"

    ok = guard_client.get("/api/attendance/analytics?type=metrics&start=2024-05-01&end=2024-05-02")
    assert ok.get_json()["data"]["completed_shifts"] == 0


def test_analytics_unknown_type(guard_client):
    res = guard_client.get("/api/attendance/analytics?type=heatmap")
    assert res.status_code == 400
    assert res.get_json()["error"] == "Invalid analytics type"


def test_analytics_trends_default_to_thirty_days(guard_client):
    data = guard_client.get("/api/attendance/analytics?type=trends").get_json()["data"]
    assert len(data) == 30


def test_patrol_performance(guard_client):
    assert guard_client.get("/api/patrols/performance").status_code == 400
    assert guard_client.get("/api/patrols/performance?guard_id=nobody").status_code == 404

    res = guard_client.get("/api/patrols/performance?guard_id=g1&start=2024-01-01&end=2024-01-31")
    body = res.get_json()["performance"]
    assert body["guard_name"] == "Gia Le"
    assert body["period_start"] == "2024-01-01T00:00:00"
    assert body["assigned_patrols"] == 0
