"""In-memory repositories shared by the service and controller tests."""
from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from guard_system.activity.model import ActivityEntry
from guard_system.attendance.model import AttendanceRecord, QRCode
from guard_system.backup_requests.model import BackupRequest
from guard_system.core.enums import BackupRequestStatus, IncidentStatus, PatrolStatus, QRCodeType
from guard_system.gps.model import GPSSample, PositionRow
from guard_system.incidents.model import Incident
from guard_system.locations.model import Location
from guard_system.organizations.model import Department, Organization
from guard_system.patrols.model import CheckpointVisit, Patrol, PatrolRoute
from guard_system.registration.model import RegistrationToken
from guard_system.roles.model import Role
from guard_system.users.model import GuardView, User, UserSummary

_ids = itertools.count(1)


def next_id(prefix: str) -> str:
    return f"{prefix}-{next(_ids)}"


class InMemoryRoles:
    def __init__(self, roles: Sequence[Role] = ()):
        self.roles: Dict[str, Role] = {r.id: r for r in roles}

    def list_for_organization(self, organization_id: str):
        return [r for r in self.roles.values() if r.organization_id == organization_id]

    def get_by_id(self, role_id: str) -> Optional[Role]:
        return self.roles.get(role_id)

    def create(self, *, organization_id: str, name: str, permissions) -> Role:
        role = Role(id=next_id("role"), organization_id=organization_id, name=name, permissions=permissions)
        self.roles[role.id] = role
        return role


class InMemoryOrganizations:
    def __init__(self):
        self.organizations: Dict[str, Organization] = {}

    def get_by_id(self, organization_id: str) -> Optional[Organization]:
        return self.organizations.get(organization_id)

    def create(self, *, name: str, slug: str, active_modules: list, subscription_tier: str) -> Organization:
        org = Organization(
            id=next_id("org"), name=name, slug=slug, active_modules=active_modules, subscription_tier=subscription_tier
        )
        self.organizations[org.id] = org
        return org


class InMemoryDepartments:
    def __init__(self):
        self.departments: Dict[str, Department] = {}

    def list_for_organization(self, organization_id: str):
        return [d for d in self.departments.values() if d.organization_id == organization_id]

    def get_by_id(self, department_id: str) -> Optional[Department]:
        return self.departments.get(department_id)

    def create(self, *, organization_id: str, name: str, description: Optional[str] = None) -> Department:
        dept = Department(id=next_id("dept"), organization_id=organization_id, name=name, description=description)
        self.departments[dept.id] = dept
        return dept


class InMemoryUsers:
    def __init__(self, users: Sequence[User] = (), roles: Optional[InMemoryRoles] = None):
        self.users: Dict[str, User] = {u.id: u for u in users}
        self.roles = roles or InMemoryRoles()

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, **kwargs) -> User:
        user = User(id=next_id("user"), **kwargs)
        self.users[user.id] = user
        return user

    def set_active(self, user_id: str, *, is_active: bool) -> bool:
        self.users[user_id] = replace(self.users[user_id], is_active=is_active)
        return True

    def set_role(self, user_id: str, *, role_id: str) -> bool:
        self.users[user_id] = replace(self.users[user_id], role_id=role_id)
        return True

    def get_guard_view(self, user_id: str) -> Optional[GuardView]:
        u = self.users.get(user_id)
        if not u:
            return None
        role = self.roles.get_by_id(u.role_id) if u.role_id else None
        return GuardView(
            id=u.id,
            organization_id=u.organization_id,
            email=u.email,
            first_name=u.first_name,
            last_name=u.last_name,
            phone=u.phone,
            is_active=u.is_active,
            role_id=u.role_id,
            role_name=role.name if role else None,
            role_permissions=role.permissions if role else None,
            department_id=u.department_id,
            department_name=None,
        )

    def list_guard_views(self, organization_id: str):
        return [self.get_guard_view(u.id) for u in self.users.values() if u.organization_id == organization_id]

    def list_summaries(self, organization_id: str, user_ids):
        return [
            UserSummary(id=u.id, first_name=u.first_name, last_name=u.last_name, email=u.email)
            for u in self.users.values()
            if u.organization_id == organization_id and u.id in user_ids
        ]


class InMemoryTokens:
    def __init__(self, tokens: Sequence[RegistrationToken] = ()):
        self.tokens: Dict[str, RegistrationToken] = {t.id: t for t in tokens}

    def get_by_id(self, token_id: str) -> Optional[RegistrationToken]:
        return self.tokens.get(token_id)

    def get_by_token(self, token: str, *, active_only: bool = False) -> Optional[RegistrationToken]:
        for t in self.tokens.values():
            if t.token == token and (t.is_active or not active_only):
                return t
        return None

    def token_exists(self, token: str) -> bool:
        return any(t.token == token for t in self.tokens.values())

    def list_active(self, organization_id: str):
        return [t for t in self.tokens.values() if t.organization_id == organization_id and t.is_active]

    def create(self, **kwargs) -> RegistrationToken:
        token = RegistrationToken(id=next_id("token"), **kwargs)
        self.tokens[token.id] = token
        return token

    def update(self, token_id: str, changes: Dict[str, Any]) -> Optional[RegistrationToken]:
        self.tokens[token_id] = replace(self.tokens[token_id], **changes)
        return self.tokens[token_id]

    def delete(self, token_id: str) -> bool:
        return self.tokens.pop(token_id, None) is not None

    def increment_usage(self, token_id: str) -> Optional[RegistrationToken]:
        t = self.tokens[token_id]
        self.tokens[token_id] = replace(t, usage_count=t.usage_count + 1)
        return self.tokens[token_id]


class InMemoryLocations:
    def __init__(self, locations: Sequence[Location] = ()):
        self.locations: Dict[str, Location] = {loc.id: loc for loc in locations}

    def get_by_id(self, location_id: str) -> Optional[Location]:
        return self.locations.get(location_id)

    def list_for_organization(self, organization_id: str, *, location_type=None):
        return [
            loc
            for loc in self.locations.values()
            if loc.organization_id == organization_id and (location_type is None or loc.location_type == location_type)
        ]

    def get_many(self, organization_id: str, location_ids):
        return [loc for loc in self.list_for_organization(organization_id) if loc.id in location_ids]

    def create(self, **kwargs) -> Location:
        loc = Location(id=next_id("loc"), **kwargs)
        self.locations[loc.id] = loc
        return loc


class InMemoryQRCodes:
    def __init__(self, codes: Sequence[QRCode] = ()):
        self.codes: Dict[str, QRCode] = {c.id: c for c in codes}

    def create(self, *, qr_type: QRCodeType, **kwargs) -> QRCode:
        qr = QRCode(id=next_id("qr"), type=qr_type, **kwargs)
        self.codes[qr.id] = qr
        return qr

    def get_active_by_code(self, code: str) -> Optional[QRCode]:
        return next((c for c in self.codes.values() if c.code == code and c.is_active), None)

    def list_active(self, organization_id: str, *, site_id: Optional[str] = None):
        return [
            c
            for c in self.codes.values()
            if c.organization_id == organization_id and c.is_active and (site_id is None or c.site_id == site_id)
        ]

    def deactivate_random_for_site(self, organization_id: str, site_id: str) -> int:
        n = 0
        for c in list(self.codes.values()):
            if c.organization_id == organization_id and c.site_id == site_id and c.type == QRCodeType.RANDOM:
                self.codes[c.id] = replace(c, is_active=False)
                n += 1
        return n

    def touch_last_used(self, qr_id: str, used_at: datetime) -> None:
        self.codes[qr_id] = replace(self.codes[qr_id], last_used=used_at)


class InMemoryAttendance:
    def __init__(self):
        self.records: List[AttendanceRecord] = []

    def create(self, *, metadata: Optional[dict] = None, **kwargs) -> AttendanceRecord:
        record = AttendanceRecord(id=next_id("att"), metadata=metadata or {}, **kwargs)
        self.records.append(record)
        return record

    def last_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        mine = [r for r in self.records if r.user_id == user_id]
        return max(mine, key=lambda r: r.recorded_at) if mine else None

    def list_for_user(self, user_id: str, *, start=None, end=None):
        mine = [
            r
            for r in self.records
            if r.user_id == user_id and (start is None or r.recorded_at >= start) and (end is None or r.recorded_at < end)
        ]
        return sorted(mine, key=lambda r: r.recorded_at, reverse=True)

    def get_by_offline_id(self, record_id: str) -> Optional[AttendanceRecord]:
        return next((r for r in self.records if r.offline_record_id == record_id), None)

    def latest_for_user_and_code(self, user_id: str, qr_code: str, *, since: datetime):
        hits = [r for r in self.records if r.user_id == user_id and r.qr_code == qr_code and r.recorded_at >= since]
        return max(hits, key=lambda r: r.recorded_at) if hits else None

    def list_for_organization(self, organization_id: str, *, start: datetime, end: datetime):
        hits = [r for r in self.records if r.organization_id == organization_id and start <= r.recorded_at < end]
        return sorted(hits, key=lambda r: r.recorded_at)

    def list_synced_for_user(self, user_id: str, *, limit: int):
        mine = [r for r in self.records if r.user_id == user_id and r.offline_record_id]
        return sorted(mine, key=lambda r: r.recorded_at, reverse=True)[:limit]


class InMemoryGPS:
    def __init__(self, samples: Sequence[PositionRow] = (), visits: Sequence[PositionRow] = ()):
        self.samples = list(samples)
        self.visits = list(visits)
        self.recorded: List[GPSSample] = []

    def record(self, **kwargs) -> GPSSample:
        sample = GPSSample(id=next_id("gps"), **kwargs)
        self.recorded.append(sample)
        return sample

    def sample_positions_since(self, organization_id: str, since: datetime):
        return [r for r in self.samples if r.timestamp >= since]

    def visit_positions_since(self, organization_id: str, since: datetime):
        return [r for r in self.visits if r.timestamp >= since]

    def trail(self, organization_id: str, user_id: str, since: datetime):
        hits = [s for s in self.recorded if s.user_id == user_id and s.recorded_at >= since]
        return sorted(hits, key=lambda s: s.recorded_at)


class InMemoryActivity:
    def __init__(self):
        self.entries: List[ActivityEntry] = []

    def record(self, *, organization_id, user_id, module, action, entity_type, entity_id=None, metadata=None):
        entry = ActivityEntry(
            id=next_id("log"),
            organization_id=organization_id,
            user_id=user_id,
            module=module,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            metadata=metadata or {},
        )
        self.entries.append(entry)
        return entry

    def actions(self) -> List[str]:
        return [e.action for e in self.entries]


class InMemoryRoutes:
    def __init__(self, routes: Sequence[PatrolRoute] = ()):
        self.routes: Dict[str, PatrolRoute] = {r.id: r for r in routes}

    def list_for_organization(self, organization_id: str):
        return [r for r in self.routes.values() if r.organization_id == organization_id]

    def get_by_id(self, route_id: str) -> Optional[PatrolRoute]:
        return self.routes.get(route_id)

    def create(self, *, checkpoints, **kwargs) -> PatrolRoute:
        route = PatrolRoute(id=next_id("route"), checkpoints=list(checkpoints), **kwargs)
        self.routes[route.id] = route
        return route

    def update(self, route_id: str, changes: Dict[str, Any]) -> Optional[PatrolRoute]:
        self.routes[route_id] = replace(self.routes[route_id], **changes)
        return self.routes[route_id]

    def delete(self, route_id: str) -> bool:
        return self.routes.pop(route_id, None) is not None


class InMemoryPatrols:
    def __init__(self, patrols: Sequence[Patrol] = ()):
        self.patrols: Dict[str, Patrol] = {p.id: p for p in patrols}

    def create(self, **kwargs) -> Patrol:
        patrol = Patrol(id=next_id("patrol"), status=PatrolStatus.SCHEDULED, **kwargs)
        self.patrols[patrol.id] = patrol
        return patrol

    def get_by_id(self, patrol_id: str) -> Optional[Patrol]:
        return self.patrols.get(patrol_id)

    def list_for_organization(self, organization_id: str, *, status=None, guard_id=None, limit: int = 50):
        hits = [
            p
            for p in self.patrols.values()
            if p.organization_id == organization_id
            and (status is None or p.status == status)
            and (guard_id is None or p.guard_id == guard_id)
        ]
        return hits[:limit]

    def list_created_since(self, organization_id: str, since: datetime):
        return [
            p
            for p in self.patrols.values()
            if p.organization_id == organization_id and (p.created_at is None or p.created_at >= since)
        ]

    def set_status(self, patrol_id: str, status: PatrolStatus, *, start_time=None, end_time=None):
        p = self.patrols[patrol_id]
        self.patrols[patrol_id] = replace(
            p, status=status, start_time=start_time or p.start_time, end_time=end_time or p.end_time
        )
        return self.patrols[patrol_id]

    def increment_completed(self, patrol_id: str) -> None:
        p = self.patrols[patrol_id]
        self.patrols[patrol_id] = replace(p, checkpoints_completed=p.checkpoints_completed + 1)


class InMemoryVisits:
    def __init__(self):
        self.visits: List[CheckpointVisit] = []

    def create(self, **kwargs) -> CheckpointVisit:
        visit = CheckpointVisit(id=next_id("visit"), **kwargs)
        self.visits.append(visit)
        return visit

    def recent_visit(self, patrol_id: str, location_id: str, *, since: datetime):
        hits = [
            v for v in self.visits if v.patrol_id == patrol_id and v.location_id == location_id and v.visited_at >= since
        ]
        return hits[-1] if hits else None


class InMemoryBackupRequests:
    def __init__(self):
        self.requests: Dict[str, BackupRequest] = {}

    def create(self, *, created_at: datetime, **kwargs) -> BackupRequest:
        request = BackupRequest(
            id=next_id("backup"), status=BackupRequestStatus.ACTIVE, created_at=created_at, updated_at=created_at, **kwargs
        )
        self.requests[request.id] = request
        return request

    def get_by_id(self, request_id: str) -> Optional[BackupRequest]:
        return self.requests.get(request_id)

    def list_active(self, organization_id: str):
        hits = [
            r
            for r in self.requests.values()
            if r.organization_id == organization_id and r.status == BackupRequestStatus.ACTIVE
        ]
        return sorted(hits, key=lambda r: r.created_at, reverse=True)

    def update_status(self, request_id: str, *, status, responded_by, response_time, resolution_notes, updated_at):
        r = self.requests[request_id]
        self.requests[request_id] = replace(
            r,
            status=status,
            responded_by=responded_by or r.responded_by,
            response_time=response_time or r.response_time,
            resolution_notes=resolution_notes or r.resolution_notes,
            updated_at=updated_at,
        )
        return self.requests[request_id]


class InMemoryIncidents:
    def __init__(self):
        self.incidents: Dict[str, Incident] = {}

    def create(self, *, created_at: datetime, **kwargs) -> Incident:
        incident = Incident(
            id=next_id("incident"),
            status=IncidentStatus.REPORTED,
            created_at=created_at,
            updated_at=created_at,
            **kwargs,
        )
        self.incidents[incident.id] = incident
        return incident

    def get_by_id(self, incident_id: str) -> Optional[Incident]:
        return self.incidents.get(incident_id)

    def list_for_organization(self, organization_id: str, *, status=None):
        return [
            i
            for i in self.incidents.values()
            if i.organization_id == organization_id and (status is None or i.status == status)
        ]

    def set_status(self, incident_id: str, status, *, updated_at: datetime):
        self.incidents[incident_id] = replace(self.incidents[incident_id], status=status, updated_at=updated_at)
        return self.incidents[incident_id]
