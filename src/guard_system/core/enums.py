from __future__ import annotations

from enum import Enum


class TokenType(str, Enum):
    """Kinds of registration token handed out for self-service onboarding."""

    ACCESS_CODE = "access_code"
    QR = "qr"
    INVITE = "invite"


class QRCodeType(str, Enum):
    """Static codes are printed once; random codes rotate and expire."""

    STATIC = "static"
    RANDOM = "random"


class ShiftAction(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class PatrolStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class LocationType(str, Enum):
    SITE = "site"
    CHECKPOINT = "checkpoint"


class BackupRequestStatus(str, Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    REPORTED = "reported"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    CLOSED = "closed"


OPEN_INCIDENT_STATUSES = (IncidentStatus.REPORTED, IncidentStatus.INVESTIGATING)


class PositionSource(str, Enum):
    GPS_TRACKING = "gps_tracking"
    CHECKPOINT_VISIT = "checkpoint_visit"
