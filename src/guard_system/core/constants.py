"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_M = 6_371_000

DEFAULT_LIVE_WINDOW_MINUTES = 30
DEFAULT_STREAM_INTERVAL_SECONDS = 10
DEFAULT_DUPLICATE_WINDOW_MINUTES = 5
DEFAULT_ON_DUTY_WINDOW_HOURS = 2

DEFAULT_PATROL_LIST_LIMIT = 50
DEFAULT_STATISTICS_DAYS = 30
DEFAULT_ROUTE_DURATION_MINUTES = 60
DEFAULT_QR_VALID_HOURS = 24
DEFAULT_ANALYTICS_GUARD_LIMIT = 20
MAX_ANALYTICS_GUARD_LIMIT = 100
DEFAULT_TREND_DAYS = 30
MAX_TREND_DAYS = 365
DEFAULT_PERFORMANCE_DAYS = 90
STANDARD_SHIFT_HOURS = 8
SYNC_HISTORY_LIMIT = 50
RECENT_ACTIVITY_LIMIT = 5

# Access codes skip O and 0 so they can be read aloud.
ACCESS_CODE_ALPHABET = "ABCDEFGHIJKLMNPQRSTUVWXYZ123456789"
ACCESS_CODE_LENGTH = 5
ACCESS_CODE_MAX_ATTEMPTS = 10
SHORT_TOKEN_MAX_LENGTH = 10

SUPER_ADMIN_PERMISSIONS = {"*": "*"}

DEFAULT_ROLES = (
    (
        "Admin",
        [
            "manage_users", "view_users", "manage_roles", "view_reports",
            "manage_settings", "view_attendance", "manage_attendance",
            "view_incidents", "manage_incidents", "view_patrols", "manage_patrols",
        ],
    ),
    (
        "Supervisor",
        [
            "view_users", "view_reports", "view_attendance", "manage_attendance",
            "view_incidents", "manage_incidents", "view_patrols", "manage_patrols",
        ],
    ),
    ("Security Guard", ["view_attendance", "view_incidents", "view_patrols"]),
)

DEFAULT_DEPARTMENTS = (
    ("Security Operations", "Main security operations and patrol management"),
    ("Administration", "Administrative and management functions"),
    ("Night Shift", "Night time security operations"),
)
