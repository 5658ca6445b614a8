import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "guard_system"),
}

# Base for registration links and QR scan URLs; a localhost value defers to the request host.
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the demo organization and admin account
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

LIVE_WINDOW_MINUTES = int(os.getenv("LIVE_WINDOW_MINUTES", "30"))
STREAM_INTERVAL_SECONDS = int(os.getenv("STREAM_INTERVAL_SECONDS", "10"))
DUPLICATE_WINDOW_MINUTES = int(os.getenv("DUPLICATE_WINDOW_MINUTES", "5"))
ON_DUTY_WINDOW_HOURS = int(os.getenv("ON_DUTY_WINDOW_HOURS", "2"))
