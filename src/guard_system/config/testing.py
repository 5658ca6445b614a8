import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "guard_system_test"),
}

APP_BASE_URL = "http://localhost:5000"

DEBUG = False
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False

LIVE_WINDOW_MINUTES = 30
STREAM_INTERVAL_SECONDS = 1
DUPLICATE_WINDOW_MINUTES = 5
ON_DUTY_WINDOW_HOURS = 2
