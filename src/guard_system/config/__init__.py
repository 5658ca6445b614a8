import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown falls back to development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "guard_system.config.production"

    if env in {"test", "testing"}:
        return "guard_system.config.testing"

    return "guard_system.config.development"
