"""Settings for the HR back-office.

Each module defines SECRET_KEY, DB_CONFIG, DEBUG, LOG_LEVEL, SESSION_DAYS,
EMPLOYEE_NUMBER_MAX_ATTEMPTS and the AUTO_INIT_DB / AUTO_SEED_DB switches.
"""

import os

_MODULES = {
    "dev": "config.development",
    "development": "config.development",
    "test": "config.testing",
    "testing": "config.testing",
    "prod": "config.production",
    "production": "config.production",
}


def get_settings_module() -> str:
    """Dotted settings module for APP_ENV; unknown values fall back to development."""
    return _MODULES.get(os.getenv("APP_ENV", "development").strip().lower(), "config.development")
