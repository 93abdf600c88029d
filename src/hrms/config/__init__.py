import os

_MODULES = {
    "production": "hrms.config.production",
    "prod": "hrms.config.production",
    "testing": "hrms.config.testing",
    "test": "hrms.config.testing",
}


def get_settings_module() -> str:
    """Settings module for ``APP_ENV``; anything unknown falls back to development."""

    env = os.getenv("APP_ENV", "development").strip().lower()
    return _MODULES.get(env, "hrms.config.development")
