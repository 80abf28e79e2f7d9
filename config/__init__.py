import os
from typing import Optional

SETTINGS_MODULES = {
    "development": "config.development",
    "dev": "config.development",
    "testing": "config.testing",
    "test": "config.testing",
    "production": "config.production",
    "prod": "config.production",
}


def get_settings_module(env: Optional[str] = None) -> str:
    """Dotted path of the settings module for ``env`` (default: $APP_ENV, then development)."""
    name = (env or os.getenv("APP_ENV") or "development").strip().lower()
    try:
        return SETTINGS_MODULES[name]
    except KeyError:
        known = ", ".join(sorted(SETTINGS_MODULES))
        raise ValueError(f"Unknown APP_ENV {name!r} (expected one of: {known})") from None
