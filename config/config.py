import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def db_config_from_env(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "fieldforce_db"),
    }


# Check-in and upload behaviour shared by every environment.
GEOFENCE_ENFORCED = env_flag("GEOFENCE_ENFORCED", "1")
REQUIRE_CHECKIN_LOCATION = env_flag("REQUIRE_CHECKIN_LOCATION", "0")
REQUIRE_SUMMARY_PRODUCTS = env_flag("REQUIRE_SUMMARY_PRODUCTS", "1")

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
PHOTO_BASE_URL = os.getenv("PHOTO_BASE_URL", "/uploads")
MAX_PHOTO_BYTES = int(os.getenv("MAX_PHOTO_BYTES", str(5 * 1024 * 1024)))
