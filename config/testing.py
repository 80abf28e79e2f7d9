import os

from .config import *  # noqa: F401,F403
from .config import db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_password="fieldforce")
DB_CONFIG["database"] = os.getenv("DB_NAME", "fieldforce_test")

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = False
AUTO_SEED_DB = False

GEOFENCE_ENFORCED = True
REQUIRE_SUMMARY_PRODUCTS = True
