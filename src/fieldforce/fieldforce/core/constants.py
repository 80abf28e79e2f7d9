"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LIST_LIMIT = 200
DEFAULT_NOTIFICATION_LIMIT = 100
MIN_PASSWORD_LENGTH = 6
HOURS_PRECISION = 2
EARTH_RADIUS_M = 6_371_000.0
DEFAULT_MAX_PHOTO_BYTES = 5 * 1024 * 1024
ALLOWED_PHOTO_FORMATS = frozenset({"JPEG", "PNG", "WEBP"})
