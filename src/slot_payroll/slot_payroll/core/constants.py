"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

GRACE_MINUTES = 5
MINUTES_PER_DAY = 1440
MAX_SLOT_NAME_LENGTH = 80
MAX_ADMIN_NOTE_LENGTH = 500

DEFAULT_APP_TIMEZONE = "Asia/Kolkata"
DEFAULT_SLOT_CACHE_TTL_SECONDS = 300

# Admin upsert without an explicit time stamps the record at local noon.
DEFAULT_UPSERT_HOUR = 12

EMPLOYEE_CODE_PREFIX = "EMP"
EMPLOYEE_CODE_DIGITS = 6
ADMIN_EMPLOYEE_CODE = "ADMIN"
MIN_PASSWORD_LENGTH = 6
