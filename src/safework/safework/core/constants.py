"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DAILY_POINT_CAP = 30
DAILY_POST_LIMIT = 3
DUPLICATE_WINDOW_HOURS = 24

RESUBMIT_BONUS_POINTS = 2
FALSE_REPORT_PENALTY_MULTIPLIER = 2

FALSE_REPORT_RESTRICT_THRESHOLD = 3
FALSE_REPORT_RESTRICT_DAYS = 7

DEFAULT_REQUIRE_CHECKIN = True
DEFAULT_DAY_CUTOFF_HOUR = 5

FAS_STATUS_KEY = "fas-status"
FAS_STATUS_DOWN = "down"

DEFAULT_RATE_LIMIT_MAX_REQUESTS = 100
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 60
MAX_FAILED_ATTEMPTS = 5
FAILURE_LOCK_MINUTES = 15

DEFAULT_HISTORY_LIMIT = 200
