"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_RECENT_DAYS = 7
DEFAULT_LATE_GRACE_MINUTES = 0
DEFAULT_WORK_START = "09:00"
DEFAULT_WORK_END = "17:00"

DEFAULT_REQUEST_LIST_LIMIT = 200

DEFAULT_REWARD_MAX_RETRIES = 5
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
RECENT_CASHOUTS_LIMIT = 5

DEFAULT_PERFORMANCE_PERIOD_DAYS = 30
# Score policy: completion and on-time rates are weighted, each overdue task
# subtracts a flat penalty, result clamped to 0..100.
DEFAULT_COMPLETION_WEIGHT = 0.6
DEFAULT_ON_TIME_WEIGHT = 0.4
DEFAULT_OVERDUE_PENALTY = 5.0
RATING_GOOD_THRESHOLD = 80
RATING_WARNING_THRESHOLD = 60

QR_DEFAULT_ERROR_CORRECTION = "H"
