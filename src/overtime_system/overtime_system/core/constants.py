"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 24 * 60
NIGHT_CUTOFF_MINUTES = 21 * 60

FIRST_SHIFT_OT_START = "06:30"
DEFAULT_OT_START = "08:30"

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

DEFAULT_NOTIFICATION_LIMIT = 8
MAX_NOTIFICATION_LIMIT = 20

MAX_STATS_RANGE_DAYS = 92
