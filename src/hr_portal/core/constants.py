"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import LeaveType

TICK_SECONDS = 1
IDLE_LIMIT_SECONDS = 15 * 60
REQUIRED_SECONDS = 8 * 60 * 60

DEFAULT_BREAK_START_HOUR = 15
DEFAULT_BREAK_END_HOUR = 16

LEAVE_ENTITLEMENTS = {
    LeaveType.SICK: 10,
    LeaveType.CASUAL: 10,
    LeaveType.ANNUAL: 14,
}

MAX_OVERTIME_HOURS = 3.0
OVERTIME_HOURS_STEP = 0.5

MIN_REVIEW_SCORE = 1
MAX_REVIEW_SCORE = 10

DEFAULT_HISTORY_LIMIT = 30
MIN_PASSWORD_LENGTH = 6
