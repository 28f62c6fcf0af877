"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

# Check-ins strictly after this time of day are late. Global for every employee.
LATE_CUTOFF = time(9, 0, 0)

MAX_ADDRESS_LENGTH = 500
MAX_NOTES_LENGTH = 500
MIN_PASSWORD_LENGTH = 6

MIN_LEAVE_REASON_LENGTH = 10
MAX_LEAVE_REASON_LENGTH = 1000
MAX_LEAVE_NOTES_LENGTH = 1000

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_PAGE_SIZE = 15
DEFAULT_SUMMARY_DAYS = 30
