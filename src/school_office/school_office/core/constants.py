"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

REGISTRATION_SEQUENCE = "registrationNumber"
DEFAULT_SEQUENCE_START = 214
REGISTRATION_NUMBER_WIDTH = 4

SECTIONS = ("A", "B", "C", "D")
DEFAULT_SECTION = "A"
DEFAULT_EXAMS = ("Annual", "Half Yearly")

# datetime.weekday(): Monday=0 ... Sunday=6
DEFAULT_WEEKLY_OFF_DAYS = (6,)

DEFAULT_SESSION_DAYS = 7
DEFAULT_HOLIDAY_LIST_LIMIT = 20
DEFAULT_REPORT_DAYS = 7
MIN_PASSWORD_LENGTH = 6
