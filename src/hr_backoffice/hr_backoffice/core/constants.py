"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

EMPLOYEE_SEQUENCE_WIDTH = 4
EMPLOYEE_NUMBER_MAX_ATTEMPTS = 5

MIN_PASSWORD_LENGTH = 8
DELETED_MESSAGE_PLACEHOLDER = "[Message deleted]"
