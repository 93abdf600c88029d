"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_COMPANY_CODE = "OI"
EMPLOYEE_CODE_SERIAL_WIDTH = 4
MAX_EMPLOYEE_CODE_RETRIES = 9999

DEFAULT_SESSION_DAYS = 7
DEFAULT_PER_PAGE = 15
DIRECTORY_PER_PAGE = 50
MAX_PER_PAGE = 100

DEFAULT_LOGIN_MAX_ATTEMPTS = 5
DEFAULT_LOGIN_DECAY_MINUTES = 15

GENERATED_PASSWORD_LENGTH = 12
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128

LEAVE_REASON_MIN_LENGTH = 10
LEAVE_REASON_MAX_LENGTH = 500
ADMIN_COMMENT_MAX_LENGTH = 500

DEFAULT_MONTHLY_WAGE = 50000
DEFAULT_WORKING_DAYS_PER_WEEK = 5
DEFAULT_BREAK_TIME_HOURS = "1.0"
