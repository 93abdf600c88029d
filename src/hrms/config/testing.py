import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrms_test"),
}

COMPANY_CODE = "OI"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SESSION_DAYS = 7
LOGIN_MAX_ATTEMPTS = 5
LOGIN_DECAY_MINUTES = 15

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
