import os

from config import parse_weekdays

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_office"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Also seed demo classes and one user per role
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Registration numbers continue from the paper register
SEQUENCE_DEFAULT_START = int(os.getenv("SEQUENCE_DEFAULT_START", "214"))

# reject | coerce | allow
ATTENDANCE_HOLIDAY_POLICY = os.getenv("ATTENDANCE_HOLIDAY_POLICY", "reject")
WEEKLY_OFF_DAYS = parse_weekdays(os.getenv("WEEKLY_OFF_DAYS", "6"))

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
