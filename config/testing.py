import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "office_erp_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

ATTENDANCE_URL = "https://erp.example.test/attendance"

WORK_START = "09:00"
WORK_END = "17:00"
LATE_GRACE_MINUTES = 0

PERFORMANCE_WEIGHTS = {"completion": 0.6, "on_time": 0.4, "overdue_penalty": 5.0}
PERFORMANCE_PERIOD_DAYS = 30

REWARD_MAX_RETRIES = 5

TRUST_PROXY_HOPS = 0

LOG_LEVEL = "WARNING"
LOG_FILE = ""
