import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "office_erp"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ATTENDANCE_URL = os.getenv("ATTENDANCE_URL", "")

WORK_START = os.getenv("WORK_START", "09:00")
WORK_END = os.getenv("WORK_END", "17:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "0"))

PERFORMANCE_WEIGHTS = {
    "completion": float(os.getenv("PERF_COMPLETION_WEIGHT", "0.6")),
    "on_time": float(os.getenv("PERF_ON_TIME_WEIGHT", "0.4")),
    "overdue_penalty": float(os.getenv("PERF_OVERDUE_PENALTY", "5")),
}
PERFORMANCE_PERIOD_DAYS = int(os.getenv("PERFORMANCE_PERIOD_DAYS", "30"))

REWARD_MAX_RETRIES = int(os.getenv("REWARD_MAX_RETRIES", "5"))

TRUST_PROXY_HOPS = int(os.getenv("TRUST_PROXY_HOPS", "1"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "logs/office_erp.log")
