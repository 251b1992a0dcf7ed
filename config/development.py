import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "office_erp"),
}

DEBUG = True

# Apply schema.sql on startup (idempotent: CREATE TABLE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Check-in page encoded into the office QR code
ATTENDANCE_URL = os.getenv("ATTENDANCE_URL", "http://localhost:5000/attendance")

WORK_START = os.getenv("WORK_START", "09:00")
WORK_END = os.getenv("WORK_END", "17:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))

PERFORMANCE_WEIGHTS = {
    "completion": float(os.getenv("PERF_COMPLETION_WEIGHT", "0.6")),
    "on_time": float(os.getenv("PERF_ON_TIME_WEIGHT", "0.4")),
    "overdue_penalty": float(os.getenv("PERF_OVERDUE_PENALTY", "5")),
}
PERFORMANCE_PERIOD_DAYS = int(os.getenv("PERFORMANCE_PERIOD_DAYS", "30"))

REWARD_MAX_RETRIES = int(os.getenv("REWARD_MAX_RETRIES", "5"))

# Number of reverse proxies in front of the app (0 = use the socket address)
TRUST_PROXY_HOPS = int(os.getenv("TRUST_PROXY_HOPS", "0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "")
