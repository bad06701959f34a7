import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_portal"),
}

ALLOWED_EMAIL_DOMAIN = os.getenv("ALLOWED_EMAIL_DOMAIN", "company.com")

IDLE_LIMIT_SECONDS = int(os.getenv("IDLE_LIMIT_SECONDS", "900"))
REQUIRED_SECONDS = int(os.getenv("REQUIRED_SECONDS", "28800"))
TICK_SECONDS = int(os.getenv("TICK_SECONDS", "1"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

START_SCHEDULER = bool(int(os.getenv("START_SCHEDULER", "1")))
