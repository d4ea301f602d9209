import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_dashboard_test"),
}

ANNUAL_MEDICAL_LIMIT_PKR = 400000

STORAGE_ROOT = os.getenv("STORAGE_ROOT", "var/storage/test")
STORAGE_PUBLIC_URL = "http://testserver/files"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
