import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_dashboard"),
}

ANNUAL_MEDICAL_LIMIT_PKR = int(os.getenv("ANNUAL_MEDICAL_LIMIT_PKR", "400000"))

STORAGE_ROOT = os.getenv("STORAGE_ROOT", "/var/lib/hr-dashboard/storage")
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL", "https://files.example.invalid/hr-dashboard")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
