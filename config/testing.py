import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shift_tasks_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

JWT_SECRET = "test-jwt-secret"
JWT_EXPIRES_HOURS = 1

ADMIN_EMAIL = "admin@taskmang.com"
ADMIN_PASSWORD = "admin123"

AUTO_INIT_DB = False
