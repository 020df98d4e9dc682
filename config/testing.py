import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shop_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False

LOCATION_TIMEOUT_SECONDS = 1
GEOCODER_URL = "http://localhost:9/reverse"
GEOCODER_TIMEOUT_SECONDS = 1
GEOCODER_USER_AGENT = "shop-attendance-test"

PIN_ATTEMPT_BACKEND = "memory"
