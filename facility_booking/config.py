import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Reservations
HOLD_WINDOW_MINUTES = int(os.getenv("HOLD_WINDOW_MINUTES", "10"))
LOCK_TIMEOUT_MS = int(os.getenv("LOCK_TIMEOUT_MS", "1500"))

# Background sweep
SWEEP_ENABLED = os.getenv("SWEEP_ENABLED", "true").lower() == "true"
SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "60"))

# Payments
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "MMK")
DEFAULT_PAYMENT_PROVIDER = os.getenv("DEFAULT_PAYMENT_PROVIDER", "KBZPay")

# Points history pagination
POINTS_HISTORY_DEFAULT_LIMIT = int(os.getenv("POINTS_HISTORY_DEFAULT_LIMIT", "20"))
POINTS_HISTORY_MAX_LIMIT = int(os.getenv("POINTS_HISTORY_MAX_LIMIT", "100"))
