import os
from pathlib import Path

DEFAULT_DB_PATH = str(Path(__file__).resolve().parents[1] / "data" / "booking.sqlite3")


def _positive_int_env(name: str, default: int) -> int:
    try:
        value = int(os.getenv(name, str(default)))
    except ValueError:
        return default
    return value if value > 0 else default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


DB_PATH = os.getenv("BOOKING_DB_PATH", DEFAULT_DB_PATH)
CLEANUP_ENABLED = _bool_env("CLEANUP_ENABLED", True)
CLEANUP_INTERVAL_MINUTES = _positive_int_env("CLEANUP_INTERVAL_MINUTES", 30)
MAX_DAYS_TO_SHOW = _positive_int_env("MAX_DAYS_TO_SHOW", 60)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
