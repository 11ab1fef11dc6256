"""
Runtime settings for the scanner backend.
Values come from the process environment, optionally seeded from .env.local.
"""

import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# System environment variables take precedence over the .env.local file.
env_path = Path(__file__).resolve().parents[2] / ".env.local"
load_dotenv(dotenv_path=env_path, override=False)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"{name}={value!r} is not an integer, using default {default}")
        return default
    if parsed < 1:
        logger.warning(f"{name}={parsed} must be positive, using default {default}")
        return default
    return parsed


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_cors_origins() -> List[str]:
    raw = os.getenv("CORS_ALLOWED_ORIGINS")
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_max_active_sessions() -> int:
    """Upper bound on concurrently registered scan sessions."""
    return _get_int("MAX_ACTIVE_SESSIONS", 100)


def get_session_event_history() -> int:
    """Number of recent snapshots each session keeps for pollers."""
    return _get_int("SESSION_EVENT_HISTORY", 50)
