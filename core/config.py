"""
core/config.py — Single responsibility: load environment variables from .env
and expose them through one cached accessor.

Nothing is read at import time. The environment is consulted the first time
``get_settings()`` is called and the result is kept for the process lifetime.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv

from core.models import Settings

logger = logging.getLogger(__name__)

DB_NAME: str = "healthcare_system"

MONGODB_URI_ENV: str = "MONGODB_URI"
MONGODB_TIMEOUT_ENV: str = "MONGODB_TIMEOUT_MS"
DEFAULT_TIMEOUT_MS: int = 10_000


def _parse_timeout(raw: str | None) -> int:
    """Return a positive timeout in ms, falling back to the default."""
    if not raw:
        return DEFAULT_TIMEOUT_MS
    try:
        value = int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer; using %d",
                       MONGODB_TIMEOUT_ENV, raw, DEFAULT_TIMEOUT_MS)
        return DEFAULT_TIMEOUT_MS
    if value <= 0:
        logger.warning("%s must be positive; using %d",
                       MONGODB_TIMEOUT_ENV, DEFAULT_TIMEOUT_MS)
        return DEFAULT_TIMEOUT_MS
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process settings, reading .env on first use."""
    load_dotenv()
    return Settings(
        mongodb_uri=os.getenv(MONGODB_URI_ENV, "").strip(),
        mongodb_timeout_ms=_parse_timeout(os.getenv(MONGODB_TIMEOUT_ENV)),
    )
