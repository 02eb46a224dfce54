"""Environment-driven settings.

Each setting is read through a small accessor so tests can patch
``os.environ`` without reloading modules.
"""

import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_BASE_URL = "https://archiveofourown.org"
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_FETCH_MAX_CONNECTIONS = 20
DEFAULT_RECOMMENDATION_LIMIT = 20
DEFAULT_LOG_LEVEL = "INFO"


def _get_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Invalid value %r for %s, using %s", raw, name, default)
        return default
    if value <= 0:
        logger.warning("Non-positive value %r for %s, using %s", raw, name, default)
        return default
    return value


def get_archive_base_url() -> str:
    return os.environ.get("ARCHIVE_BASE_URL", DEFAULT_ARCHIVE_BASE_URL).rstrip("/")


def get_fetch_timeout() -> float:
    return _get_number("FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT, float)


def get_fetch_max_connections() -> int:
    return _get_number("FETCH_MAX_CONNECTIONS", DEFAULT_FETCH_MAX_CONNECTIONS, int)


def get_recommendation_limit() -> int:
    return _get_number("RECOMMENDATION_LIMIT", DEFAULT_RECOMMENDATION_LIMIT, int)


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
