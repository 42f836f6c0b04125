"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Default model settings
DEFAULT_MODEL = "gpt-4.1"
DEFAULT_MAX_TOKENS = 32768
DEFAULT_MAX_RETRIES = 3
DEFAULT_REQUEST_TIMEOUT = 600.0

# Default cache settings
DEFAULT_CACHE_MEMORY_MB = 5.0
DEFAULT_CACHE_SESSION_MB = 50.0
DEFAULT_CACHE_DISABLED = False

# Default packaging settings
DEFAULT_ADDON_NAME = "addon"
DEFAULT_ARCHIVE_EXTENSION = ".mcaddon"

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "model": DEFAULT_MODEL,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "max_retries": DEFAULT_MAX_RETRIES,
        "request_timeout": DEFAULT_REQUEST_TIMEOUT,
        "cache_memory_mb": DEFAULT_CACHE_MEMORY_MB,
        "cache_session_mb": DEFAULT_CACHE_SESSION_MB,
        "cache_disabled": DEFAULT_CACHE_DISABLED,
        "session_db": None,
        "prompt_dir": None,
        "log_level": DEFAULT_LOG_LEVEL,
    }
