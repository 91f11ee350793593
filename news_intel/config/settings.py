# Configuration file for News Intel
# Every value can be overridden through environment variables (or a .env file)

import os
from typing import Dict, Any


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# --- System Settings ---
SYSTEM_SETTINGS = {
    "log_level": os.getenv("NEWS_INTEL_LOG_LEVEL", "INFO"),     # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_dir": os.getenv("NEWS_INTEL_LOG_DIR", "logs"),
    "display_timezone": os.getenv("NEWS_INTEL_TIMEZONE", "UTC"),  # Timezone used for log timestamps
    "max_parallel_workers": _env_int("NEWS_INTEL_MAX_WORKERS", 8),  # Concurrent feed retrievals
    "http_timeout": _env_float("NEWS_INTEL_HTTP_TIMEOUT", 15),     # Per-request timeout in seconds
    "max_retries": _env_int("NEWS_INTEL_HTTP_RETRIES", 1),         # Transport-level retries per source
    "verify_ssl": _env_bool("NEWS_INTEL_VERIFY_SSL", True),
}

# --- Feed Settings ---
FEED_SETTINGS = {
    # CORS-relay endpoint, called as GET {proxy_base}?url={source url}. Empty fetches directly.
    "proxy_base": os.getenv("NEWS_INTEL_PROXY_BASE", "https://api.allorigins.win/raw"),
    "recency_window_hours": _env_int("NEWS_INTEL_RECENCY_HOURS", 48),
    "snippet_length": 200,
}

# --- Selection & Paging ---
SELECTION_SETTINGS = {
    "analysis_batch_size": _env_int("NEWS_INTEL_BATCH_SIZE", 10),  # Articles analyzed per refresh
    "load_more_batch_size": _env_int("NEWS_INTEL_LOAD_MORE_SIZE", 10),
    "page_size": _env_int("NEWS_INTEL_PAGE_SIZE", 10),
}

# --- Cache Settings ---
CACHE_SETTINGS = {
    "feed_ttl_minutes": _env_int("NEWS_INTEL_FEED_TTL_MINUTES", 30),  # Also the auto-refresh interval
    "briefing_ttl_hours": _env_int("NEWS_INTEL_BRIEFING_TTL_HOURS", 24),
    "schema_version": 1,                                             # Bump when the payload shape changes
    "cache_dir": os.getenv("NEWS_INTEL_CACHE_DIR", ".news_intel_cache"),
}

# --- LLM Settings ---
LLM_SETTINGS = {
    "model": os.getenv("NEWS_INTEL_MODEL", "gpt-4o-mini"),
    "briefing_model": os.getenv("NEWS_INTEL_BRIEFING_MODEL", "gpt-4o"),
    "temperature": 0.2,
    "briefing_temperature": 0.4,
    "max_retries": 3,
    "retry_delay": 1.0,
    "briefing_article_limit": 15,  # Articles handed to the briefing model
}


def get_settings() -> Dict[str, Any]:
    """Returns all settings as a dictionary."""
    return {
        'system': SYSTEM_SETTINGS,
        'feeds': FEED_SETTINGS,
        'selection': SELECTION_SETTINGS,
        'cache': CACHE_SETTINGS,
        'llm': LLM_SETTINGS,
    }
