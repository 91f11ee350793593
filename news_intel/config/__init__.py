"""Configuration package exports."""
from news_intel.config.settings import (
    SYSTEM_SETTINGS,
    FEED_SETTINGS,
    SELECTION_SETTINGS,
    CACHE_SETTINGS,
    LLM_SETTINGS,
    get_settings
)

__all__ = [
    'SYSTEM_SETTINGS',
    'FEED_SETTINGS',
    'SELECTION_SETTINGS',
    'CACHE_SETTINGS',
    'LLM_SETTINGS',
    'get_settings'
]
