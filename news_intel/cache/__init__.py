"""Cache package exports."""
from news_intel.cache.store import FileStore, MemoryStore
from news_intel.cache.ttl_cache import (
    BriefingCache,
    FeedCache,
    TTLCache,
    briefing_cache_key,
    feed_cache_key
)

__all__ = [
    'FileStore',
    'MemoryStore',
    'BriefingCache',
    'FeedCache',
    'TTLCache',
    'briefing_cache_key',
    'feed_cache_key'
]
