"""Feed package exports."""
from news_intel.feeds.fetcher import (
    build_request,
    create_session,
    fetch_all,
    fetch_source,
    parse_feed
)
from news_intel.feeds.filters import (
    build_canonical_feed,
    deduplicate_articles,
    sort_by_published
)

__all__ = [
    'build_request',
    'create_session',
    'fetch_all',
    'fetch_source',
    'parse_feed',
    'build_canonical_feed',
    'deduplicate_articles',
    'sort_by_published'
]
