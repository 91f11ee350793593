"""Session package exports."""
from news_intel.session.feed_session import FeedSession
from news_intel.session.pagination import filter_articles, page_count, sort_articles, view
from news_intel.session.scheduler import RecurringTask

__all__ = [
    'FeedSession',
    'RecurringTask',
    'filter_articles',
    'page_count',
    'sort_articles',
    'view'
]
