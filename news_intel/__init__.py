"""Root package exports."""
from news_intel.core.types import Analysis, Article, Briefing, ContentSource, UserPreferences
from news_intel.core.errors import (
    AnalysisError,
    BatchSubmissionError,
    BriefingError,
    CacheReadError,
    NewsIntelError,
    SourceFetchError
)
from news_intel.feeds import build_canonical_feed, fetch_all
from news_intel.selection import select_for_analysis
from news_intel.pipeline import analyze_batch, reanalyze_article
from news_intel.cache import BriefingCache, FeedCache, FileStore, MemoryStore
from news_intel.llm import BriefingGenerator, OpenAIAnalyzer
from news_intel.session import FeedSession, RecurringTask

__version__ = '0.1.0'

__all__ = [
    'Analysis',
    'Article',
    'Briefing',
    'ContentSource',
    'UserPreferences',
    'AnalysisError',
    'BatchSubmissionError',
    'BriefingError',
    'CacheReadError',
    'NewsIntelError',
    'SourceFetchError',
    'build_canonical_feed',
    'fetch_all',
    'select_for_analysis',
    'analyze_batch',
    'reanalyze_article',
    'BriefingCache',
    'FeedCache',
    'FileStore',
    'MemoryStore',
    'BriefingGenerator',
    'OpenAIAnalyzer',
    'FeedSession',
    'RecurringTask'
]
