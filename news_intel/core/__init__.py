"""Core package exports."""
from news_intel.core.types import (
    Analysis,
    Article,
    Briefing,
    CacheRecord,
    CategoryWeight,
    ContentSource,
    FactCheck,
    FactCheckFinding,
    KeyDevelopment,
    Perspective,
    UserPreferences,
    make_article_id
)
from news_intel.core.constants import (
    ALL_CATEGORIES,
    CATEGORIES,
    CATEGORIES_WITH_SUBCATEGORIES,
    CONTENT_SOURCES,
    DEFAULT_SOURCE_IDS,
    SortMode,
    sources_by_ids
)
from news_intel.core.errors import (
    AnalysisError,
    BatchSubmissionError,
    BriefingError,
    CacheReadError,
    NewsIntelError,
    SourceFetchError
)
from news_intel.core.preferences import normalize_preferences

__all__ = [
    'Analysis',
    'Article',
    'Briefing',
    'CacheRecord',
    'CategoryWeight',
    'ContentSource',
    'FactCheck',
    'FactCheckFinding',
    'KeyDevelopment',
    'Perspective',
    'UserPreferences',
    'make_article_id',
    'ALL_CATEGORIES',
    'CATEGORIES',
    'CATEGORIES_WITH_SUBCATEGORIES',
    'CONTENT_SOURCES',
    'DEFAULT_SOURCE_IDS',
    'SortMode',
    'sources_by_ids',
    'AnalysisError',
    'BatchSubmissionError',
    'BriefingError',
    'CacheReadError',
    'NewsIntelError',
    'SourceFetchError',
    'normalize_preferences'
]
