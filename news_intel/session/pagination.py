"""Sorted, filtered and paged views over the analyzed article set."""
import math
from typing import List, Union

from news_intel.config.settings import SELECTION_SETTINGS
from news_intel.core.constants import ALL_CATEGORIES, SortMode
from news_intel.core.types import Article


def _sort_key(sort_mode: SortMode):
    if sort_mode is SortMode.DATE:
        return lambda a: a.published_at
    if sort_mode is SortMode.PERSONAL_RELEVANCE:
        return lambda a: a.analysis.personal_relevance if a.analysis else -1
    return lambda a: a.analysis.general_relevance if a.analysis else -1


def sort_articles(articles: List[Article], sort_mode: Union[SortMode, str] = SortMode.DATE) -> List[Article]:
    """Descending by the chosen key; ties keep their existing order."""
    return sorted(articles, key=_sort_key(SortMode(sort_mode)), reverse=True)


def filter_articles(articles: List[Article], category: str = ALL_CATEGORIES) -> List[Article]:
    if not category or category == ALL_CATEGORIES:
        return list(articles)
    return [a for a in articles if a.category == category]


def page_count(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / page_size)) if page_size > 0 else 1


def view(articles: List[Article], filter_category: str = ALL_CATEGORIES,
         sort_mode: Union[SortMode, str] = SortMode.DATE, page: int = 1, page_size: int = None) -> List[Article]:
    """
    One page of ``articles`` after filtering and sorting.

    Pages are 1-based; a page past the end is empty.
    """
    page_size = page_size or SELECTION_SETTINGS.get('page_size', 10)
    if page < 1:
        raise ValueError("page must be >= 1")

    ordered = sort_articles(filter_articles(articles, filter_category), sort_mode)
    start = (page - 1) * page_size
    return ordered[start:start + page_size]
