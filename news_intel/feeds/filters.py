"""Filters for collapsing duplicate articles and ordering the feed."""
from typing import List

from news_intel.core.types import Article
from news_intel.logging_cfg.logger import setup_logger, update_metrics

logger = setup_logger()


def deduplicate_articles(articles: List[Article]) -> List[Article]:
    """
    Remove articles whose dedup key (link, else title) was already seen.

    The first occurrence wins and input order is preserved. Keys are compared
    verbatim: links differing only by case, scheme or a trailing slash are
    distinct articles.
    """
    seen = set()
    unique_articles = []
    duplicates_found = 0

    for article in articles:
        key = article.dedup_key
        if key in seen:
            duplicates_found += 1
            logger.debug(f"Skipping duplicate: {article.title[:50]}")
            continue
        seen.add(key)
        unique_articles.append(article)

    if duplicates_found:
        update_metrics('duplicate_articles', duplicates_found)
    logger.info(f"Original count: {len(articles)}, Deduplicated count: {len(unique_articles)}")
    return unique_articles


def sort_by_published(articles: List[Article]) -> List[Article]:
    """Most recent first; equal timestamps keep their relative order."""
    return sorted(articles, key=lambda a: a.published_at, reverse=True)


def build_canonical_feed(articles: List[Article]) -> List[Article]:
    """Deduplicate, then order newest-first. This is the order every later stage works from."""
    feed = sort_by_published(deduplicate_articles(articles))
    update_metrics('total_articles', len(feed))
    return feed
