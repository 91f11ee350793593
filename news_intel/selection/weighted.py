"""Preference-weighted selection of the articles worth analyzing."""
import random
from collections import OrderedDict, deque
from typing import Deque, Dict, List, Optional

from news_intel.config.settings import SELECTION_SETTINGS
from news_intel.core.types import Article, UserPreferences
from news_intel.logging_cfg.logger import setup_logger

logger = setup_logger()


def partition_by_category(articles: List[Article]) -> Dict[str, Deque[Article]]:
    """Per-category queues, each keeping the input (newest-first) order."""
    queues: Dict[str, Deque[Article]] = OrderedDict()
    for article in articles:
        queues.setdefault(article.category, deque()).append(article)
    return queues


def build_lottery(preferences: UserPreferences, rng: Optional[random.Random] = None) -> List[str]:
    """One slot per weight point for each weighted category, uniformly shuffled."""
    lottery = []
    for category, entry in preferences.category_weights.items():
        lottery.extend([category] * entry.weight)
    (rng or random).shuffle(lottery)
    return lottery


def select_for_analysis(articles: List[Article], preferences: UserPreferences,
                        target_count: Optional[int] = None,
                        rng: Optional[random.Random] = None) -> List[Article]:
    """
    Pick at most ``target_count`` distinct articles, biased toward heavier categories.

    Categories are drawn from the shuffled lottery (cycling through it) and each
    draw takes the most recent remaining article of that category. Drawing stops
    once the batch is full or after twice the lottery length. Any shortfall is
    filled from ``articles`` in order, so the result always holds
    ``min(target_count, len(articles))`` articles.

    Args:
        articles: Deduplicated, recency-filtered articles sorted newest-first
        preferences: Normalized user preferences
        target_count: Batch size, defaults to SELECTION_SETTINGS['analysis_batch_size']
        rng: Optional random source (tests pass a seeded one)
    """
    if target_count is None:
        target_count = SELECTION_SETTINGS.get('analysis_batch_size', 10)
    if target_count <= 0 or not articles:
        return []

    queues = partition_by_category(articles)
    lottery = build_lottery(preferences, rng)

    selected: List[Article] = []
    selected_ids = set()
    max_attempts = 2 * len(lottery)
    attempts = 0

    while len(selected) < target_count and attempts < max_attempts:
        category = lottery[attempts % len(lottery)]
        attempts += 1
        queue = queues.get(category)
        if not queue:
            continue
        article = queue.popleft()
        selected.append(article)
        selected_ids.add(article.id)

    weighted_count = len(selected)

    # Fallback fill for sparse categories or a short lottery
    for article in articles:
        if len(selected) >= target_count:
            break
        if article.id in selected_ids:
            continue
        selected.append(article)
        selected_ids.add(article.id)

    logger.info(
        f"Selected {len(selected)} of {len(articles)} articles for analysis "
        f"({weighted_count} weighted, {len(selected) - weighted_count} fill)"
    )
    return selected
