"""
Per-user feed state: load from cache or refresh, incremental load-more,
single-article re-analysis, view state and the scheduled auto-refresh.
"""
import random
import threading
from datetime import datetime
from typing import Callable, List, Optional

from news_intel.cache.store import MemoryStore
from news_intel.cache.ttl_cache import BriefingCache, FeedCache, briefing_cache_key, feed_cache_key, utc_now
from news_intel.config.settings import LLM_SETTINGS, SELECTION_SETTINGS
from news_intel.core.constants import ALL_CATEGORIES, SortMode, sources_by_ids
from news_intel.core.preferences import normalize_preferences
from news_intel.core.types import Article, Briefing, CacheRecord, ContentSource
from news_intel.feeds.fetcher import fetch_all
from news_intel.feeds.filters import build_canonical_feed
from news_intel.llm.analyzer import Analyzer
from news_intel.logging_cfg.logger import setup_logger
from news_intel.pipeline.orchestrator import analyze_batch, reanalyze_article
from news_intel.selection.weighted import select_for_analysis
from news_intel.session import pagination
from news_intel.session.scheduler import RecurringTask

logger = setup_logger()

Fetcher = Callable[[List[ContentSource]], List[Article]]


def _personal_score(article: Article) -> float:
    return article.analysis.personal_relevance if article.analysis else -1


class FeedSession:
    """
    Holds the analyzed and fetched article sets for one user and preferences.

    ``analyzed`` is always a subset of ``fetched`` (by id) and only grows between
    refreshes. Mutations are serialized by a re-entrant lock so the auto-refresh
    thread and interactive calls never interleave their writes.
    """

    def __init__(self, user_id: str, preferences, analyzer: Analyzer, store=None,
                 sources: Optional[List[ContentSource]] = None,
                 fetcher: Optional[Fetcher] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 rng: Optional[random.Random] = None,
                 batch_size: Optional[int] = None,
                 page_size: Optional[int] = None):
        self.user_id = user_id
        self.preferences = normalize_preferences(preferences)
        self.analyzer = analyzer
        self.sources = sources if sources is not None else sources_by_ids(self.preferences.sources)
        self.fetcher = fetcher or fetch_all
        self.clock = clock or utc_now
        self.rng = rng
        self.batch_size = batch_size or SELECTION_SETTINGS.get('analysis_batch_size', 10)
        self.page_size = page_size or SELECTION_SETTINGS.get('page_size', 10)

        store = store if store is not None else MemoryStore()
        self.feed_cache = FeedCache(store, clock=self.clock)
        self.briefing_cache = BriefingCache(store, clock=self.clock)

        self.analyzed: List[Article] = []
        self.fetched: List[Article] = []
        self.fetched_at: Optional[datetime] = None
        self.filter_category = ALL_CATEGORIES
        self.sort_mode = SortMode.DATE
        self.page = 1

        self._failed_ids = set()
        self._generation = 0
        self._lock = threading.RLock()
        self._refresh_task: Optional[RecurringTask] = None
        self._closed = False

    @property
    def cache_key(self) -> str:
        return feed_cache_key(self.user_id, self.preferences)

    # --- loading ---

    def _apply_record(self, record: CacheRecord) -> None:
        with self._lock:
            self.analyzed = list(record.analyzed_articles)
            self.fetched = list(record.all_fetched_articles)
            self.fetched_at = record.fetched_at
            self._failed_ids = set()
            self._generation += 1
            self.page = 1

    def load(self, force: bool = False) -> List[Article]:
        """Serve the cached record while fresh, otherwise refresh. Returns the current page."""
        if not force:
            record = self.feed_cache.load_record(self.cache_key)
            if record is not None:
                logger.info(f"Loaded {len(record.analyzed_articles)} analyzed articles from cache "
                            f"(fetched {record.fetched_at.isoformat()})")
                self._apply_record(record)
                return self.view()
        self.refresh()
        return self.view()

    def refresh(self) -> Optional[CacheRecord]:
        """
        Fetch every source, analyze a weighted batch and persist the result.

        Source failures only shrink the feed; a fatal analysis failure propagates
        and leaves the previous state in place. A refresh still running when the
        session is closed is discarded and returns None.
        """
        logger.info(f"Refreshing feed for {self.user_id} from {len(self.sources)} sources")
        feed = build_canonical_feed(self.fetcher(self.sources))
        if not feed:
            logger.warning("No articles fetched; the feed is empty")

        batch = select_for_analysis(feed, self.preferences, self.batch_size, self.rng)
        analyzed = analyze_batch(batch, self.preferences, self.analyzer)
        analyzed_ids = {a.id for a in analyzed}

        with self._lock:
            if self._closed:
                logger.info("Session closed during refresh; discarding the result")
                return None
            record = self.feed_cache.save_record(self.cache_key, analyzed, feed, self.clock())
            self._apply_record(record)
            self._failed_ids = {a.id for a in batch if a.id not in analyzed_ids}
        return record

    def backlog(self) -> List[Article]:
        """Fetched articles not analyzed yet and not already failed this session."""
        with self._lock:
            analyzed_ids = {a.id for a in self.analyzed}
            return [a for a in self.fetched if a.id not in analyzed_ids and a.id not in self._failed_ids]

    def load_more(self, count: Optional[int] = None) -> int:
        """
        Analyze the next slice of the backlog and append it. Returns how many
        articles were added; zero when there is nothing left to load.
        """
        count = count or SELECTION_SETTINGS.get('load_more_batch_size', 10)
        with self._lock:
            pending = self.backlog()[:count]
            generation = self._generation
        if not pending:
            logger.info("Nothing to load: every fetched article has been analyzed")
            return 0

        analyzed = analyze_batch(pending, self.preferences, self.analyzer)
        analyzed_ids = {a.id for a in analyzed}

        with self._lock:
            if self._closed:
                logger.info("Session closed during load-more; discarding the batch")
                return 0
            if generation != self._generation:
                logger.warning("Feed was refreshed during load-more; discarding the stale batch")
                return 0
            self.analyzed.extend(analyzed)
            self._failed_ids.update(a.id for a in pending if a.id not in analyzed_ids)
            self._save()
        logger.info(f"Loaded {len(analyzed)} more articles ({len(self.analyzed)}/{len(self.fetched)} analyzed)")
        return len(analyzed)

    def reanalyze(self, article_id: str) -> Article:
        """
        Run the analysis again for one article and store the new result.

        Raises:
            KeyError: the id is not part of this feed.
            AnalysisError: the previous analysis (if any) is kept.
        """
        with self._lock:
            article = next((a for a in self.analyzed if a.id == article_id), None)
            if article is None:
                article = next((a for a in self.fetched if a.id == article_id), None)
            if article is None:
                raise KeyError(article_id)

        updated = reanalyze_article(article, self.preferences, self.analyzer)

        with self._lock:
            for index, existing in enumerate(self.analyzed):
                if existing.id == article_id:
                    self.analyzed[index] = updated
                    break
            else:
                self.analyzed.append(updated)
            self._failed_ids.discard(article_id)
            self._save()
        return updated

    def _save(self) -> None:
        record = self.feed_cache.save_record(self.cache_key, self.analyzed, self.fetched, self.fetched_at)
        self.fetched_at = record.fetched_at

    # --- view state ---

    def set_filter(self, category: str) -> None:
        with self._lock:
            self.filter_category = category or ALL_CATEGORIES
            self.page = 1

    def set_sort(self, sort_mode) -> None:
        with self._lock:
            self.sort_mode = SortMode(sort_mode)
            self.page = 1

    def set_page(self, page: int) -> None:
        with self._lock:
            self.page = max(1, int(page))

    def filtered(self) -> List[Article]:
        with self._lock:
            return pagination.filter_articles(self.analyzed, self.filter_category)

    def view(self) -> List[Article]:
        with self._lock:
            return pagination.view(self.analyzed, self.filter_category, self.sort_mode,
                                   self.page, self.page_size)

    def page_count(self) -> int:
        return pagination.page_count(len(self.filtered()), self.page_size)

    def categories(self) -> List[str]:
        """Categories present among analyzed articles, in first-seen order."""
        with self._lock:
            return list(dict.fromkeys(a.category for a in self.analyzed))

    # --- briefing ---

    def daily_briefing(self, generator: Callable[[List[Article], object], Briefing],
                       limit: Optional[int] = None, force: bool = False) -> Briefing:
        """Cached daily briefing built from the most personally relevant analyzed articles."""
        key = briefing_cache_key(self.user_id, self.preferences)
        if not force:
            cached = self.briefing_cache.load_briefing(key)
            if cached is not None:
                logger.info("Using cached daily briefing")
                return cached

        limit = limit or LLM_SETTINGS.get('briefing_article_limit', 15)
        with self._lock:
            top = sorted(self.analyzed, key=_personal_score, reverse=True)[:limit]
        briefing = generator(top, self.preferences)
        return self.briefing_cache.save_briefing(key, briefing)

    # --- auto refresh ---

    def start_auto_refresh(self, interval: Optional[float] = None) -> RecurringTask:
        """Force a refresh every feed TTL until :meth:`close`."""
        interval = interval or self.feed_cache.ttl.total_seconds()
        with self._lock:
            if self._refresh_task is None or not self._refresh_task.is_running:
                self._refresh_task = RecurringTask(interval, self.refresh, name=f"auto-refresh-{self.user_id}")
                self._refresh_task.start()
            return self._refresh_task

    def close(self) -> None:
        """Cancel the auto-refresh. Work still in flight afterwards is not saved."""
        with self._lock:
            self._closed = True
            task, self._refresh_task = self._refresh_task, None
        if task is not None:
            task.cancel()
            logger.info("Auto-refresh cancelled")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
