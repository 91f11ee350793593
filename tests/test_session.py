"""Tests for the feed session: caching, load-more, re-analysis, views and auto-refresh."""
import random
import threading
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from news_intel.cache.store import MemoryStore
from news_intel.core.constants import SortMode
from news_intel.core.errors import AnalysisError
from news_intel.core.types import Analysis, Article, Briefing, FactCheck
from news_intel.session.feed_session import FeedSession
from news_intel.session.pagination import page_count, view
from news_intel.session.scheduler import RecurringTask

T0 = datetime(2024, 5, 2, 12, 0, tzinfo=timezone.utc)
PREFS = {'interests': {'Technology': 3, 'Science': 2}, 'sources': ['hacker-news', 'science-daily']}


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_feed(n=12):
    categories = ['Technology', 'Science']
    return [
        Article(id=f'https://example.com/{i}', title=f'Story {i}', link=f'https://example.com/{i}',
                source='Src', category=categories[i % 2], content_snippet='',
                published_at=T0 - timedelta(minutes=i))
        for i in range(n)
    ]


def scored_analyzer(failing=()):
    """Analyzer whose personal relevance is the story number; ids in ``failing`` raise."""
    calls = []

    def analyzer(article, preferences):
        calls.append(article.id)
        if article.id in failing:
            raise AnalysisError(article.id, 'rejected')
        number = int(article.id.rsplit('/', 1)[1])
        return Analysis(summary=article.title, general_relevance=10 - number % 10,
                        personal_relevance=number, fact_check=FactCheck(summary='none'))

    analyzer.calls = calls
    return analyzer


class FeedSessionTestCase(unittest.TestCase):
    def setUp(self):
        self.store = MemoryStore()
        self.clock = FakeClock(T0)
        self.feed = make_feed()
        self.fetcher = MagicMock(side_effect=lambda sources: list(self.feed))
        self.analyzer = scored_analyzer()

    def make_session(self, analyzer=None, **kwargs):
        kwargs.setdefault('batch_size', 4)
        kwargs.setdefault('page_size', 3)
        return FeedSession('user-1', PREFS, analyzer or self.analyzer, store=self.store,
                           fetcher=self.fetcher, clock=self.clock, rng=random.Random(2), **kwargs)


class TestLoad(FeedSessionTestCase):
    def test_cold_load_fetches_and_analyzes(self):
        session = self.make_session()

        session.load()

        self.fetcher.assert_called_once()
        self.assertEqual(len(session.analyzed), 4)
        self.assertEqual(len(session.fetched), 12)
        self.assertEqual(session.fetched_at, T0)
        self.assertTrue({a.id for a in session.analyzed} <= {a.id for a in session.fetched})

    def test_sources_come_from_preferences(self):
        session = self.make_session()
        session.load()
        self.assertEqual([s.id for s in self.fetcher.call_args[0][0]], ['hacker-news', 'science-daily'])

    def test_fresh_cache_skips_network(self):
        self.make_session().load()
        self.clock.now = T0 + timedelta(minutes=10)

        session = self.make_session()
        session.load()

        self.assertEqual(self.fetcher.call_count, 1)
        self.assertEqual(len(session.analyzed), 4)

    def test_stale_cache_refreshes(self):
        self.make_session().load()
        self.clock.now = T0 + timedelta(minutes=30)

        session = self.make_session()
        session.load()

        self.assertEqual(self.fetcher.call_count, 2)
        self.assertEqual(session.fetched_at, T0 + timedelta(minutes=30))

    def test_forced_refresh(self):
        self.make_session().load()
        self.make_session().load(force=True)
        self.assertEqual(self.fetcher.call_count, 2)

    def test_no_sources_gives_empty_feed(self):
        self.feed = []
        analyzer = MagicMock()
        session = self.make_session(analyzer=analyzer, sources=[])

        self.assertEqual(session.load(), [])
        self.assertEqual(session.analyzed, [])
        analyzer.assert_not_called()

    def test_fatal_analysis_error_keeps_previous_state(self):
        session = self.make_session()
        session.load()
        before = list(session.analyzed)

        session.analyzer = MagicMock(side_effect=RuntimeError('collaborator down'))
        with self.assertRaises(RuntimeError):
            session.refresh()
        self.assertEqual(session.analyzed, before)


class TestLoadMore(FeedSessionTestCase):
    def test_appends_new_articles(self):
        session = self.make_session()
        session.load()
        first = [a.id for a in session.analyzed]

        added = session.load_more(3)

        self.assertEqual(added, 3)
        ids = [a.id for a in session.analyzed]
        self.assertEqual(ids[:4], first)
        self.assertEqual(len(ids), len(set(ids)))
        self.assertTrue(set(ids) <= {a.id for a in session.fetched})

    def test_persists_with_original_fetch_time(self):
        session = self.make_session()
        session.load()
        self.clock.now = T0 + timedelta(minutes=5)

        session.load_more(3)

        reloaded = self.make_session()
        reloaded.load()
        self.assertEqual(self.fetcher.call_count, 1)
        self.assertEqual(len(reloaded.analyzed), 7)
        self.assertEqual(reloaded.fetched_at, T0)

    def test_noop_when_everything_is_analyzed(self):
        session = self.make_session()
        session.load()
        while session.load_more(5):
            pass
        calls = len(self.analyzer.calls)

        self.assertEqual(session.load_more(), 0)
        self.assertEqual(len(self.analyzer.calls), calls)
        self.assertEqual(len(session.analyzed), len(session.fetched))

    def test_failed_articles_are_not_retried(self):
        analyzer = scored_analyzer(failing={'https://example.com/11'})
        session = self.make_session(analyzer=analyzer)
        session.load()

        while session.load_more(5):
            pass

        self.assertEqual(analyzer.calls.count('https://example.com/11'), 1)
        self.assertEqual(len(session.analyzed), 11)
        self.assertEqual(session.load_more(), 0)


class TestReanalyze(FeedSessionTestCase):
    def test_replaces_analysis(self):
        session = self.make_session()
        session.load()
        target = session.analyzed[0]

        session.analyzer = lambda article, prefs: Analysis(
            summary='updated', general_relevance=1, personal_relevance=1, fact_check=FactCheck(summary='x'))
        updated = session.reanalyze(target.id)

        self.assertEqual(updated.analysis.summary, 'updated')
        self.assertEqual(session.analyzed[0].analysis.summary, 'updated')
        self.assertEqual(len(session.analyzed), 4)

        reloaded = self.make_session()
        reloaded.load()
        self.assertEqual([a for a in reloaded.analyzed if a.id == target.id][0].analysis.summary, 'updated')

    def test_unanalyzed_article_joins_analyzed_set(self):
        session = self.make_session()
        session.load()
        pending = session.backlog()[0]

        session.reanalyze(pending.id)

        self.assertIn(pending.id, [a.id for a in session.analyzed])

    def test_failure_keeps_previous_analysis(self):
        session = self.make_session()
        session.load()
        target = session.analyzed[0]

        session.analyzer = scored_analyzer(failing={target.id})
        with self.assertRaises(AnalysisError):
            session.reanalyze(target.id)
        self.assertEqual(session.analyzed[0], target)

    def test_unknown_id(self):
        session = self.make_session()
        session.load()
        with self.assertRaises(KeyError):
            session.reanalyze('https://nowhere.example')


class TestViewState(FeedSessionTestCase):
    def setUp(self):
        super().setUp()
        self.session = self.make_session(batch_size=12)
        self.session.load()

    def test_pages(self):
        self.assertEqual(self.session.page_count(), 4)
        self.assertEqual([a.id for a in self.session.view()],
                         ['https://example.com/0', 'https://example.com/1', 'https://example.com/2'])

        self.session.set_page(4)
        self.assertEqual(len(self.session.view()), 3)
        self.session.set_page(5)
        self.assertEqual(self.session.view(), [])

    def test_filter_resets_page(self):
        self.session.set_page(3)
        self.session.set_filter('Science')

        self.assertEqual(self.session.page, 1)
        self.assertTrue(all(a.category == 'Science' for a in self.session.view()))
        self.assertEqual(self.session.page_count(), 2)

    def test_sort_resets_page(self):
        self.session.set_page(2)
        self.session.set_sort('personalRelevance')

        self.assertEqual(self.session.page, 1)
        self.assertEqual([a.analysis.personal_relevance for a in self.session.view()], [11, 10, 9])

    def test_categories(self):
        self.assertEqual(sorted(self.session.categories()), ['Science', 'Technology'])

    def test_view_reflects_load_more(self):
        session = self.make_session(batch_size=2)
        session.load()
        session.set_sort(SortMode.PERSONAL_RELEVANCE)
        session.load_more(10)
        self.assertEqual(session.view()[0].analysis.personal_relevance, 11)


class TestDailyBriefing(FeedSessionTestCase):
    def test_cached_between_calls(self):
        session = self.make_session(batch_size=12)
        session.load()
        generator = MagicMock(return_value=Briefing(
            title='Daily', executive_summary='Summary', key_developments=[], perspectives=[], generated_at=T0))

        first = session.daily_briefing(generator, limit=5)
        second = session.daily_briefing(generator, limit=5)

        generator.assert_called_once()
        articles = generator.call_args[0][0]
        self.assertEqual([a.analysis.personal_relevance for a in articles], [11, 10, 9, 8, 7])
        self.assertEqual(first.title, second.title)

    def test_force_regenerates(self):
        session = self.make_session()
        session.load()
        generator = MagicMock(return_value=Briefing(
            title='Daily', executive_summary='Summary', key_developments=[], perspectives=[], generated_at=T0))

        session.daily_briefing(generator)
        session.daily_briefing(generator, force=True)
        self.assertEqual(generator.call_count, 2)


class TestAutoRefresh(FeedSessionTestCase):
    def test_refreshes_until_closed(self):
        refreshed = threading.Event()

        def fetcher(sources):
            refreshed.set()
            return list(self.feed)

        self.fetcher = fetcher
        session = self.make_session()
        task = session.start_auto_refresh(interval=0.01)

        self.assertTrue(refreshed.wait(2))
        self.assertTrue(task.is_running)

        session.close()
        self.assertFalse(task.is_running)
        session.close()

    def test_refresh_in_flight_at_close_is_not_saved(self):
        started = threading.Event()
        release = threading.Event()
        inner = scored_analyzer()

        def slow_analyzer(article, preferences):
            started.set()
            release.wait(2)
            return inner(article, preferences)

        session = self.make_session(analyzer=slow_analyzer)
        results = []
        worker = threading.Thread(target=lambda: results.append(session.refresh()))
        worker.start()

        self.assertTrue(started.wait(2))
        session.close()
        release.set()
        worker.join(5)

        self.assertEqual(results, [None])
        self.assertEqual(session.analyzed, [])
        self.assertIsNone(self.store.get(session.cache_key))

    def test_load_more_after_close_is_not_saved(self):
        session = self.make_session()
        session.load()
        session.close()

        self.assertEqual(session.load_more(3), 0)
        self.assertEqual(len(session.analyzed), 4)

    def test_context_manager_closes(self):
        with self.make_session() as session:
            task = session.start_auto_refresh(interval=60)
            self.assertTrue(task.is_running)
        self.assertFalse(task.is_running)


class TestRecurringTask(unittest.TestCase):
    def test_callback_errors_do_not_stop_schedule(self):
        calls = []
        done = threading.Event()

        def callback():
            calls.append(1)
            if len(calls) == 1:
                raise ValueError('first run fails')
            done.set()

        task = RecurringTask(0.01, callback)
        task.start()
        try:
            self.assertTrue(done.wait(2))
        finally:
            task.cancel()
        self.assertGreaterEqual(len(calls), 2)

    def test_cancel_before_first_run(self):
        callback = MagicMock()
        task = RecurringTask(60, callback)
        task.start()
        task.cancel()
        self.assertFalse(task.is_running)
        callback.assert_not_called()

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            RecurringTask(0, lambda: None)


class TestPagination(unittest.TestCase):
    def test_ties_keep_order(self):
        articles = [
            Article(id=str(i), title=str(i), link=str(i), source='S', category='News',
                    content_snippet='', published_at=T0)
            for i in range(5)
        ]
        self.assertEqual(view(articles, page_size=10), articles)

    def test_unanalyzed_sort_last_by_relevance(self):
        feed = make_feed(3)
        feed[1].analysis = Analysis(summary='', general_relevance=2, personal_relevance=2,
                                    fact_check=FactCheck(summary=''))
        result = view(feed, sort_mode=SortMode.GENERAL_RELEVANCE, page_size=10)
        self.assertEqual(result[0].id, feed[1].id)

    def test_page_count(self):
        self.assertEqual(page_count(0, 10), 1)
        self.assertEqual(page_count(10, 10), 1)
        self.assertEqual(page_count(11, 10), 2)

    def test_invalid_page(self):
        with self.assertRaises(ValueError):
            view(make_feed(3), page=0)


if __name__ == '__main__':
    unittest.main()
