"""Tests for the OpenAI-backed analysis and briefing collaborators."""
import json
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import openai

from news_intel.core.errors import AnalysisError, BatchSubmissionError, BriefingError
from news_intel.core.preferences import normalize_preferences
from news_intel.core.types import Article
from news_intel.llm.analyzer import OpenAIAnalyzer, compute_personal_relevance
from news_intel.llm.briefing import BriefingGenerator
from news_intel.llm.utils import create_client, retry_with_backoff

PUBLISHED = datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc)

ANALYSIS_JSON = {
    'summary': 'Chipmaker unveils a new AI accelerator.',
    'generalRelevance': 15,
    'factCheck': {
        'summary': 'One verifiable claim.',
        'findings': [{'claim': 'Twice as fast', 'verdict': 'Needs Context', 'source': 'https://vendor.example'}],
    },
    'perspectives': [
        {'viewpoint': 'Investors', 'summary': 'Bullish'},
        {'viewpoint': 'Competitors', 'summary': 'Skeptical'},
        {'viewpoint': 'Researchers', 'summary': 'Curious'},
        {'viewpoint': 'Regulators', 'summary': 'Watching'},
    ],
}


def make_article(title='New AI chip announced', category='Technology', snippet='Faster inference.'):
    return Article(id='https://example.com/chip', title=title, link='https://example.com/chip',
                   source='Ars Technica', category=category, content_snippet=snippet, published_at=PUBLISHED)


def make_client(content):
    client = MagicMock()
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    client.chat.completions.create.return_value = MagicMock(choices=[choice])
    return client


class TestPersonalRelevance(unittest.TestCase):
    def test_weight_and_keyword(self):
        prefs = normalize_preferences({'interests': {'Technology': 4}, 'keywords': ['ai']})
        self.assertEqual(compute_personal_relevance(make_article(), prefs), 10)

    def test_weight_only(self):
        prefs = normalize_preferences({'interests': {'Technology': 2}, 'keywords': ['crypto']})
        self.assertEqual(compute_personal_relevance(make_article(), prefs), 5)

    def test_keyword_in_snippet(self):
        prefs = normalize_preferences({'keywords': ['inference']})
        self.assertEqual(compute_personal_relevance(make_article(category='Science'), prefs), 6)

    def test_baseline(self):
        self.assertEqual(compute_personal_relevance(make_article(), normalize_preferences({})), 3)


class TestOpenAIAnalyzer(unittest.TestCase):
    def setUp(self):
        self.prefs = normalize_preferences({'interests': {'Technology': 4}, 'keywords': ['AI']})

    def test_successful_analysis(self):
        client = make_client(json.dumps(ANALYSIS_JSON))
        analyzer = OpenAIAnalyzer(client=client, model='test-model')

        analysis = analyzer(make_article(), self.prefs)

        self.assertEqual(analysis.summary, 'Chipmaker unveils a new AI accelerator.')
        self.assertEqual(analysis.general_relevance, 10)
        self.assertEqual(analysis.personal_relevance, 10)
        self.assertEqual(analysis.fact_check.findings[0].verdict, 'Needs Context')
        self.assertEqual([p.viewpoint for p in analysis.perspectives], ['Investors', 'Competitors', 'Researchers'])

        kwargs = client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs['model'], 'test-model')
        self.assertEqual(kwargs['response_format'], {'type': 'json_object'})
        self.assertIn('New AI chip announced', kwargs['messages'][1]['content'])

    def test_malformed_json(self):
        analyzer = OpenAIAnalyzer(client=make_client('this is not json'))
        with self.assertRaises(AnalysisError) as ctx:
            analyzer(make_article(), self.prefs)
        self.assertEqual(ctx.exception.article_id, 'https://example.com/chip')

    def test_missing_fields(self):
        analyzer = OpenAIAnalyzer(client=make_client(json.dumps({'summary': 'only this'})))
        with self.assertRaises(AnalysisError):
            analyzer(make_article(), self.prefs)

    def test_api_error(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.OpenAIError('bad key')

        with self.assertRaises(AnalysisError):
            OpenAIAnalyzer(client=client)(make_article(), self.prefs)
        self.assertEqual(client.chat.completions.create.call_count, 1)


class TestBriefingGenerator(unittest.TestCase):
    def setUp(self):
        self.prefs = normalize_preferences({'interests': {'Technology': 4}})

    def test_no_articles(self):
        with self.assertRaises(BriefingError):
            BriefingGenerator(client=MagicMock())([], self.prefs)

    def test_successful_briefing(self):
        client = make_client(json.dumps({
            'title': 'Daily Intelligence Briefing',
            'executiveSummary': 'Compute is getting cheaper.',
            'keyDevelopments': [{'summary': 'New chip', 'sourceTitle': 'New AI chip announced',
                                 'sourceUrl': 'https://example.com/chip'}],
            'perspectives': [{'viewpoint': 'Markets', 'summary': 'Optimistic'}],
        }))

        briefing = BriefingGenerator(client=client)([make_article()], self.prefs)

        self.assertEqual(briefing.title, 'Daily Intelligence Briefing')
        self.assertEqual(briefing.key_developments[0].source_title, 'New AI chip announced')
        self.assertEqual(briefing.perspectives[0].viewpoint, 'Markets')
        self.assertIsNotNone(briefing.generated_at.tzinfo)

    def test_api_error(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.OpenAIError('quota')
        with self.assertRaises(BriefingError):
            BriefingGenerator(client=client)([make_article()], self.prefs)

    def test_malformed_response(self):
        with self.assertRaises(BriefingError):
            BriefingGenerator(client=make_client('[]'))([make_article()], self.prefs)


class TestUtils(unittest.TestCase):
    @patch.dict('os.environ', {'OPENAI_API_KEY': ''})
    def test_create_client_requires_key(self):
        with self.assertRaises(BatchSubmissionError):
            create_client()

    @patch('news_intel.llm.utils.time.sleep')
    def test_retry_with_backoff(self, mock_sleep):
        calls = []

        @retry_with_backoff(max_retries=3, base_delay=1.0, exceptions=(ConnectionError,))
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError('reset')
            return 'ok'

        self.assertEqual(flaky(), 'ok')
        self.assertEqual(len(calls), 3)
        self.assertEqual([c.args[0] for c in mock_sleep.call_args_list], [1.0, 2.0])

    @patch('news_intel.llm.utils.time.sleep')
    def test_retry_gives_up(self, mock_sleep):
        @retry_with_backoff(max_retries=2, base_delay=0.1, exceptions=(ConnectionError,))
        def always_down():
            raise ConnectionError('down')

        with self.assertRaises(ConnectionError):
            always_down()
        self.assertEqual(mock_sleep.call_count, 1)


if __name__ == '__main__':
    unittest.main()
