"""Per-article analysis using the OpenAI API."""
import json
from typing import Callable, Optional

import openai
from openai import OpenAI

from news_intel.config.settings import LLM_SETTINGS
from news_intel.core.errors import AnalysisError
from news_intel.core.types import Analysis, Article, UserPreferences
from news_intel.llm.prompts import ANALYSIS_SYSTEM_PROMPT, ANALYSIS_USER_PROMPT
from news_intel.llm.utils import create_client, parse_json_response, retry_with_backoff
from news_intel.logging_cfg.logger import setup_logger

logger = setup_logger()

# Any callable with this shape can stand in for the model (tests use fakes)
Analyzer = Callable[[Article, UserPreferences], Analysis]

MAX_PERSPECTIVES = 3

# Transient upstream failures worth another attempt
RETRYABLE_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def compute_personal_relevance(article: Article, preferences: UserPreferences) -> int:
    """Baseline 3, plus the category weight, plus 3 on a keyword hit; capped at 10."""
    score = 3
    weight = preferences.weight_for(article.category)
    if weight:
        score += weight

    title = article.title.lower()
    snippet = article.content_snippet.lower()
    if any(kw.lower() in title or kw.lower() in snippet for kw in preferences.keywords):
        score += 3

    return min(10, round(score))


class OpenAIAnalyzer:
    """Analysis collaborator backed by a chat-completion model."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None,
                 temperature: Optional[float] = None):
        self.client = client or create_client()
        self.model = model or LLM_SETTINGS['model']
        self.temperature = LLM_SETTINGS['temperature'] if temperature is None else temperature
        self._complete = retry_with_backoff(
            max_retries=LLM_SETTINGS.get('max_retries', 3),
            base_delay=LLM_SETTINGS.get('retry_delay', 1.0),
            exceptions=RETRYABLE_ERRORS,
        )(self._create_completion)

    def _create_completion(self, messages):
        return self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )

    def build_messages(self, article: Article, preferences: UserPreferences):
        interests = {name: cw.to_dict() for name, cw in preferences.category_weights.items()}
        prompt = ANALYSIS_USER_PROMPT.format(
            interests=json.dumps(interests, ensure_ascii=False),
            keywords=", ".join(preferences.keywords) or "(none)",
            title=article.title,
            source=article.source,
            category=article.category,
            snippet=article.content_snippet,
        )
        return [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    def __call__(self, article: Article, preferences: UserPreferences) -> Analysis:
        """
        Analyze one article.

        Raises:
            AnalysisError: on upstream API errors or a malformed response.
        """
        try:
            response = self._complete(self.build_messages(article, preferences))
        except openai.OpenAIError as e:
            raise AnalysisError(article.id, f"OpenAI API error: {e}") from e

        try:
            data = parse_json_response(response)
            data['personalRelevance'] = compute_personal_relevance(article, preferences)
            analysis = Analysis.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            raise AnalysisError(article.id, f"Malformed analysis response: {e}") from e

        analysis.general_relevance = min(10.0, max(1.0, analysis.general_relevance))
        analysis.perspectives = analysis.perspectives[:MAX_PERSPECTIVES]
        return analysis
