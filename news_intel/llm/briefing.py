"""Daily briefing synthesis from the analyzed articles."""
import json
from datetime import datetime, timezone
from typing import List, Optional

import openai
from openai import OpenAI

from news_intel.config.settings import LLM_SETTINGS
from news_intel.core.errors import BriefingError
from news_intel.core.types import Article, Briefing, UserPreferences
from news_intel.llm.prompts import BRIEFING_SYSTEM_PROMPT, BRIEFING_USER_PROMPT
from news_intel.llm.utils import create_client, parse_json_response
from news_intel.logging_cfg.logger import setup_logger

logger = setup_logger()


def format_articles_for_prompt(articles: List[Article]) -> str:
    return "\n\n".join(
        f"- Title: {a.title}\n- Source: {a.source}\n- URL: {a.link}\n- Snippet: {a.content_snippet}"
        for a in articles
    )


class BriefingGenerator:
    """Synthesizes a presidential-style daily briefing with a chat-completion model."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self.client = client or create_client()
        self.model = model or LLM_SETTINGS['briefing_model']

    def __call__(self, articles: List[Article], preferences: UserPreferences) -> Briefing:
        if not articles:
            raise BriefingError("No analyzed articles to brief on")

        logger.info(f"Generating daily briefing from {len(articles)} articles")
        interests = {name: cw.to_dict() for name, cw in preferences.category_weights.items()}
        prompt = BRIEFING_USER_PROMPT.format(
            interests=json.dumps(interests, ensure_ascii=False),
            keywords=", ".join(preferences.keywords) or "(none)",
            articles=format_articles_for_prompt(articles),
        )

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": BRIEFING_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=LLM_SETTINGS.get('briefing_temperature', 0.4),
                response_format={"type": "json_object"},
            )
            data = parse_json_response(response)
            briefing = Briefing.from_payload(data, generated_at=datetime.now(timezone.utc))
        except openai.OpenAIError as e:
            logger.error(f"Error generating daily briefing: {e}")
            raise BriefingError("Failed to generate daily briefing.") from e
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed daily briefing response: {e}")
            raise BriefingError("Failed to generate daily briefing.") from e

        logger.info("Daily briefing generated successfully")
        return briefing
