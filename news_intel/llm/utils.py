"""Utility functions for LLM operations."""
import json
import logging
import os
import time
from functools import wraps
from typing import Any, Callable, Dict, Tuple, Type, TypeVar

from openai import OpenAI

from news_intel.core.errors import BatchSubmissionError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def retry_with_backoff(max_retries: int = 3, base_delay: float = 1.0,
                       exceptions: Tuple[Type[BaseException], ...] = (Exception,)) -> Callable:
    """Decorator for retrying functions with exponential backoff."""
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries - 1:  # Last attempt
                        raise
                    delay = base_delay * (2 ** attempt)
                    logger.warning(f"{func.__name__} failed (attempt {attempt + 1}): {e}; retrying in {delay:.1f}s")
                    time.sleep(delay)
            raise RuntimeError("Should not reach here")
        return wrapper
    return decorator


def create_client(api_key: str = None) -> OpenAI:
    """Build an OpenAI client, failing fast when no key is configured."""
    api_key = api_key or os.getenv('OPENAI_API_KEY')
    if not api_key:
        raise BatchSubmissionError("OpenAI API key not found (set OPENAI_API_KEY)")
    return OpenAI(api_key=api_key)


def parse_json_response(response) -> Dict[str, Any]:
    """Decode the JSON object returned by a chat completion."""
    if not getattr(response, 'choices', None):
        raise ValueError("Invalid API response structure")
    content = response.choices[0].message.content
    if not content:
        raise ValueError("Empty completion")
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
