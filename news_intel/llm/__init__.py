"""LLM package exports."""
from news_intel.llm.analyzer import Analyzer, OpenAIAnalyzer, compute_personal_relevance
from news_intel.llm.briefing import BriefingGenerator
from news_intel.llm.prompts import ANALYSIS_SYSTEM_PROMPT, BRIEFING_SYSTEM_PROMPT
from news_intel.llm.utils import retry_with_backoff

__all__ = [
    'Analyzer',
    'OpenAIAnalyzer',
    'compute_personal_relevance',
    'BriefingGenerator',
    'ANALYSIS_SYSTEM_PROMPT',
    'BRIEFING_SYSTEM_PROMPT',
    'retry_with_backoff'
]
