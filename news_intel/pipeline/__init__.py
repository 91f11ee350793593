"""Pipeline package exports."""
from news_intel.pipeline.orchestrator import analyze_batch, reanalyze_article

__all__ = [
    'analyze_batch',
    'reanalyze_article'
]
