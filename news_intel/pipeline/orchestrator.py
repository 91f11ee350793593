"""Sequential submission of selected articles to the analysis collaborator."""
from dataclasses import replace
from typing import Callable, List, Optional

from news_intel.core.errors import AnalysisError, BatchSubmissionError
from news_intel.core.preferences import normalize_preferences
from news_intel.core.types import Article
from news_intel.llm.analyzer import Analyzer
from news_intel.logging_cfg.logger import setup_logger, update_metrics

logger = setup_logger()

ProgressCallback = Callable[[int, int], None]


def analyze_batch(articles: List[Article], preferences, analyzer: Analyzer,
                  on_progress: Optional[ProgressCallback] = None) -> List[Article]:
    """
    Analyze ``articles`` one at a time and return the successes, in batch order.

    Each returned article is a copy carrying its ``analysis``. An article whose
    analysis raises :class:`AnalysisError` is dropped and the batch continues;
    an empty result is a valid outcome.

    Raises:
        BatchSubmissionError: when preferences are malformed or no analyzer is given.
            Any other exception raised by the analyzer propagates unchanged.
    """
    if not callable(analyzer):
        raise BatchSubmissionError("No analysis collaborator configured")
    preferences = normalize_preferences(preferences)

    total = len(articles)
    analyzed = []
    failures = 0

    for index, article in enumerate(articles, start=1):
        try:
            analysis = analyzer(article, preferences)
        except AnalysisError as e:
            failures += 1
            logger.warning(f"Skipping article after failed analysis: {e}")
        else:
            analyzed.append(replace(article, analysis=analysis))

        if on_progress:
            on_progress(index, total)

    update_metrics('analysis_success', len(analyzed))
    update_metrics('analysis_failures', failures)
    logger.info(f"Analyzed {len(analyzed)}/{total} articles ({failures} failed)")
    return analyzed


def reanalyze_article(article: Article, preferences, analyzer: Analyzer) -> Article:
    """
    Run the analysis again for one article and return an updated copy.

    Raises:
        AnalysisError: the input article is left as it was.
    """
    if not callable(analyzer):
        raise BatchSubmissionError("No analysis collaborator configured")
    preferences = normalize_preferences(preferences)

    try:
        analysis = analyzer(article, preferences)
    except AnalysisError as e:
        update_metrics('analysis_failures', 1)
        logger.warning(f"Re-analysis failed: {e}")
        raise

    update_metrics('analysis_success', 1)
    return replace(article, analysis=analysis)
