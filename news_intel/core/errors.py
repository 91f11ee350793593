"""Exception hierarchy for the feed pipeline."""


class NewsIntelError(Exception):
    """Base class for all news_intel errors."""
    pass


class SourceFetchError(NewsIntelError):
    """Network, HTTP or parse failure for a single content source."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class AnalysisError(NewsIntelError):
    """The analysis collaborator could not produce a result for one article."""

    def __init__(self, article_id: str, reason: str):
        self.article_id = article_id
        self.reason = reason
        super().__init__(f"Analysis failed for {article_id}: {reason}")


class BatchSubmissionError(NewsIntelError):
    """A batch was rejected before any per-article call (e.g. malformed preferences)."""
    pass


class CacheReadError(NewsIntelError):
    """A stored cache record could not be decoded."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Unreadable cache record {key}: {reason}")


class BriefingError(NewsIntelError):
    """Daily briefing generation failed."""
    pass
