"""Concurrent RSS/Atom retrieval and normalization into Article objects."""
import concurrent.futures
import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple, Dict

import certifi
import feedparser
import requests
from dateutil import parser as dateutil_parser

from news_intel.config.settings import FEED_SETTINGS, SYSTEM_SETTINGS
from news_intel.core.errors import SourceFetchError
from news_intel.core.types import Article, ContentSource, make_article_id
from news_intel.feeds.text_utils import clean_title, make_snippet
from news_intel.logging_cfg.logger import setup_logger, update_metrics

logger = setup_logger()

USER_AGENT = 'news-intel/1.0 (RSS reader)'

# Timezone abbreviations for date parsing
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "BRT": timezone(timedelta(hours=-3)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def create_session(max_retries: Optional[int] = None) -> requests.Session:
    """Create a requests session with certifi verification and connection-level retries."""
    if max_retries is None:
        max_retries = SYSTEM_SETTINGS.get('max_retries', 1)

    session = requests.Session()
    session.verify = certifi.where() if SYSTEM_SETTINGS.get('verify_ssl', True) else False

    # Only connection errors are retried; an HTTP error status fails the source immediately
    adapter = requests.adapters.HTTPAdapter(
        max_retries=requests.adapters.Retry(
            total=max_retries,
            status_forcelist=[],
            backoff_factor=0.5,
            allowed_methods=["GET"],
        ),
        pool_connections=20,
        pool_maxsize=20,
        pool_block=False,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        'User-Agent': USER_AGENT,
        'Accept': 'application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5',
    })
    return session


def build_request(source: ContentSource, proxy_base: Optional[str] = None) -> Tuple[str, Dict[str, str]]:
    """Return (url, query params) for retrieving a source, relayed through the proxy if configured."""
    if proxy_base is None:
        proxy_base = FEED_SETTINGS.get('proxy_base', '')
    if proxy_base:
        return proxy_base, {'url': source.url}
    return source.url, {}


def parse_published(entry, fallback: datetime) -> datetime:
    """Publication time of a feed entry; ``fallback`` when absent or unparsable."""
    raw = entry.get('published') or entry.get('updated')
    if not raw:
        return fallback

    try:
        dt = dateutil_parser.parse(raw, tzinfos=TZINFOS)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Unparsable publication date {raw!r}: {e}")
        return fallback


def _entry_body(entry) -> str:
    body = entry.get('summary') or entry.get('description')
    if body:
        return body
    content = entry.get('content') or []
    if content:
        return content[0].get('value', '')
    return ''


def parse_entry(entry, source: ContentSource, fetched_at: datetime) -> Optional[Article]:
    """Normalize one RSS item / Atom entry. Returns None when title or link is missing."""
    title = clean_title(entry.get('title', ''))
    link = (entry.get('link') or '').strip()
    if not title or not link:
        return None

    return Article(
        id=make_article_id(link, title, source.name, source.category),
        title=title,
        link=link,
        source=source.name,
        category=source.category,
        content_snippet=make_snippet(_entry_body(entry), FEED_SETTINGS.get('snippet_length', 200)),
        published_at=parse_published(entry, fetched_at),
    )


def parse_feed(content, source: ContentSource, fetched_at: datetime,
               recency_window: Optional[timedelta] = None) -> List[Article]:
    """
    Parse a feed body into articles published within the recency window.

    Raises:
        SourceFetchError: when the body is not a parsable feed.
    """
    if recency_window is None:
        recency_window = timedelta(hours=FEED_SETTINGS.get('recency_window_hours', 48))

    feed = feedparser.parse(content)

    if feed.bozo and not feed.entries:
        raise SourceFetchError(source.name, f"Unparsable feed body: {feed.get('bozo_exception')}")
    if feed.bozo:
        logger.debug(f"Feedparser reported issues for {source.name}: {feed.get('bozo_exception')}")

    articles = []
    stale = 0
    for entry in feed.entries:
        article = parse_entry(entry, source, fetched_at)
        if article is None:
            logger.debug(f"Skipping entry without title or link in {source.name}")
            continue

        age = fetched_at - article.published_at
        if age > recency_window:
            stale += 1
            logger.debug(
                f"Skipping old article ({int(age.total_seconds() // 3600)}h old): {article.title[:50]}"
            )
            continue
        articles.append(article)

    if stale:
        update_metrics('stale_articles', stale)
    return articles


def fetch_source(source: ContentSource, session: Optional[requests.Session] = None,
                 now: Optional[datetime] = None, timeout: Optional[float] = None) -> List[Article]:
    """Fetch one source. Any failure is logged and yields an empty list."""
    session = session or create_session()
    now = now or datetime.now(timezone.utc)
    timeout = timeout or SYSTEM_SETTINGS.get('http_timeout', 15)

    update_metrics('sources_checked', 1)
    url, params = build_request(source)

    try:
        response = session.get(url, params=params, timeout=timeout)
        if not response.ok:
            raise SourceFetchError(source.name, f"HTTP {response.status_code} {response.reason}")

        content_type = response.headers.get('content-type', '').lower()
        if content_type and 'xml' not in content_type and 'rss' not in content_type and 'atom' not in content_type:
            logger.debug(f"Unexpected content type '{content_type}' for feed {source.name}")

        articles = parse_feed(response.content, source, now)

    except requests.exceptions.Timeout:
        logger.warning(f"Timeout fetching feed: {source.name} ({source.url})")
        update_metrics('failed_sources', [f"{source.name} (Timeout)"])
        return []
    except requests.exceptions.RequestException as e:
        logger.warning(f"Error fetching feed {source.name} ({source.url}): {e}")
        update_metrics('failed_sources', [f"{source.name} (Request Error)"])
        return []
    except SourceFetchError as e:
        logger.warning(f"Failed to fetch feed from {e}")
        update_metrics('failed_sources', [f"{source.name} ({e.reason})"])
        return []
    except Exception as e:
        # One broken source must not abort the whole fetch
        logger.warning(f"Unexpected error processing feed {source.name}: {e}", exc_info=True)
        update_metrics('failed_sources', [f"{source.name} (Error: {type(e).__name__})"])
        return []

    update_metrics('successful_sources', 1)
    if not articles:
        update_metrics('empty_sources', [source.name])
    logger.info(f"Fetched {len(articles)} recent articles from {source.name}")
    return articles


def fetch_all(sources: List[ContentSource], session: Optional[requests.Session] = None,
              now: Optional[datetime] = None, max_workers: Optional[int] = None) -> List[Article]:
    """
    Fetch every source concurrently and return the concatenation of their articles.

    Individual source failures contribute nothing; zero sources (or zero
    successful sources) yields an empty list. Ordering follows ``sources``.
    """
    if not sources:
        logger.info("No sources selected, feed is empty")
        return []

    start_time = time.time()
    session = session or create_session()
    now = now or datetime.now(timezone.utc)
    max_workers = max_workers or SYSTEM_SETTINGS.get('max_parallel_workers', 8)
    max_workers = max(1, min(max_workers, len(sources)))

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='feed') as executor:
        results = list(executor.map(lambda s: fetch_source(s, session=session, now=now), sources))

    articles = [article for batch in results for article in batch]

    update_metrics('processing_time', time.time() - start_time)
    logger.info(f"Fetched {len(articles)} articles from {len(sources)} sources")
    return articles
