"""Time-limited caches for the article feed and the daily briefing.

Records are stored as a JSON envelope::

    {"schemaVersion": 1, "fetchedAt": "<ISO-8601>", "payload": {...}}

A record is served while ``now - fetchedAt < ttl``. Expired records are left in
place and simply reported as absent; the next save overwrites them. Records
that cannot be decoded, or carry another schema version, count as a miss.
"""
import json
import threading
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from dateutil import parser as dateutil_parser

from news_intel.config.settings import CACHE_SETTINGS
from news_intel.core.errors import CacheReadError
from news_intel.core.types import Article, Briefing, CacheRecord, UserPreferences
from news_intel.logging_cfg.logger import setup_logger

logger = setup_logger()

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TTLCache:
    """Load/Save of JSON payloads with a validity window, over a key-value store."""

    _locks: Dict[Tuple[int, str], threading.RLock] = defaultdict(threading.RLock)
    _locks_guard = threading.Lock()

    def __init__(self, store, ttl: timedelta, schema_version: Optional[int] = None,
                 clock: Optional[Clock] = None):
        self.store = store
        self.ttl = ttl
        self.schema_version = schema_version or CACHE_SETTINGS.get('schema_version', 1)
        self.clock = clock or utc_now

    def _lock_for(self, key: str) -> threading.RLock:
        # One lock per (store, key) so Load/Save of one record never interleave
        with self._locks_guard:
            return self._locks[(id(self.store), key)]

    def read(self, key: str) -> Optional[Tuple[Dict[str, Any], datetime]]:
        """
        Decode the stored envelope regardless of age.

        Raises:
            CacheReadError: when the record is unparsable or has another schema version.
        """
        raw = self.store.get(key)
        if raw is None:
            return None

        try:
            envelope = json.loads(raw)
            version = envelope.get('schemaVersion')
            fetched_at = dateutil_parser.isoparse(envelope['fetchedAt'])
            payload = envelope['payload']
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CacheReadError(key, str(e)) from e

        if version != self.schema_version:
            raise CacheReadError(key, f"schema version {version!r} != {self.schema_version}")
        if not isinstance(payload, dict):
            raise CacheReadError(key, "payload is not an object")
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        return payload, fetched_at

    def load(self, key: str) -> Optional[Tuple[Dict[str, Any], datetime]]:
        """Return (payload, fetchedAt) while the record is fresh, else None."""
        with self._lock_for(key):
            try:
                entry = self.read(key)
            except CacheReadError as e:
                logger.warning(f"Ignoring cache record: {e}")
                return None

        if entry is None:
            logger.debug(f"Cache miss for {key}")
            return None

        payload, fetched_at = entry
        age = self.clock() - fetched_at
        if age >= self.ttl:
            logger.info(f"Cache record {key} is stale ({age.total_seconds() / 60:.1f} min old)")
            return None
        return payload, fetched_at

    def save(self, key: str, payload: Dict[str, Any], fetched_at: Optional[datetime] = None) -> datetime:
        """
        Overwrite the record for ``key``. Returns the timestamp actually stored,
        which never moves backwards relative to the existing record.
        """
        fetched_at = fetched_at or self.clock()
        with self._lock_for(key):
            try:
                previous = self.read(key)
            except CacheReadError:
                previous = None
            if previous is not None and previous[1] > fetched_at:
                logger.warning(f"Clamping fetchedAt for {key} to the stored {previous[1].isoformat()}")
                fetched_at = previous[1]

            envelope = {
                'schemaVersion': self.schema_version,
                'fetchedAt': fetched_at.isoformat(),
                'payload': payload,
            }
            self.store.set(key, json.dumps(envelope, ensure_ascii=False))
        return fetched_at


def feed_cache_key(user_id: str, preferences: UserPreferences) -> str:
    return f"feed:{user_id}:{preferences.fingerprint()}"


def briefing_cache_key(user_id: str, preferences: UserPreferences) -> str:
    return f"briefing:{user_id}:{preferences.fingerprint()}"


class FeedCache(TTLCache):
    """Fetched and analyzed article sets, valid for 30 minutes by default."""

    def __init__(self, store, ttl: Optional[timedelta] = None, clock: Optional[Clock] = None):
        ttl = ttl or timedelta(minutes=CACHE_SETTINGS.get('feed_ttl_minutes', 30))
        super().__init__(store, ttl, clock=clock)

    def load_record(self, key: str) -> Optional[CacheRecord]:
        entry = self.load(key)
        if entry is None:
            return None
        payload, fetched_at = entry
        try:
            return CacheRecord.from_payload(payload, fetched_at)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring cache record: {CacheReadError(key, str(e))}")
            return None

    def save_record(self, key: str, analyzed: List[Article], all_fetched: List[Article],
                    fetched_at: Optional[datetime] = None) -> CacheRecord:
        record = CacheRecord(analyzed_articles=list(analyzed), all_fetched_articles=list(all_fetched),
                             fetched_at=fetched_at or self.clock())
        record.fetched_at = self.save(key, record.payload(), record.fetched_at)
        logger.info(f"Cached {len(record.analyzed_articles)} analyzed / "
                    f"{len(record.all_fetched_articles)} fetched articles under {key}")
        return record


class BriefingCache(TTLCache):
    """Daily briefing artifact, valid for 24 hours by default."""

    def __init__(self, store, ttl: Optional[timedelta] = None, clock: Optional[Clock] = None):
        ttl = ttl or timedelta(hours=CACHE_SETTINGS.get('briefing_ttl_hours', 24))
        super().__init__(store, ttl, clock=clock)

    def load_briefing(self, key: str) -> Optional[Briefing]:
        entry = self.load(key)
        if entry is None:
            return None
        payload, generated_at = entry
        try:
            return Briefing.from_payload(payload, generated_at)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring cache record: {CacheReadError(key, str(e))}")
            return None

    def save_briefing(self, key: str, briefing: Briefing) -> Briefing:
        briefing.generated_at = self.save(key, briefing.payload(), briefing.generated_at)
        return briefing
