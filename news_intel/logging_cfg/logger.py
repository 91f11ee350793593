import logging
import os
import sys
import threading
from concurrent_log_handler import ConcurrentRotatingFileHandler
from datetime import datetime
from typing import Dict, Any
from dateutil import tz as dateutil_tz

from news_intel.config.settings import SYSTEM_SETTINGS

DISPLAY_TZ = dateutil_tz.gettz(SYSTEM_SETTINGS['display_timezone']) or dateutil_tz.UTC

_metrics_lock = threading.Lock()


def _default_metrics() -> Dict[str, Any]:
    return {
        'sources_checked': 0,
        'successful_sources': 0,
        'failed_sources': [],
        'empty_sources': [],
        'total_articles': 0,
        'stale_articles': 0,
        'duplicate_articles': 0,
        'analysis_success': 0,
        'analysis_failures': 0,
        'processing_time': 0,
    }


# Run metrics, shared by fetch workers and the analysis loop
FETCH_METRICS = _default_metrics()


def update_metrics(metric_name: str, value: Any) -> None:
    """Update the metrics dictionary with a new value."""
    with _metrics_lock:
        if isinstance(value, bool):
            FETCH_METRICS[metric_name] = value
        elif isinstance(value, (int, float)):
            if metric_name not in FETCH_METRICS:
                FETCH_METRICS[metric_name] = 0
            FETCH_METRICS[metric_name] += value
        elif isinstance(value, (list, set)):
            if metric_name not in FETCH_METRICS:
                FETCH_METRICS[metric_name] = []
            FETCH_METRICS[metric_name].extend(value)
        elif isinstance(value, dict):
            if metric_name not in FETCH_METRICS:
                FETCH_METRICS[metric_name] = {}
            FETCH_METRICS[metric_name].update(value)
        else:
            FETCH_METRICS[metric_name] = value


def get_metrics() -> Dict:
    """Get a snapshot of the current metrics."""
    with _metrics_lock:
        return {
            key: list(value) if isinstance(value, list) else value
            for key, value in FETCH_METRICS.items()
        }


def reset_metrics() -> None:
    """Reset all metrics to their default values."""
    with _metrics_lock:
        FETCH_METRICS.clear()
        FETCH_METRICS.update(_default_metrics())


def print_metrics_summary() -> str:
    """Build a summary of the metrics from the current run."""
    metrics = get_metrics()
    stats = []

    stats.append("Feed Pipeline Summary:")
    stats.append(f"├─ Sources checked: {metrics['sources_checked']}")
    stats.append(f"├─ Successful sources: {metrics['successful_sources']}")
    stats.append(f"├─ Articles kept: {metrics['total_articles']}")
    stats.append(f"├─ Stale entries skipped: {metrics['stale_articles']}")
    stats.append(f"├─ Duplicates removed: {metrics['duplicate_articles']}")
    stats.append(f"├─ Analyses succeeded/failed: {metrics['analysis_success']}/{metrics['analysis_failures']}")
    stats.append(f"└─ Processing time: {metrics['processing_time']:.2f}s")

    if metrics['failed_sources']:
        stats.append(f"\nFailed Sources ({len(metrics['failed_sources'])}):")
        for source in metrics['failed_sources'][:5]:  # Show top 5
            stats.append(f"├─ {source}")

    return "\n".join(stats)


class TimeZoneFormatter(logging.Formatter):
    """Formatter rendering record timestamps in the display timezone."""

    def converter(self, timestamp):
        dt = datetime.fromtimestamp(timestamp, dateutil_tz.UTC)
        return dt.astimezone(DISPLAY_TZ)

    def formatTime(self, record, datefmt=None):
        dt = self.converter(record.created)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.strftime('%Y-%m-%d %H:%M:%S,%f %Z')[:-3]


def setup_logger(name='news_intel', level=None):
    """
    Set up and configure the logger with both console and file handlers.

    Args:
        name (str): Logger name
        level (str): Log level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers if logger was already set up
    if logger.handlers:
        return logger

    if level is None:
        level = SYSTEM_SETTINGS.get('log_level', 'INFO')
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger.setLevel(level)

    formatter = TimeZoneFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_dir = SYSTEM_SETTINGS.get('log_dir')
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        today = datetime.now(DISPLAY_TZ).strftime('%Y%m%d')
        log_filename = os.path.join(log_dir, f'news_intel_{today}.log')

        # Fetch workers log from several threads
        file_handler = ConcurrentRotatingFileHandler(
            log_filename,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
