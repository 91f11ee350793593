"""Logging package exports."""
from news_intel.logging_cfg.logger import (
    setup_logger,
    update_metrics,
    get_metrics,
    reset_metrics,
    print_metrics_summary
)

__all__ = [
    'setup_logger',
    'update_metrics',
    'get_metrics',
    'reset_metrics',
    'print_metrics_summary'
]
