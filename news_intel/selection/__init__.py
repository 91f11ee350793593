"""Selection package exports."""
from news_intel.selection.weighted import (
    build_lottery,
    partition_by_category,
    select_for_analysis
)

__all__ = [
    'build_lottery',
    'partition_by_category',
    'select_for_analysis'
]
