"""Normalization of user preferences into one CategoryWeight structure.

Stored preferences come in two shapes: the legacy flat ``interests`` map
(category -> weight) and the hierarchical ``categoryInterests`` map
(category -> {weight, subcategories}). Both are converted here, once, so the
rest of the pipeline only ever sees :class:`UserPreferences`.
"""
from typing import Any, Dict, Mapping

from news_intel.core.errors import BatchSubmissionError
from news_intel.core.types import CategoryWeight, UserPreferences

MIN_WEIGHT = 1
MAX_WEIGHT = 5


def _coerce_weight(value: Any, label: str) -> int:
    if isinstance(value, Mapping):
        value = value.get('weight')
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BatchSubmissionError(f"Weight for {label} must be a number, got {value!r}")
    if not MIN_WEIGHT <= value <= MAX_WEIGHT:
        raise BatchSubmissionError(
            f"Weight for {label} must be between {MIN_WEIGHT} and {MAX_WEIGHT}, got {value}"
        )
    return int(round(value))


def _from_hierarchical(category_interests: Mapping[str, Any]) -> Dict[str, CategoryWeight]:
    weights = {}
    for category, entry in category_interests.items():
        if not isinstance(entry, Mapping):
            raise BatchSubmissionError(f"Malformed interest entry for {category}: {entry!r}")
        subcategories = {
            name: _coerce_weight(sub, f"{category}/{name}")
            for name, sub in (entry.get('subcategories') or {}).items()
        }
        weights[category] = CategoryWeight(
            category=category,
            weight=_coerce_weight(entry.get('weight'), category),
            subcategories=subcategories,
        )
    return weights


def _from_legacy(interests: Mapping[str, Any]) -> Dict[str, CategoryWeight]:
    return {
        category: CategoryWeight(category=category, weight=_coerce_weight(weight, category))
        for category, weight in interests.items()
    }


def normalize_preferences(raw: Any) -> UserPreferences:
    """Convert a stored preferences document into :class:`UserPreferences`.

    Raises:
        BatchSubmissionError: when the document is not a mapping or a weight is
            missing, non-numeric or outside [1, 5].
    """
    if isinstance(raw, UserPreferences):
        return raw
    if not isinstance(raw, Mapping):
        raise BatchSubmissionError(f"Preferences must be a mapping, got {type(raw).__name__}")

    if raw.get('categoryInterests'):
        weights = _from_hierarchical(raw['categoryInterests'])
    else:
        weights = _from_legacy(raw.get('interests') or {})

    keywords = [str(k).strip() for k in raw.get('keywords') or [] if str(k).strip()]
    return UserPreferences(
        category_weights=weights,
        sources=[str(s) for s in raw.get('sources') or []],
        keywords=keywords,
    )
