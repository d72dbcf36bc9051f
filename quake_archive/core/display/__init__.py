"""
Display filtering and ordering of archived records.
"""

from .config import (
    DisplayConfigLoader,
    DisplayFilterConfig,
    DisplayFilterSettings,
    load_display_settings,
)
from .filter import DEFAULT_FILTER, DisplayFilter
from .ordering import compare_for_display_order, display_order_key, sort_for_display
from .rules import DisplayRule, MagnitudeRule, QualityRule, RecencyRule

__all__ = [
    "DisplayConfigLoader",
    "DisplayFilterConfig",
    "DisplayFilterSettings",
    "load_display_settings",
    "DisplayFilter",
    "DEFAULT_FILTER",
    "DisplayRule",
    "QualityRule",
    "MagnitudeRule",
    "RecencyRule",
    "compare_for_display_order",
    "display_order_key",
    "sort_for_display",
]
