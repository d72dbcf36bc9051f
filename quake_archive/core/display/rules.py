"""
Display rules evaluated by the DisplayFilter.

Each rule checks one condition of a record against a configuration snapshot.
Rules are pure: they read the record and the snapshot and change neither.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .config import DisplayFilterConfig

if TYPE_CHECKING:
    from quake_archive.core.models.archived_record import ArchivedRecord


class DisplayRule(ABC):
    """Abstract base class for display rules."""

    @abstractmethod
    def accepts(self, record: "ArchivedRecord", config: DisplayFilterConfig) -> bool:
        """
        Decide whether the record passes this rule.

        Args:
            record: Record being listed
            config: Configuration snapshot for the current render

        Returns:
            False if the rule hides the record
        """

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Return the rule type identifier."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class QualityRule(DisplayRule):
    """Hides records whose quality rank is worse than the threshold."""

    def accepts(self, record: "ArchivedRecord", config: DisplayFilterConfig) -> bool:
        return record.quality_class.rank <= config.quality_filter_threshold

    @property
    def rule_type(self) -> str:
        return "quality"


class MagnitudeRule(DisplayRule):
    """Hides records below the magnitude threshold when the filter is enabled."""

    def accepts(self, record: "ArchivedRecord", config: DisplayFilterConfig) -> bool:
        if not config.magnitude_filter_enabled:
            return True
        return record.magnitude >= config.magnitude_filter_threshold

    @property
    def rule_type(self) -> str:
        return "magnitude"


class RecencyRule(DisplayRule):
    """Hides records older than the time window when the filter is enabled."""

    def accepts(self, record: "ArchivedRecord", config: DisplayFilterConfig) -> bool:
        if not config.time_filter_enabled:
            return True
        return (config.now - record.origin_time) <= config.time_window_millis

    @property
    def rule_type(self) -> str:
        return "recency"
