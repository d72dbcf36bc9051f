"""
Display filter composing the display rules.

The filter decides whether an archived record is shown to a consumer.
A record is eligible only if every rule accepts it; evaluation stops at
the first rule that rejects.
"""

from typing import TYPE_CHECKING, Iterable

from quake_archive.observability import metrics

from .config import DisplayFilterConfig
from .ordering import sort_for_display
from .rules import DisplayRule, MagnitudeRule, QualityRule, RecencyRule

if TYPE_CHECKING:
    from quake_archive.core.models.archived_record import ArchivedRecord


class DisplayFilter:
    """
    Stateless AND-composition of display rules.

    Rules run in order: quality, magnitude, recency.
    """

    RULE_REGISTRY = {
        "quality": QualityRule,
        "magnitude": MagnitudeRule,
        "recency": RecencyRule,
    }

    def __init__(self, rules: list[DisplayRule] | None = None):
        """
        Initialize the filter.

        Args:
            rules: Rules to apply in order (defaults to all registered rules)
        """
        if rules is None:
            rules = [rule_class() for rule_class in self.RULE_REGISTRY.values()]
        self.rules = tuple(rules)

    @classmethod
    def from_rule_types(cls, rule_types: Iterable[str]) -> "DisplayFilter":
        rules = []
        for rule_type in rule_types:
            rule_class = cls.RULE_REGISTRY.get(rule_type)
            if not rule_class:
                raise ValueError(f"Unknown display rule type: {rule_type}")
            rules.append(rule_class())
        return cls(rules)

    def first_rejection(self, record: "ArchivedRecord", config: DisplayFilterConfig) -> str | None:
        """Type of the first rule rejecting the record, or None if it is eligible."""
        for rule in self.rules:
            if not rule.accepts(record, config):
                return rule.rule_type
        return None

    def is_eligible(self, record: "ArchivedRecord", config: DisplayFilterConfig) -> bool:
        """
        Decide whether the record is shown.

        Args:
            record: Record being listed
            config: Configuration snapshot for the current render

        Returns:
            True if every rule accepts the record
        """
        return self.first_rejection(record, config) is None

    def rejections(self, record: "ArchivedRecord", config: DisplayFilterConfig) -> list[str]:
        """All rule types rejecting the record (no short-circuit)."""
        return [rule.rule_type for rule in self.rules if not rule.accepts(record, config)]

    def select(
        self,
        records: Iterable["ArchivedRecord"],
        config: DisplayFilterConfig,
    ) -> list["ArchivedRecord"]:
        """
        Eligible records in display order.

        Each decision is counted in the display metrics.

        Args:
            records: Any iterable of records
            config: Configuration snapshot for the current render

        Returns:
            New list, most recent first
        """
        eligible = []
        for record in records:
            rejected_by = self.first_rejection(record, config)
            metrics.record_display_decision(rejected_by is None, rejected_by)
            if rejected_by is None:
                eligible.append(record)
        return sort_for_display(eligible)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rules={[rule.rule_type for rule in self.rules]})"


DEFAULT_FILTER = DisplayFilter()
