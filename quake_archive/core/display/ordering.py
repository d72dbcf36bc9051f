"""
Display ordering of archived records: most recent first, ties by id.
"""

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from quake_archive.core.models.archived_record import ArchivedRecord


def display_order_key(record: "ArchivedRecord") -> tuple[int, str]:
    """Sort key giving origin time descending, then id ascending."""
    return (-record.origin_time, str(record.id))


def compare_for_display_order(first: "ArchivedRecord", second: "ArchivedRecord") -> int:
    """
    Three-way comparison in display order.

    Returns:
        -1 if first is listed before second, 1 if after, 0 for the same record
    """
    first_key = display_order_key(first)
    second_key = display_order_key(second)
    if first_key < second_key:
        return -1
    if first_key > second_key:
        return 1
    return 0


def sort_for_display(records: Iterable["ArchivedRecord"]) -> list["ArchivedRecord"]:
    """Return a new list of the records in display order."""
    return sorted(records, key=display_order_key)
