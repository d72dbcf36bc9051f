"""
In-memory archive of finalized seismic events.

The archive is appended to by the detection pipeline and listed by any
number of display threads. Appends take a lock; iteration walks a snapshot
so readers never see the collection change under them.
"""

import threading
from typing import Any, Iterable, Iterator
from uuid import UUID

from quake_archive.core.display.config import DisplayFilterConfig
from quake_archive.core.display.filter import DEFAULT_FILTER, DisplayFilter
from quake_archive.core.display.ordering import sort_for_display
from quake_archive.core.enrichment.services import EnrichmentServices
from quake_archive.core.models import ArchivedRecord, DetectionSummary
from quake_archive.observability import metrics
from quake_archive.observability.logger import get_logger

logger = get_logger(__name__)


class DuplicateRecordError(ValueError):
    """Raised when a record id is already present in the archive."""

    def __init__(self, record_id: UUID):
        self.record_id = record_id
        super().__init__(f"Record {record_id} is already archived")


class Archive:
    """
    Collection of archived records keyed by id, in insertion order.

    Usage:
        archive = Archive(services)
        record = archive.archive_event(summary)
        for record in archive.visible(settings.snapshot()):
            ...
    """

    def __init__(self, services: EnrichmentServices, name: str = "default"):
        """
        Initialize an empty archive.

        Args:
            services: Enrichment helpers bound to every record created or restored here
            name: Archive name used in metric labels
        """
        self.services = services
        self.name = name
        self._records: dict[UUID, ArchivedRecord] = {}
        self._lock = threading.Lock()

    def archive_event(self, summary: DetectionSummary) -> ArchivedRecord:
        """
        Create a record from a detection summary, add it, then schedule its enrichment.

        Raises:
            DuplicateRecordError: If the summary id is already archived
        """
        record = ArchivedRecord.from_summary(summary, self.services, schedule=False)
        self.add(record)
        record.schedule_intensity_enrichment()
        return record

    def restore(self, data: dict[str, Any]) -> ArchivedRecord:
        """Rebuild a persisted record, bind it to this archive's services, and add it."""
        record = ArchivedRecord.restore(data, self.services)
        self.add(record)
        return record

    def add(self, record: ArchivedRecord) -> None:
        """
        Append a record.

        Raises:
            DuplicateRecordError: If a record with the same id exists
        """
        with self._lock:
            if record.id in self._records:
                raise DuplicateRecordError(record.id)
            self._records[record.id] = record
            size = len(self._records)

        if not record.is_bound:
            record.bind(self.services)

        metrics.increment_counter(metrics.records_archived_total, 1, quality_class=record.quality_class.value)
        metrics.set_gauge(metrics.archive_size, size, archive=self.name)
        logger.info(
            f"Archived record {record.id}",
            extra={
                "record_id": str(record.id),
                "magnitude": record.magnitude,
                "quality_class": record.quality_class.value,
            }
        )

    def remove(self, record_id: UUID) -> ArchivedRecord:
        """
        Remove a record (retention is decided by the caller).

        Raises:
            KeyError: If the id is unknown
        """
        with self._lock:
            record = self._records.pop(record_id)
            size = len(self._records)
        metrics.set_gauge(metrics.archive_size, size, archive=self.name)
        return record

    def get(self, record_id: UUID) -> ArchivedRecord | None:
        with self._lock:
            return self._records.get(record_id)

    def records(self) -> list[ArchivedRecord]:
        """Snapshot of the records in insertion order."""
        with self._lock:
            return list(self._records.values())

    def ordered(self) -> list[ArchivedRecord]:
        """All records, most recent first."""
        return sort_for_display(self.records())

    def visible(
        self,
        config: DisplayFilterConfig,
        display_filter: DisplayFilter | None = None,
    ) -> list[ArchivedRecord]:
        """Records eligible for display under the snapshot, most recent first."""
        return (display_filter or DEFAULT_FILTER).select(self.records(), config)

    def extend(self, records: Iterable[ArchivedRecord]) -> None:
        for record in records:
            self.add(record)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._records

    def __iter__(self) -> Iterator[ArchivedRecord]:
        return iter(self.records())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, records={len(self)})"
