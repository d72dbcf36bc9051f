"""
ArchivedRecord model representing a finalized seismic event kept in the archive.
"""

import math
import threading
from datetime import datetime, timezone
from concurrent.futures import Future
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, PrivateAttr, model_validator

from quake_archive.core.display.config import DisplayFilterConfig
from quake_archive.core.display.filter import DEFAULT_FILTER, DisplayFilter
from quake_archive.core.display.ordering import compare_for_display_order, display_order_key
from quake_archive.core.enrichment.queue import EnrichmentQueueClosedError
from quake_archive.core.enrichment.services import EnrichmentServices
from quake_archive.observability import metrics
from quake_archive.observability.logger import get_logger

from .detection import ArchivedDetection, DetectionSnapshot
from .detection_summary import DetectionSummary
from .quality_class import QualityClass

logger = get_logger(__name__)

# Validation-context key carrying the EnrichmentServices to bind on construction
SERVICES_CONTEXT_KEY = "enrichment_services"


def copy_detections(
    snapshot: list[DetectionSnapshot] | None,
) -> tuple[tuple[ArchivedDetection, ...], float | None]:
    """
    Copy the valid detections of a snapshot and derive the max association ratio.

    Args:
        snapshot: Contributing detections, or None when the producer had no cluster context

    Returns:
        (archived detections, max ratio); the ratio is None without a snapshot
        and never below 1.0 with one
    """
    if snapshot is None:
        return (), None

    detections = tuple(
        ArchivedDetection.from_snapshot(detection) for detection in snapshot if detection.valid
    )
    max_ratio = max([1.0, *(detection.ratio for detection in detections)])
    return detections, max_ratio


class ArchivedRecord(BaseModel):
    """
    A finalized seismic event stored for later display and analysis.

    Seismic parameters, the detection copy and the association ratio are
    frozen at construction. region and peak_intensity are derived fields
    filled in by enrichment; each write is a single attribute store, so
    concurrent readers see the old or the new value and nothing in between.

    The bound EnrichmentServices are transient: they are never serialized and
    every construction path (from_summary, create, restore, plain
    model_validate with a context) rebinds them in model_post_init.

    Attributes:
        id: Event identifier, unique in the archive
        latitude, longitude: Hypocenter location in degrees
        depth: Hypocenter depth in km
        magnitude: Event magnitude
        origin_time: Event occurrence time (epoch millis)
        quality_class: Confidence class of the solution
        max_association_ratio: Strongest valid detection ratio (None without a snapshot)
        contributing_detections: Valid detections copied at archival time
        region: Resolved region name, None until resolved
        peak_intensity: Estimated peak ground acceleration, 0.0 until enriched
        invalidated: Set once a consumer flags the record as erroneous
    """

    id: UUID = Field(..., frozen=True)
    latitude: float = Field(..., ge=-90.0, le=90.0, frozen=True)
    longitude: float = Field(..., ge=-180.0, le=180.0, frozen=True)
    depth: float = Field(..., frozen=True)
    magnitude: float = Field(..., frozen=True)
    origin_time: int = Field(..., frozen=True)
    quality_class: QualityClass = Field(..., frozen=True)
    max_association_ratio: float | None = Field(None, ge=1.0, frozen=True)
    contributing_detections: tuple[ArchivedDetection, ...] = Field((), frozen=True)
    region: str | None = None
    peak_intensity: float = 0.0
    invalidated: bool = False

    _services: EnrichmentServices | None = PrivateAttr(default=None)
    _schedule_lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)
    _enrichment_scheduled: bool = PrivateAttr(default=False)
    _enrichment_done: threading.Event = PrivateAttr(default_factory=threading.Event)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "5b0e4d6a-2a55-4c7c-9f0f-0d6e3a1c9b11",
                "latitude": 35.0,
                "longitude": 139.0,
                "depth": 10.0,
                "magnitude": 6.5,
                "origin_time": 1700000000000,
                "quality_class": "S",
                "max_association_ratio": 12.4,
                "contributing_detections": [
                    {"latitude": 35.68, "longitude": 139.77, "ratio": 12.4, "arrival_time": 1700000004210}
                ],
                "region": "Japan",
                "peak_intensity": 389.5,
                "invalidated": False,
            }
        }

    @model_validator(mode="after")
    def check_association_ratio(self):
        """A record with detections must carry a ratio covering all of them."""
        if self.contributing_detections:
            strongest = max(detection.ratio for detection in self.contributing_detections)
            if self.max_association_ratio is None or self.max_association_ratio < strongest:
                raise ValueError(
                    f"max_association_ratio ({self.max_association_ratio}) must be at least "
                    f"the strongest detection ratio ({strongest})"
                )
        return self

    def model_post_init(self, context: Any) -> None:
        services = context.get(SERVICES_CONTEXT_KEY) if isinstance(context, dict) else None
        if services is not None:
            self.bind(services)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "invalidated" and self.invalidated and not value:
            raise ValueError(f"Record {self.id} is invalidated and cannot be reset")
        super().__setattr__(name, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArchivedRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __lt__(self, other: "ArchivedRecord") -> bool:
        return display_order_key(self) < display_order_key(other)

    # =======================
    # CONSTRUCTION
    # =======================

    @classmethod
    def from_summary(
        cls,
        summary: DetectionSummary,
        services: EnrichmentServices,
        schedule: bool = True,
    ) -> "ArchivedRecord":
        """
        Archive a finalized detection summary and schedule its enrichment.

        Args:
            summary: Event produced by the detection layer
            services: Live enrichment helpers to bind
            schedule: Submit the intensity job now; callers that must register
                the record first pass False and schedule it themselves

        Returns:
            Record usable immediately, with derived fields at their defaults
        """
        detections, max_ratio = copy_detections(summary.contributing_detections)
        record = cls.model_validate(
            {
                "id": summary.id,
                "latitude": summary.latitude,
                "longitude": summary.longitude,
                "depth": summary.depth,
                "magnitude": summary.magnitude,
                "origin_time": summary.origin_time,
                "quality_class": summary.quality_class,
                "max_association_ratio": max_ratio,
                "contributing_detections": detections,
            },
            context={SERVICES_CONTEXT_KEY: services},
        )
        if schedule:
            record.schedule_intensity_enrichment()
        return record

    @classmethod
    def create(
        cls,
        id: UUID,
        latitude: float,
        longitude: float,
        depth: float,
        magnitude: float,
        origin_time: int,
        quality_class: QualityClass,
        services: EnrichmentServices,
    ) -> "ArchivedRecord":
        """Minimal constructor without detections; schedules enrichment immediately."""
        record = cls.model_validate(
            {
                "id": id,
                "latitude": latitude,
                "longitude": longitude,
                "depth": depth,
                "magnitude": magnitude,
                "origin_time": origin_time,
                "quality_class": quality_class,
            },
            context={SERVICES_CONTEXT_KEY: services},
        )
        record.schedule_intensity_enrichment()
        return record

    @classmethod
    def restore(cls, data: dict[str, Any], services: EnrichmentServices) -> "ArchivedRecord":
        """
        Rebuild a record from storage.

        Persisted region and peak_intensity are kept as they are; enrichment
        is only scheduled if the caller asks for it afterwards.
        """
        return cls.model_validate(data, context={SERVICES_CONTEXT_KEY: services})

    def bind(self, services: EnrichmentServices) -> None:
        """Attach the live enrichment helpers."""
        self._services = services

    @property
    def is_bound(self) -> bool:
        return self._services is not None

    def _require_services(self) -> EnrichmentServices:
        if self._services is None:
            raise RuntimeError(f"Record {self.id} has no enrichment services bound. Call bind() first.")
        return self._services

    # =======================
    # ENRICHMENT
    # =======================

    def resolve_region(self) -> None:
        """
        Resolve the region name synchronously and replace the cached value.

        Failures are logged; the previous region is kept.

        Raises:
            RuntimeError: If no enrichment services are bound
        """
        services = self._require_services()
        try:
            lookup = services.geo_resolver.resolve(self.latitude, self.longitude, self.depth)
        except Exception as e:
            metrics.increment_counter(metrics.region_resolutions_total, 1, status="failure")
            logger.error(
                f"Region resolution failed for record {self.id}: {e}",
                extra={"record_id": str(self.id)},
                exc_info=True
            )
            return

        self.region = lookup.region
        metrics.increment_counter(metrics.region_resolutions_total, 1, status="success")

    def schedule_intensity_enrichment(self) -> bool:
        """
        Submit the one intensity job of this record to the enrichment queue.

        Returns:
            True if submitted; False if a job was already submitted for this
            record or the queue is shut down

        Raises:
            RuntimeError: If no enrichment services are bound
        """
        services = self._require_services()

        with self._schedule_lock:
            if self._enrichment_scheduled:
                logger.warning(
                    f"Intensity enrichment already scheduled for record {self.id}",
                    extra={"record_id": str(self.id)}
                )
                return False
            self._enrichment_scheduled = True

        try:
            future = services.queue.submit(self._compute_peak_intensity)
        except EnrichmentQueueClosedError as e:
            with self._schedule_lock:
                self._enrichment_scheduled = False
            logger.warning(
                f"Record {self.id} will not be enriched: {e}",
                extra={"record_id": str(self.id), "queue": e.queue_name}
            )
            return False

        future.add_done_callback(self._on_enrichment_finished)
        return True

    def _on_enrichment_finished(self, future: Future) -> None:
        # A job cancelled at queue shutdown never ran; allow a later schedule
        if future.cancelled():
            with self._schedule_lock:
                self._enrichment_scheduled = False
            logger.info(
                f"Intensity enrichment for record {self.id} was cancelled",
                extra={"record_id": str(self.id)}
            )

    def _compute_peak_intensity(self) -> None:
        services = self._services
        try:
            with metrics.track_duration(metrics.enrichment_duration_seconds, kind="intensity"):
                lookup = services.geo_resolver.resolve(self.latitude, self.longitude, self.depth)
                intensity = float(
                    services.intensity_estimator.estimate(self.magnitude, lookup.ocean_distance, self.depth)
                )
            if not math.isfinite(intensity):
                raise ValueError(f"Intensity estimate is not finite: {intensity}")
        except Exception as e:
            metrics.record_enrichment_result("intensity", success=False)
            logger.error(
                f"Intensity enrichment failed for record {self.id}: {e}",
                extra={"record_id": str(self.id)},
                exc_info=True
            )
        else:
            self.peak_intensity = intensity
            metrics.record_enrichment_result("intensity", success=True)
            logger.debug(
                f"Enriched record {self.id} with peak intensity {intensity:.2f}",
                extra={"record_id": str(self.id), "peak_intensity": intensity}
            )
        finally:
            self._enrichment_done.set()

    def wait_for_enrichment(self, timeout: float | None = None) -> bool:
        """
        Block until the scheduled intensity job has finished.

        Returns immediately when no job is scheduled, e.g. for a restored
        record or after the queue refused or cancelled the job.

        Returns:
            True if the job ran (successfully or not), False on timeout or
            when nothing is scheduled
        """
        with self._schedule_lock:
            scheduled = self._enrichment_scheduled
        if not scheduled:
            return self._enrichment_done.is_set()
        return self._enrichment_done.wait(timeout)

    # =======================
    # STATE AND DISPLAY
    # =======================

    def invalidate(self) -> None:
        """Flag the record as erroneous. The flag is never cleared."""
        if self.invalidated:
            return
        self.invalidated = True
        metrics.increment_counter(metrics.records_invalidated_total)
        logger.info(f"Record {self.id} invalidated", extra={"record_id": str(self.id)})

    @property
    def assigned_stations(self) -> int:
        return len(self.contributing_detections)

    @property
    def origin_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.origin_time / 1000, tz=timezone.utc)

    def is_display_eligible(
        self,
        config: DisplayFilterConfig,
        display_filter: DisplayFilter | None = None,
    ) -> bool:
        """Whether the record passes the display filter for this snapshot."""
        return (display_filter or DEFAULT_FILTER).is_eligible(self, config)

    def compare_for_display_order(self, other: "ArchivedRecord") -> int:
        """-1 if this record is listed before other, 1 if after, 0 if same."""
        return compare_for_display_order(self, other)

    def summary_line(self) -> str:
        region = self.region or "Unresolved region"
        flag = " [invalid]" if self.invalidated else ""
        return (
            f"{self.origin_datetime:%Y-%m-%d %H:%M:%S} UTC  M{self.magnitude:.1f}  "
            f"{region}  depth {self.depth:.1f} km  class {self.quality_class.value}  "
            f"PGA {self.peak_intensity:.1f}{flag}"
        )
