"""
Prometheus metrics collection for quake-archive

This module provides metrics instrumentation for the archive, the
enrichment worker and the display filter.
"""
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# ARCHIVE METRICS
# =======================

records_archived_total = Counter(
    name="quake_records_archived_total",
    documentation="Total number of records added to the archive",
    labelnames=["quality_class"],
    registry=REGISTRY,
)

records_invalidated_total = Counter(
    name="quake_records_invalidated_total",
    documentation="Total number of records flagged as erroneous",
    registry=REGISTRY,
)

archive_size = Gauge(
    name="quake_archive_size",
    documentation="Current number of records held by an archive",
    labelnames=["archive"],
    registry=REGISTRY,
)

# =======================
# ENRICHMENT METRICS
# =======================

enrichment_jobs_total = Counter(
    name="quake_enrichment_jobs_total",
    documentation="Total number of enrichment jobs executed",
    labelnames=["kind", "status"],  # status: success, failure
    registry=REGISTRY,
)

enrichment_duration_seconds = Histogram(
    name="quake_enrichment_duration_seconds",
    documentation="Time spent inside a single enrichment job",
    labelnames=["kind"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

enrichment_queue_pending = Gauge(
    name="quake_enrichment_queue_pending",
    documentation="Jobs submitted to the enrichment queue and not yet finished",
    labelnames=["queue"],
    registry=REGISTRY,
)

enrichment_submissions_rejected_total = Counter(
    name="quake_enrichment_submissions_rejected_total",
    documentation="Submissions refused because the queue was shut down",
    labelnames=["queue"],
    registry=REGISTRY,
)

region_resolutions_total = Counter(
    name="quake_region_resolutions_total",
    documentation="Total number of synchronous region resolutions",
    labelnames=["status"],
    registry=REGISTRY,
)

# =======================
# DISPLAY METRICS
# =======================

display_evaluations_total = Counter(
    name="quake_display_evaluations_total",
    documentation="Display eligibility decisions by outcome",
    labelnames=["outcome", "rule_type"],  # rule_type: first failing rule or "none"
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Content type for the Prometheus exposition format."""
    return CONTENT_TYPE_LATEST


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(enrichment_duration_seconds, kind="intensity"):
            ...
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """
    Set a gauge metric value

    Args:
        gauge: Prometheus Gauge metric
        value: Value to set
        **labels: Label values for the metric
    """
    gauge.labels(**labels).set(value)


def get_sample_value(name: str, labels: dict[str, str] | None = None) -> float:
    """
    Read the current value of a sample from the archive registry.

    Args:
        name: Sample name (e.g. "quake_enrichment_jobs_total")
        labels: Label values identifying the sample

    Returns:
        Current value, 0.0 when the sample has never been recorded
    """
    value = REGISTRY.get_sample_value(name, labels or {})
    return value if value is not None else 0.0


# =======================
# ENRICHMENT HELPERS
# =======================

def record_enrichment_result(kind: str, success: bool) -> None:
    """
    Record the outcome of one enrichment job.

    Args:
        kind: "intensity" or "region"
        success: Whether the job wrote its derived value
    """
    status = "success" if success else "failure"
    increment_counter(enrichment_jobs_total, 1, kind=kind, status=status)


def record_display_decision(eligible: bool, rule_type: str | None = None) -> None:
    """
    Record a display eligibility decision.

    Args:
        eligible: Outcome of the filter
        rule_type: First rule that rejected the record, if any
    """
    outcome = "shown" if eligible else "hidden"
    increment_counter(display_evaluations_total, 1, outcome=outcome, rule_type=rule_type or "none")
