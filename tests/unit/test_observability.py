"""
Unit tests for structured logging and metrics helpers.
"""

import json
import logging

from quake_archive.observability import metrics
from quake_archive.observability.logger import (
    CustomJsonFormatter,
    get_logger,
    log_operation,
    setup_logger,
)


class TestJsonLogging:
    """Tests for the JSON log formatter"""

    def test_formatter_adds_context_fields(self):
        formatter = CustomJsonFormatter(
            fmt="%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s"
        )
        record = logging.LogRecord(
            name="quake_archive.test", level=logging.WARNING, pathname=__file__, lineno=1,
            msg="queue closed", args=(), exc_info=None, func="test_fn",
        )
        record.queue = "quake-enrichment"

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "queue closed"
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "quake_archive.test"
        assert payload["queue"] == "quake-enrichment"
        assert "thread_name" in payload
        assert payload["timestamp"]

    def test_setup_logger_level(self):
        logger = setup_logger("quake_archive.test.level", level="debug", format_type="text")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is True

    def test_get_logger_reuses_handlers(self):
        first = get_logger("quake_archive.test.reuse")
        second = get_logger("quake_archive.test.reuse")
        assert first is second
        assert len(second.handlers) == 1

    def test_log_operation_logs_failure(self, caplog):
        logger = setup_logger("quake_archive.test.operation", level="INFO")
        try:
            with log_operation("Loading snapshot", logger=logger, path="archive.json"):
                raise OSError("disk gone")
        except OSError:
            pass

        assert "Starting: Loading snapshot" in caplog.text
        assert "Failed: Loading snapshot" in caplog.text


class TestMetrics:
    """Tests for the metrics registry and helpers"""

    def test_exposition_contains_metric_families(self):
        output = metrics.generate_metrics().decode()
        for name in (
            "quake_records_archived_total",
            "quake_enrichment_jobs_total",
            "quake_enrichment_duration_seconds",
            "quake_enrichment_queue_pending",
            "quake_display_evaluations_total",
        ):
            assert name in output

    def test_content_type(self):
        assert metrics.get_content_type().startswith("text/plain")

    def test_unlabelled_counter(self):
        before = metrics.get_sample_value("quake_records_invalidated_total")
        metrics.increment_counter(metrics.records_invalidated_total)
        assert metrics.get_sample_value("quake_records_invalidated_total") == before + 1

    def test_missing_sample_reads_zero(self):
        assert metrics.get_sample_value("quake_enrichment_jobs_total", {"kind": "none", "status": "none"}) == 0.0

    def test_track_duration_observes(self):
        labels = {"kind": "unit-test"}
        before = metrics.get_sample_value("quake_enrichment_duration_seconds_count", labels)
        with metrics.track_duration(metrics.enrichment_duration_seconds, **labels):
            pass
        assert metrics.get_sample_value("quake_enrichment_duration_seconds_count", labels) == before + 1

    def test_record_display_decision_labels(self):
        labels = {"outcome": "shown", "rule_type": "none"}
        before = metrics.get_sample_value("quake_display_evaluations_total", labels)
        metrics.record_display_decision(True)
        assert metrics.get_sample_value("quake_display_evaluations_total", labels) == before + 1
