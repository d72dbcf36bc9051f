"""
Unit tests for Pydantic data models.

Tests quality classes, detection snapshots, summaries and the archived
record's construction-time guarantees.
"""

from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from quake_archive.core.models import (
    ArchivedDetection,
    ArchivedRecord,
    DetectionSnapshot,
    DetectionSummary,
    QualityClass,
    copy_detections,
)

ORIGIN_MS = 1700000000000


class TestQualityClass:
    """Tests for QualityClass ranking"""

    def test_ranks_follow_declaration_order(self):
        """Test S is best and D is worst"""
        assert [q.rank for q in QualityClass] == [0, 1, 2, 3, 4]
        assert QualityClass.best() is QualityClass.S
        assert QualityClass.worst() is QualityClass.D

    def test_from_rank(self):
        """Test converting a rank back to a class"""
        assert QualityClass.from_rank(2) is QualityClass.B

    def test_from_rank_out_of_range(self):
        """Test invalid ranks are rejected"""
        with pytest.raises(ValueError, match="between 0 and 4"):
            QualityClass.from_rank(5)

    def test_value_round_trip(self):
        """Test classes parse from their stored value"""
        assert QualityClass("C") is QualityClass.C


class TestDetectionSnapshot:
    """Tests for DetectionSnapshot model"""

    def test_valid_snapshot(self):
        """Test creating a valid snapshot"""
        snapshot = DetectionSnapshot(latitude=35.5, longitude=139.5, ratio=8.2, arrival_time=ORIGIN_MS)
        assert snapshot.valid is True
        assert snapshot.ratio == 8.2

    def test_latitude_out_of_range(self):
        """Test that impossible coordinates raise ValidationError"""
        with pytest.raises(ValidationError) as exc_info:
            DetectionSnapshot(latitude=95.0, longitude=0.0, ratio=1.0, arrival_time=ORIGIN_MS)
        assert "latitude" in str(exc_info.value)

    def test_negative_ratio(self):
        """Test that a negative ratio raises ValidationError"""
        with pytest.raises(ValidationError) as exc_info:
            DetectionSnapshot(latitude=0.0, longitude=0.0, ratio=-1.0, arrival_time=ORIGIN_MS)
        assert "ratio" in str(exc_info.value)

    def test_archived_detection_is_frozen(self):
        """Test the archived copy cannot be modified"""
        snapshot = DetectionSnapshot(latitude=1.0, longitude=2.0, ratio=3.0, arrival_time=ORIGIN_MS)
        archived = ArchivedDetection.from_snapshot(snapshot)
        assert archived.ratio == 3.0
        with pytest.raises(ValidationError):
            archived.ratio = 10.0


class TestDetectionSummary:
    """Tests for DetectionSummary model"""

    def test_generates_id(self, make_summary):
        """Test an id is generated when none is supplied"""
        summary = make_summary()
        assert isinstance(summary.id, UUID)
        assert summary.contributing_detections is None

    def test_quality_class_from_value(self, make_summary):
        """Test quality class is parsed from its string value"""
        summary = make_summary(quality_class="B")
        assert summary.quality_class is QualityClass.B

    def test_missing_magnitude(self):
        """Test that a summary without magnitude fails fast"""
        with pytest.raises(ValidationError) as exc_info:
            DetectionSummary(
                latitude=35.0,
                longitude=139.0,
                depth=10.0,
                origin_time=ORIGIN_MS,
                quality_class=QualityClass.S,
            )
        assert "magnitude" in str(exc_info.value)

    def test_invalid_quality_class(self, make_summary):
        """Test that an unknown quality class raises ValidationError"""
        with pytest.raises(ValidationError) as exc_info:
            make_summary(quality_class="Z")
        assert "quality_class" in str(exc_info.value)


class TestCopyDetections:
    """Tests for the construction-time detection copy"""

    def test_no_snapshot(self):
        """Test a missing snapshot leaves detections empty and ratio unset"""
        detections, ratio = copy_detections(None)
        assert detections == ()
        assert ratio is None

    def test_max_ratio_of_valid_detections(self, make_detection):
        """Test ratio is the maximum among valid detections only"""
        detections, ratio = copy_detections([
            make_detection(4.0),
            make_detection(9.5),
            make_detection(50.0, valid=False),
        ])
        assert len(detections) == 2
        assert ratio == 9.5

    def test_ratio_floor_is_one(self, make_detection):
        """Test weak detections still give a ratio of at least 1.0"""
        detections, ratio = copy_detections([make_detection(0.3), make_detection(0.8)])
        assert len(detections) == 2
        assert ratio == 1.0

    def test_snapshot_with_only_invalid_detections(self, make_detection):
        """Test an all-invalid snapshot keeps no detections and ratio 1.0"""
        detections, ratio = copy_detections([make_detection(7.0, valid=False)])
        assert detections == ()
        assert ratio == 1.0


class TestArchivedRecord:
    """Tests for ArchivedRecord model"""

    def _record(self, **overrides) -> ArchivedRecord:
        fields = {
            "id": uuid4(),
            "latitude": 35.0,
            "longitude": 139.0,
            "depth": 10.0,
            "magnitude": 6.5,
            "origin_time": ORIGIN_MS,
            "quality_class": QualityClass.S,
        }
        fields.update(overrides)
        return ArchivedRecord(**fields)

    def test_defaults(self):
        """Test derived fields start at their defaults"""
        record = self._record()
        assert record.region is None
        assert record.peak_intensity == 0.0
        assert record.invalidated is False
        assert record.max_association_ratio is None
        assert record.contributing_detections == ()
        assert record.assigned_stations == 0
        assert record.is_bound is False

    def test_immutable_fields_reject_assignment(self):
        """Test seismic parameters cannot be changed after construction"""
        record = self._record()
        for field, value in [("magnitude", 7.0), ("origin_time", 1), ("quality_class", QualityClass.D)]:
            with pytest.raises(ValidationError):
                setattr(record, field, value)
        assert record.magnitude == 6.5
        assert record.quality_class is QualityClass.S

    def test_derived_fields_are_assignable(self):
        """Test region and peak intensity can be replaced"""
        record = self._record()
        record.region = "Japan"
        record.peak_intensity = 120.0
        assert record.region == "Japan"
        assert record.peak_intensity == 120.0

    def test_ratio_must_cover_detections(self):
        """Test a ratio below the strongest detection is rejected"""
        detection = ArchivedDetection(latitude=1.0, longitude=1.0, ratio=8.0, arrival_time=ORIGIN_MS)
        with pytest.raises(ValidationError, match="max_association_ratio"):
            self._record(contributing_detections=(detection,), max_association_ratio=2.0)

    def test_detections_without_ratio_rejected(self):
        """Test detections require a ratio"""
        detection = ArchivedDetection(latitude=1.0, longitude=1.0, ratio=3.0, arrival_time=ORIGIN_MS)
        with pytest.raises(ValidationError):
            self._record(contributing_detections=(detection,))

    def test_ratio_below_one_rejected(self):
        """Test the ratio floor of 1.0"""
        with pytest.raises(ValidationError) as exc_info:
            self._record(max_association_ratio=0.5)
        assert "max_association_ratio" in str(exc_info.value)

    def test_invalidate_is_one_way(self):
        """Test an invalidated record cannot be reset"""
        record = self._record()
        record.invalidate()
        assert record.invalidated is True

        record.invalidate()  # no-op
        with pytest.raises(ValueError, match="cannot be reset"):
            record.invalidated = False
        assert record.invalidated is True

    def test_equality_by_id(self):
        """Test records compare equal by identity, not by derived state"""
        record = self._record()
        copy = ArchivedRecord(**record.model_dump())
        copy.region = "Elsewhere"
        assert record == copy
        assert hash(record) == hash(copy)
        assert record != self._record()

    def test_dump_excludes_transient_state(self):
        """Test serialized form carries only persistent fields"""
        record = self._record()
        data = record.model_dump(mode="json")
        assert set(data) == {
            "id", "latitude", "longitude", "depth", "magnitude", "origin_time",
            "quality_class", "max_association_ratio", "contributing_detections",
            "region", "peak_intensity", "invalidated",
        }
        assert data["quality_class"] == "S"

    def test_summary_line(self):
        """Test the one-line description"""
        record = self._record(region="Japan", peak_intensity=123.46)
        line = record.summary_line()
        assert "2023-11-14 22:13:20 UTC" in line
        assert "M6.5" in line
        assert "Japan" in line
        assert "PGA 123.5" in line

    def test_summary_line_marks_invalid(self):
        """Test invalidated records are flagged"""
        record = self._record()
        record.invalidate()
        assert record.summary_line().endswith("[invalid]")
