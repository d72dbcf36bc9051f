"""
Core data models for the seismic event archive.

All models use Pydantic for runtime validation and type safety.
"""

from .archived_record import SERVICES_CONTEXT_KEY, ArchivedRecord, copy_detections
from .detection import ArchivedDetection, DetectionSnapshot
from .detection_summary import DetectionSummary
from .quality_class import QualityClass

__all__ = [
    "QualityClass",
    "DetectionSnapshot",
    "ArchivedDetection",
    "DetectionSummary",
    "ArchivedRecord",
    "SERVICES_CONTEXT_KEY",
    "copy_detections",
]
