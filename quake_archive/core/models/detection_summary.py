"""
DetectionSummary model representing a finalized event handed to the archive.
"""

from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .detection import DetectionSnapshot
from .quality_class import QualityClass


class DetectionSummary(BaseModel):
    """
    Already-computed event summary produced by the detection pipeline.

    Required seismic parameters are validated here, so a malformed upstream
    event fails before any record exists. The detection snapshot is optional:
    events reconstructed without cluster context carry none.

    Attributes:
        id: Event identifier (generated when the producer supplies none)
        latitude, longitude: Hypocenter location in degrees
        depth: Hypocenter depth in km
        magnitude: Event magnitude
        origin_time: Event occurrence time (epoch millis)
        quality_class: Confidence class of the solution
        contributing_detections: Station detections at archival time, or None
    """

    id: UUID = Field(default_factory=uuid4)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    depth: float
    magnitude: float
    origin_time: int
    quality_class: QualityClass
    contributing_detections: list[DetectionSnapshot] | None = None

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
                "contributing_detections": [
                    {
                        "latitude": 35.68,
                        "longitude": 139.77,
                        "ratio": 12.4,
                        "arrival_time": 1700000004210,
                        "valid": True,
                    }
                ],
            }
        }
