"""
Detection models: the per-station snapshot handed over by the detection
layer and the frozen copy an archived record keeps.
"""

from pydantic import BaseModel, ConfigDict, Field


class DetectionSnapshot(BaseModel):
    """
    One contributing station detection as seen at archival time.

    Attributes:
        latitude: Station latitude in degrees
        longitude: Station longitude in degrees
        ratio: Association strength of the detection (signal ratio)
        arrival_time: P-wave arrival time (epoch millis)
        valid: Whether the detection was still associated when archived
    """

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    ratio: float = Field(..., ge=0.0)
    arrival_time: int
    valid: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "latitude": 35.68,
                "longitude": 139.77,
                "ratio": 12.4,
                "arrival_time": 1700000004210,
                "valid": True,
            }
        }


class ArchivedDetection(BaseModel):
    """Frozen copy of a valid contributing detection."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    ratio: float
    arrival_time: int

    @classmethod
    def from_snapshot(cls, snapshot: DetectionSnapshot) -> "ArchivedDetection":
        return cls(
            latitude=snapshot.latitude,
            longitude=snapshot.longitude,
            ratio=snapshot.ratio,
            arrival_time=snapshot.arrival_time,
        )
