"""
Asynchronous enrichment of archived records: region resolution,
intensity estimation and the single-worker queue that runs them.
"""

from .geo import (
    BoundingBoxGeoResolver,
    GeoResolver,
    RegionBox,
    RegionLookup,
    great_circle_km,
    load_region_table,
)
from .intensity import AttenuationIntensityEstimator, IntensityEstimator
from .queue import EnrichmentQueue, EnrichmentQueueClosedError
from .services import EnrichmentServices

__all__ = [
    "GeoResolver",
    "BoundingBoxGeoResolver",
    "RegionBox",
    "RegionLookup",
    "great_circle_km",
    "load_region_table",
    "IntensityEstimator",
    "AttenuationIntensityEstimator",
    "EnrichmentQueue",
    "EnrichmentQueueClosedError",
    "EnrichmentServices",
]
