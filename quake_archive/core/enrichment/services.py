"""
EnrichmentServices bundles the live helpers an archived record binds to.
"""

from dataclasses import dataclass, field

from .geo import BoundingBoxGeoResolver, GeoResolver
from .intensity import AttenuationIntensityEstimator, IntensityEstimator
from .queue import EnrichmentQueue


@dataclass
class EnrichmentServices:
    """
    Queue, resolver and estimator shared by every record of an archive.

    Records never persist this object; every construction path, including
    reload from storage, binds it again.
    """

    queue: EnrichmentQueue
    geo_resolver: GeoResolver = field(default_factory=BoundingBoxGeoResolver)
    intensity_estimator: IntensityEstimator = field(default_factory=AttenuationIntensityEstimator)

    @classmethod
    def create_default(cls, queue_name: str = "quake-enrichment") -> "EnrichmentServices":
        return cls(queue=EnrichmentQueue(queue_name))

    def shutdown(self, cancel_pending: bool = True) -> None:
        self.queue.shutdown(cancel_pending=cancel_pending)
