"""
Region resolution for archived records.

GeoResolver is the interface the archive depends on. BoundingBoxGeoResolver
is a coarse implementation backed by a table of named land boxes, loadable
from YAML. It is good enough for labelling and for the distance-to-land input
of the intensity estimate; it is not a gazetteer.
"""

import math
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple

import yaml
from pydantic import BaseModel, Field, model_validator

EARTH_RADIUS_KM = 6371.0

# Events further than this from any land box are labelled as open ocean
COASTAL_RANGE_KM = 400.0


class RegionLookup(NamedTuple):
    """Result of a region lookup: display name and distance to land in km."""

    region: str
    ocean_distance: float


class GeoResolver(ABC):
    """Resolves coordinates to a region name and an ocean/land distance."""

    @abstractmethod
    def resolve(self, latitude: float, longitude: float, depth: float) -> RegionLookup:
        """
        Resolve a hypocenter location.

        Args:
            latitude: Degrees north
            longitude: Degrees east
            depth: Depth in km

        Returns:
            RegionLookup with the region name and the distance to land (0 on land)
        """


class RegionBox(BaseModel):
    """A named latitude/longitude box."""

    name: str = Field(..., min_length=1)
    lat_min: float = Field(..., ge=-90.0, le=90.0)
    lat_max: float = Field(..., ge=-90.0, le=90.0)
    lon_min: float = Field(..., ge=-180.0, le=180.0)
    lon_max: float = Field(..., ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def check_bounds_order(self):
        if self.lat_min > self.lat_max:
            raise ValueError(f"lat_min ({self.lat_min}) must not exceed lat_max ({self.lat_max})")
        if self.lon_min > self.lon_max:
            raise ValueError(f"lon_min ({self.lon_min}) must not exceed lon_max ({self.lon_max})")
        return self

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.lat_min <= latitude <= self.lat_max
            and self.lon_min <= longitude <= self.lon_max
        )

    def nearest_point(self, latitude: float, longitude: float) -> tuple[float, float]:
        """Closest point of the box in plain lat/lon clamping."""
        return (
            min(max(latitude, self.lat_min), self.lat_max),
            min(max(longitude, self.lon_min), self.lon_max),
        )


DEFAULT_REGIONS: tuple[RegionBox, ...] = (
    RegionBox(name="Japan", lat_min=30.0, lat_max=46.0, lon_min=129.0, lon_max=146.0),
    RegionBox(name="Kamchatka", lat_min=50.0, lat_max=62.0, lon_min=155.0, lon_max=165.0),
    RegionBox(name="Alaska", lat_min=54.0, lat_max=71.0, lon_min=-168.0, lon_max=-141.0),
    RegionBox(name="California", lat_min=32.5, lat_max=42.0, lon_min=-124.5, lon_max=-114.0),
    RegionBox(name="Mexico", lat_min=14.5, lat_max=32.5, lon_min=-117.0, lon_max=-86.7),
    RegionBox(name="Chile", lat_min=-56.0, lat_max=-17.5, lon_min=-75.5, lon_max=-67.0),
    RegionBox(name="Peru", lat_min=-18.4, lat_max=-0.1, lon_min=-81.3, lon_max=-68.7),
    RegionBox(name="Turkey", lat_min=36.0, lat_max=42.1, lon_min=26.0, lon_max=44.8),
    RegionBox(name="Italy", lat_min=36.6, lat_max=47.1, lon_min=6.6, lon_max=18.5),
    RegionBox(name="Greece", lat_min=34.8, lat_max=41.7, lon_min=19.4, lon_max=28.2),
    RegionBox(name="Iran", lat_min=25.1, lat_max=39.8, lon_min=44.0, lon_max=63.3),
    RegionBox(name="Indonesia", lat_min=-11.0, lat_max=6.0, lon_min=95.0, lon_max=141.0),
    RegionBox(name="Philippines", lat_min=4.6, lat_max=21.1, lon_min=116.9, lon_max=126.6),
    RegionBox(name="New Zealand", lat_min=-47.3, lat_max=-34.4, lon_min=166.4, lon_max=178.6),
)


def great_circle_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two points in km."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def load_region_table(config_path: str | Path) -> tuple[RegionBox, ...]:
    """
    Load a region table from YAML.

    Expected YAML format:
    ```yaml
    regions:
      - name: Japan
        lat_min: 30.0
        lat_max: 46.0
        lon_min: 129.0
        lon_max: 146.0
    ```

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file has no 'regions' list
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Region table not found: {config_path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    if not config or not isinstance(config.get("regions"), list):
        raise ValueError("Region table must contain a 'regions' list")

    return tuple(RegionBox(**entry) for entry in config["regions"])


class BoundingBoxGeoResolver(GeoResolver):
    """
    GeoResolver over a table of land boxes.

    Inside a box the region is the box name and the ocean distance is 0.
    Outside every box the distance is measured to the nearest box; events
    within COASTAL_RANGE_KM get an "Off the coast of" label.

    Lookups are serialized by an internal lock, so synchronous region
    resolution and background enrichment jobs can share one instance.
    """

    def __init__(self, regions: tuple[RegionBox, ...] | list[RegionBox] | None = None):
        self.regions = tuple(regions) if regions is not None else DEFAULT_REGIONS
        if not self.regions:
            raise ValueError("BoundingBoxGeoResolver requires at least one region")
        self._cache: dict[tuple[float, float], RegionLookup] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "BoundingBoxGeoResolver":
        return cls(load_region_table(config_path))

    def resolve(self, latitude: float, longitude: float, depth: float) -> RegionLookup:
        key = (round(latitude, 3), round(longitude, 3))
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            lookup = self._lookup(latitude, longitude)
            self._cache[key] = lookup
            return lookup

    def _lookup(self, latitude: float, longitude: float) -> RegionLookup:
        for box in self.regions:
            if box.contains(latitude, longitude):
                return RegionLookup(box.name, 0.0)

        nearest_name = None
        nearest_km = math.inf
        for box in self.regions:
            lat, lon = box.nearest_point(latitude, longitude)
            distance = great_circle_km(latitude, longitude, lat, lon)
            if distance < nearest_km:
                nearest_name, nearest_km = box.name, distance

        if nearest_km <= COASTAL_RANGE_KM:
            return RegionLookup(f"Off the coast of {nearest_name}", nearest_km)
        return RegionLookup("Open ocean", nearest_km)
