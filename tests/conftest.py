"""
Pytest configuration and fixtures for quake-archive tests

This module provides shared fixtures for unit and integration tests:
deterministic enrichment collaborators, a live enrichment queue and
factories for detection summaries and display snapshots.
"""
import os
import threading
from typing import Generator
from uuid import uuid4

import pytest

from quake_archive.core.display import DisplayFilterConfig
from quake_archive.core.enrichment import (
    EnrichmentQueue,
    EnrichmentServices,
    GeoResolver,
    IntensityEstimator,
    RegionLookup,
)
from quake_archive.core.models import DetectionSnapshot, DetectionSummary, QualityClass

ORIGIN_MS = 1700000000000
HOUR_MS = 3600 * 1000


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Fast isolated tests"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that run the enrichment worker end to end"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture(autouse=True, scope="session")
def test_env_vars():
    """
    Set test environment variables

    This fixture loads config/test.env and sets environment variables
    """
    from dotenv import load_dotenv

    env_path = os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "config",
        "test.env"
    )

    if os.path.exists(env_path):
        load_dotenv(env_path, override=True)


@pytest.fixture(scope="session")
def config_dir() -> str:
    """Path to the repository config directory"""
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), "config")


# =======================
# ENRICHMENT COLLABORATORS
# =======================

class FixedGeoResolver(GeoResolver):
    """Deterministic resolver returning one region and distance, counting calls."""

    def __init__(self, region: str = "Test Region", ocean_distance: float = 12.5):
        self.region = region
        self.ocean_distance = ocean_distance
        self.calls = 0
        self._lock = threading.Lock()

    def resolve(self, latitude: float, longitude: float, depth: float) -> RegionLookup:
        with self._lock:
            self.calls += 1
        return RegionLookup(self.region, self.ocean_distance)


class GatedGeoResolver(FixedGeoResolver):
    """Resolver that blocks until the test opens the gate."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.gate = threading.Event()

    def resolve(self, latitude: float, longitude: float, depth: float) -> RegionLookup:
        if not self.gate.wait(timeout=10):
            raise TimeoutError("Gate was never opened")
        return super().resolve(latitude, longitude, depth)


class FailingGeoResolver(GeoResolver):
    """Resolver whose every call raises."""

    def resolve(self, latitude: float, longitude: float, depth: float) -> RegionLookup:
        raise ConnectionError("region lookup unavailable")


class LinearIntensityEstimator(IntensityEstimator):
    """Deterministic estimator: 10 * magnitude + distance + depth."""

    def estimate(self, magnitude: float, distance: float, depth: float) -> float:
        return 10.0 * magnitude + distance + depth


class OverlapCountingEstimator(LinearIntensityEstimator):
    """Estimator recording the peak number of simultaneous calls."""

    def __init__(self):
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def estimate(self, magnitude: float, distance: float, depth: float) -> float:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            threading.Event().wait(0.001)
            return super().estimate(magnitude, distance, depth)
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def geo_resolver() -> FixedGeoResolver:
    return FixedGeoResolver()


@pytest.fixture
def gated_resolver() -> Generator[GatedGeoResolver, None, None]:
    resolver = GatedGeoResolver()
    yield resolver
    # Never leave the worker blocked
    resolver.gate.set()


@pytest.fixture
def failing_resolver() -> FailingGeoResolver:
    return FailingGeoResolver()


@pytest.fixture
def intensity_estimator() -> LinearIntensityEstimator:
    return LinearIntensityEstimator()


@pytest.fixture
def overlap_estimator() -> OverlapCountingEstimator:
    return OverlapCountingEstimator()


# =======================
# QUEUE AND SERVICES FIXTURES
# =======================

@pytest.fixture
def enrichment_queue() -> Generator[EnrichmentQueue, None, None]:
    """
    Provide a running enrichment queue, shut down after the test

    Yields:
        EnrichmentQueue instance
    """
    queue = EnrichmentQueue(f"test-queue-{uuid4().hex[:8]}")
    yield queue
    queue.shutdown()


@pytest.fixture
def services(enrichment_queue, geo_resolver, intensity_estimator) -> EnrichmentServices:
    """Enrichment services with deterministic collaborators"""
    return EnrichmentServices(
        queue=enrichment_queue,
        geo_resolver=geo_resolver,
        intensity_estimator=intensity_estimator,
    )


@pytest.fixture
def gated_services(enrichment_queue, gated_resolver, intensity_estimator) -> EnrichmentServices:
    """Enrichment services whose worker blocks until the gate opens"""
    return EnrichmentServices(
        queue=enrichment_queue,
        geo_resolver=gated_resolver,
        intensity_estimator=intensity_estimator,
    )


# =======================
# DATA FACTORIES
# =======================

@pytest.fixture
def make_summary():
    """Factory for detection summaries with sensible defaults"""

    def _make(**overrides) -> DetectionSummary:
        fields = {
            "latitude": 35.0,
            "longitude": 139.0,
            "depth": 10.0,
            "magnitude": 6.5,
            "origin_time": ORIGIN_MS,
            "quality_class": QualityClass.S,
        }
        fields.update(overrides)
        return DetectionSummary(**fields)

    return _make


@pytest.fixture
def make_detection():
    """Factory for contributing detection snapshots"""

    def _make(ratio: float, valid: bool = True, **overrides) -> DetectionSnapshot:
        fields = {
            "latitude": 35.5,
            "longitude": 139.5,
            "ratio": ratio,
            "arrival_time": ORIGIN_MS + 5000,
            "valid": valid,
        }
        fields.update(overrides)
        return DetectionSnapshot(**fields)

    return _make


@pytest.fixture
def make_config():
    """Factory for display filter snapshots; everything passes by default"""

    def _make(**overrides) -> DisplayFilterConfig:
        fields = {
            "quality_filter_threshold": 4,
            "magnitude_filter_enabled": False,
            "magnitude_filter_threshold": 0.0,
            "time_filter_enabled": False,
            "time_filter_window_hours": 24.0,
            "now": ORIGIN_MS,
        }
        fields.update(overrides)
        return DisplayFilterConfig(**fields)

    return _make
