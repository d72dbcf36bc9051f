"""
Ground-motion intensity estimation.

IntensityEstimator is the interface the enrichment job calls.
AttenuationIntensityEstimator is a generic magnitude/distance attenuation
curve returning peak ground acceleration in gal; the coefficients are
indicative, not calibrated for any region.
"""

import math
from abc import ABC, abstractmethod


class IntensityEstimator(ABC):
    """Estimates a peak ground-motion value for an event."""

    @abstractmethod
    def estimate(self, magnitude: float, distance: float, depth: float) -> float:
        """
        Estimate peak intensity.

        Args:
            magnitude: Event magnitude
            distance: Surface distance in km
            depth: Hypocenter depth in km

        Returns:
            Intensity estimate (non-negative)
        """


class AttenuationIntensityEstimator(IntensityEstimator):
    """
    log10(PGA) = a * M - b * log10(R + c) + d, with R the hypocentral distance.

    Parameters:
    - a: Magnitude scaling
    - b: Geometric spreading
    - c: Near-source saturation term (km)
    - d: Constant offset
    """

    def __init__(self, a: float = 0.56, b: float = 1.5, c: float = 10.0, d: float = 0.9):
        if b <= 0:
            raise ValueError(f"Geometric spreading must be positive, got {b}")
        if c <= 0:
            raise ValueError(f"Saturation term must be positive, got {c}")
        self.a = a
        self.b = b
        self.c = c
        self.d = d

    def estimate(self, magnitude: float, distance: float, depth: float) -> float:
        hypocentral = math.hypot(abs(distance), max(depth, 0.0))
        return 10 ** (self.a * magnitude - self.b * math.log10(hypocentral + self.c) + self.d)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(a={self.a}, b={self.b}, c={self.c}, d={self.d})"
