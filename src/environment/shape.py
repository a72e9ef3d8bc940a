"""
Body shape models and their factory.
"""

from dataclasses import dataclass
from typing import Mapping
import logging

import numpy as np

from core.models import Body, BodyShapeSettings

logger = logging.getLogger(__name__)


@dataclass
class SphericalBodyShapeSettings(BodyShapeSettings):
    radius: float = 0.0  # m


@dataclass
class OblateSpheroidBodyShapeSettings(BodyShapeSettings):
    equatorial_radius: float = 0.0  # m
    flattening: float = 0.0


class SphericalBodyShapeModel:
    """Sphere of constant radius."""

    def __init__(self, radius: float):
        if radius <= 0.0:
            raise ValueError(f"Radius must be positive, got {radius}")
        self.radius = radius

    @property
    def average_radius(self) -> float:
        return self.radius

    def get_altitude(self, body_fixed_position: np.ndarray) -> float:
        """Altitude (m) of a body-fixed position (m) above the sphere."""
        return float(np.linalg.norm(body_fixed_position) - self.radius)


class OblateSpheroidBodyShapeModel:
    """
    Oblate spheroid (e.g. WGS84: 6378137 m, f = 1/298.257223563).

    Geodetic altitude from the iterative algorithm of Vallado (2013).
    """

    MAX_ITERATIONS = 10
    TOLERANCE = 1e-12

    def __init__(self, equatorial_radius: float, flattening: float):
        if equatorial_radius <= 0.0:
            raise ValueError(f"Equatorial radius must be positive, got {equatorial_radius}")
        if not 0.0 <= flattening < 1.0:
            raise ValueError(f"Flattening must be in [0, 1), got {flattening}")
        self.equatorial_radius = equatorial_radius
        self.flattening = flattening
        self.polar_radius = equatorial_radius * (1.0 - flattening)
        self.eccentricity_sq = 2 * flattening - flattening**2

    @property
    def average_radius(self) -> float:
        # Volumetric mean radius
        return (self.equatorial_radius**2 * self.polar_radius) ** (1.0 / 3.0)

    def get_altitude(self, body_fixed_position: np.ndarray) -> float:
        """Geodetic altitude (m) of a body-fixed position (m)."""
        x, y, z = body_fixed_position
        p = np.sqrt(x**2 + y**2)
        a, e2 = self.equatorial_radius, self.eccentricity_sq

        if p < 1e-9:
            return float(abs(z) - self.polar_radius)

        lat = np.arctan2(z, p * (1 - e2))
        alt = 0.0
        for _ in range(self.MAX_ITERATIONS):
            N = a / np.sqrt(1 - e2 * np.sin(lat)**2)
            alt = p / np.cos(lat) - N
            lat_new = np.arctan2(z, p * (1 - e2 * N / (N + alt)))
            if abs(lat_new - lat) < self.TOLERANCE:
                lat = lat_new
                break
            lat = lat_new

        N = a / np.sqrt(1 - e2 * np.sin(lat)**2)
        return float(p / np.cos(lat) - N)


def create_body_shape_model(settings: BodyShapeSettings, body: Body,
                            bodies: Mapping[str, Body]):
    """Create a shape model from its settings."""
    if isinstance(settings, SphericalBodyShapeSettings):
        return SphericalBodyShapeModel(settings.radius)
    elif isinstance(settings, OblateSpheroidBodyShapeSettings):
        return OblateSpheroidBodyShapeModel(settings.equatorial_radius, settings.flattening)
    else:
        raise ValueError(f"Unknown body shape settings type: {type(settings).__name__}")
