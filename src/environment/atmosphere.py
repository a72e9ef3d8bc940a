"""
Atmospheric density models and their factory.

Altitudes are measured w.r.t. the body's shape model, so an atmosphere can
only be attached to a body that has one.
"""

from dataclasses import dataclass, field
from typing import List, Mapping
import logging

import numpy as np

from core.models import AtmosphereSettings, Body

logger = logging.getLogger(__name__)

# Reference densities at standard altitudes (km -> kg/m^3), NRLMSISE-00
# reference atmosphere (quiet sun, mid-latitude)
REFERENCE_TABLE = {
    0: 1.225,
    25: 3.899e-2,
    30: 1.774e-2,
    40: 3.972e-3,
    50: 1.027e-3,
    60: 3.097e-4,
    70: 8.283e-5,
    80: 1.846e-5,
    90: 3.416e-6,
    100: 5.606e-7,
    110: 9.708e-8,
    120: 2.222e-8,
    130: 8.152e-9,
    140: 3.831e-9,
    150: 2.076e-9,
    180: 5.194e-10,
    200: 2.541e-10,
    250: 6.073e-11,
    300: 1.916e-11,
    350: 7.014e-12,
    400: 2.803e-12,
    450: 1.184e-12,
    500: 5.215e-13,
    600: 1.137e-13,
    700: 3.070e-14,
    800: 1.136e-14,
    900: 5.759e-15,
    1000: 3.561e-15,
}


@dataclass
class ExponentialAtmosphereSettings(AtmosphereSettings):
    """Exponentially decaying density above the reference surface."""
    density_at_zero_altitude: float = 1.225  # kg/m^3
    scale_height: float = 8500.0  # m


@dataclass
class TabulatedAtmosphereSettings(AtmosphereSettings):
    """Density table; defaults to the Earth reference table."""
    altitudes: List[float] = field(
        default_factory=lambda: [1000.0 * h for h in sorted(REFERENCE_TABLE)])
    densities: List[float] = field(
        default_factory=lambda: [REFERENCE_TABLE[h] for h in sorted(REFERENCE_TABLE)])


class ExponentialAtmosphere:
    """
    Simple exponential atmosphere model.

    rho(h) = rho_0 * exp(-h / H), with H the scale height.
    """

    def __init__(self, rho_0: float = 1.225, scale_height: float = 8500.0):
        if rho_0 <= 0.0 or scale_height <= 0.0:
            raise ValueError(
                f"Density and scale height must be positive, got {rho_0}, {scale_height}")
        self.rho_0 = rho_0
        self.H = scale_height

    def density(self, altitude: float, **kwargs) -> float:
        """
        Compute density using exponential model.

        Args:
            altitude: Altitude above the shape model (m)
            **kwargs: Ignored (for API compatibility)

        Returns:
            rho: Density (kg/m^3)
        """
        return self.rho_0 * np.exp(-altitude / self.H)


class TabulatedAtmosphere:
    """
    Density from a table, log-linear interpolation in altitude.

    Above the table, density decays exponentially with a fixed scale height;
    below it, the lowest density is returned.
    """

    UPPER_SCALE_HEIGHT = 60000.0  # m

    def __init__(self, altitudes: List[float], densities: List[float]):
        alt = np.asarray(altitudes, dtype=float)
        rho = np.asarray(densities, dtype=float)
        if alt.shape != rho.shape or alt.size < 2:
            raise ValueError("Atmosphere table needs at least two altitude/density pairs")
        if np.any(np.diff(alt) <= 0):
            raise ValueError("Atmosphere table altitudes must be strictly increasing")
        if np.any(rho <= 0):
            raise ValueError("Atmosphere table densities must be positive")

        self._alt_array = alt
        self._rho_array = rho
        self._log_rho_array = np.log(rho)

    def density(self, altitude: float, **kwargs) -> float:
        """Density (kg/m^3) at altitude (m)."""
        if altitude < self._alt_array[0]:
            logger.warning(f"Altitude {altitude:.0f} m below model range")
            return float(self._rho_array[0])

        if altitude > self._alt_array[-1]:
            return float(self._rho_array[-1] * np.exp(
                -(altitude - self._alt_array[-1]) / self.UPPER_SCALE_HEIGHT))

        return float(np.exp(np.interp(altitude, self._alt_array, self._log_rho_array)))


def create_atmosphere_model(settings: AtmosphereSettings, body: Body,
                            bodies: Mapping[str, Body]):
    """Create an atmosphere model from its settings."""
    if body.shape_model is None:
        raise ValueError("An atmosphere model requires the body to have a shape model")

    if isinstance(settings, ExponentialAtmosphereSettings):
        return ExponentialAtmosphere(settings.density_at_zero_altitude, settings.scale_height)
    elif isinstance(settings, TabulatedAtmosphereSettings):
        return TabulatedAtmosphere(settings.altitudes, settings.densities)
    else:
        raise ValueError(f"Unknown atmosphere settings type: {type(settings).__name__}")
