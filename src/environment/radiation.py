"""
Radiation pressure interfaces and their factory.

An interface is created per (target, source) pair, the source being the key
under which the settings are given.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional
import logging

import numpy as np

from core.models import Body, RadiationPressureInterfaceSettings

logger = logging.getLogger(__name__)

SPEED_OF_LIGHT = 299792458.0  # m/s
SOLAR_LUMINOSITY = 3.828e26  # W


@dataclass
class CannonballRadiationPressureSettings(RadiationPressureInterfaceSettings):
    """Spherical body with constant area and reflectivity, lit by the source body."""
    area: float = 1.0  # m^2
    radiation_pressure_coefficient: float = 1.0
    source_luminosity: float = SOLAR_LUMINOSITY


class CannonballRadiationPressureInterface:
    """
    Radiation pressure on a sphere from a point source.

    Source, target and occulting body positions are looked up by name in the
    body collection when evaluated. Occultation uses a cylindrical shadow.
    """

    def __init__(self, target_body: str, source_body: str, area: float,
                 radiation_pressure_coefficient: float, source_luminosity: float,
                 occulting_bodies: List[str], bodies: Mapping[str, Body]):
        if area <= 0.0:
            raise ValueError(f"Area must be positive, got {area}")
        if source_luminosity <= 0.0:
            raise ValueError(f"Source luminosity must be positive, got {source_luminosity}")

        self.target_body = target_body
        self.source_body = source_body
        self.area = area
        self.radiation_pressure_coefficient = radiation_pressure_coefficient
        self.source_luminosity = source_luminosity
        self.occulting_bodies = list(occulting_bodies)
        self._bodies = bodies

    def get_radiation_pressure(self, time: float,
                               target_position: Optional[np.ndarray] = None) -> float:
        """
        Radiation pressure (N/m^2) at the target.

        Args:
            time: Seconds since J2000
            target_position: Target position w.r.t. global origin (m); taken
                from the target's ephemeris when not given

        Returns:
            Pressure, 0 when the target is in the shadow of an occulting body
        """
        if target_position is None:
            target_position = self._position(self.target_body, time)
        source_position = self._position(self.source_body, time)

        distance = np.linalg.norm(target_position - source_position)
        pressure = self.source_luminosity / (4 * np.pi * distance**2 * SPEED_OF_LIGHT)

        for name in self.occulting_bodies:
            if self._is_occulted(target_position, source_position, name, time):
                return 0.0

        return pressure

    def _position(self, name: str, time: float) -> np.ndarray:
        return self._bodies[name].get_state_in_base_frame_from_ephemeris(time)[:3]

    def _is_occulted(self, target_position: np.ndarray, source_position: np.ndarray,
                     occulting_body: str, time: float) -> bool:
        occulting = self._bodies[occulting_body]
        r_target = target_position - self._position(occulting_body, time)
        r_source = source_position - self._position(occulting_body, time)

        # Direction away from source, through the occulting body
        shadow_dir = -r_source / np.linalg.norm(r_source)

        along = np.dot(r_target, shadow_dir)
        if along < 0:
            return False

        perpendicular = r_target - along * shadow_dir
        return np.linalg.norm(perpendicular) < occulting.shape_model.average_radius


def create_radiation_pressure_interface(settings: RadiationPressureInterfaceSettings,
                                        body: Body, source_body: str,
                                        bodies: Mapping[str, Body]):
    """Create a radiation pressure interface of body due to source_body."""
    if bodies[source_body].ephemeris is None:
        raise ValueError(f"Radiation source {source_body} has no ephemeris")
    for name in settings.occulting_bodies:
        if bodies[name].shape_model is None or bodies[name].ephemeris is None:
            raise ValueError(f"Occulting body {name} needs a shape model and an ephemeris")

    if isinstance(settings, CannonballRadiationPressureSettings):
        return CannonballRadiationPressureInterface(
            body.name, source_body, settings.area, settings.radiation_pressure_coefficient,
            settings.source_luminosity, settings.occulting_bodies, bodies)
    else:
        raise ValueError(
            f"Unknown radiation pressure settings type: {type(settings).__name__}")
