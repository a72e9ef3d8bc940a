"""
Gravity field models, gravity field variations and their factories.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Tuple
import logging

import numpy as np

from core.models import Body, GravityFieldSettings, GravityFieldVariationSettings

logger = logging.getLogger(__name__)


@dataclass
class CentralGravityFieldSettings(GravityFieldSettings):
    """Point-mass gravity field."""
    gravitational_parameter: float = 0.0  # m^3/s^2


@dataclass
class MassRatioGravityFieldSettings(GravityFieldSettings):
    """Point-mass gravity field given as a fraction of the central body's."""
    mass_ratio: float = 0.0


@dataclass
class SphericalHarmonicsGravityFieldSettings(GravityFieldSettings):
    """Spherical harmonic gravity field (fully normalized coefficients)."""
    gravitational_parameter: float = 0.0
    reference_radius: float = 0.0
    cosine_coefficients: List[List[float]] = field(default_factory=lambda: [[1.0]])
    sine_coefficients: List[List[float]] = field(default_factory=lambda: [[0.0]])
    associated_reference_frame: str = ""


@dataclass
class BasicSolidBodyTideSettings(GravityFieldVariationSettings):
    """Degree-2 solid body tide raised by the deforming bodies."""
    love_number: float = 0.3


class GravityFieldModel:
    """Point-mass gravity field."""

    def __init__(self, gravitational_parameter: float):
        if gravitational_parameter <= 0.0:
            raise ValueError(f"Gravitational parameter must be positive, got {gravitational_parameter}")
        self.gravitational_parameter = gravitational_parameter

    def get_gravitational_acceleration(self, relative_position: np.ndarray) -> np.ndarray:
        """Point-mass acceleration (m/s^2) at a position relative to the body (m)."""
        r = np.asarray(relative_position, dtype=float)
        return -self.gravitational_parameter * r / np.linalg.norm(r)**3

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mu={self.gravitational_parameter:.6e})"


class SphericalHarmonicsGravityField(GravityFieldModel):
    """
    Spherical harmonic gravity field.

    Coefficients are stored as (degree+1) x (order+1) arrays. The associated
    reference frame is the body-fixed frame the coefficients are expressed in.
    """

    def __init__(self, gravitational_parameter: float, reference_radius: float,
                 cosine_coefficients: np.ndarray, sine_coefficients: np.ndarray,
                 associated_reference_frame: str):
        super().__init__(gravitational_parameter)
        self.reference_radius = reference_radius
        self.cosine_coefficients = np.atleast_2d(np.asarray(cosine_coefficients, dtype=float))
        self.sine_coefficients = np.atleast_2d(np.asarray(sine_coefficients, dtype=float))
        self.associated_reference_frame = associated_reference_frame

        if reference_radius <= 0.0:
            raise ValueError(f"Reference radius must be positive, got {reference_radius}")
        if self.cosine_coefficients.shape != self.sine_coefficients.shape:
            raise ValueError(
                f"Cosine and sine coefficient shapes differ: "
                f"{self.cosine_coefficients.shape}, {self.sine_coefficients.shape}")

    @property
    def maximum_degree(self) -> int:
        return self.cosine_coefficients.shape[0] - 1


class BasicSolidBodyTideGravityFieldVariations:
    """
    Degree-2 tidal corrections to a spherical harmonic field.

    IERS Conventions (2010) eq. 6.6, with a single real Love number and no
    frequency dependence:

        dC_2m - i dS_2m = k2/5 * sum_j (mu_j/mu) (R/r_j)^3 P_2m(sin phi_j) exp(-i m lambda_j)
    """

    def __init__(self, body_name: str, deforming_bodies: List[str], love_number: float,
                 bodies: Mapping[str, Body]):
        self.body_name = body_name
        self.deforming_bodies = list(deforming_bodies)
        self.love_number = love_number
        self._bodies = bodies

    def calculate_coefficient_corrections(self, time: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Corrections to the degree-2 coefficients at the given time.

        Returns:
            (delta_cosine, delta_sine), each 3x3 with only row 2 non-zero
        """
        body = self._bodies[self.body_name]
        field_model = body.gravity_field
        mu, R = field_model.gravitational_parameter, field_model.reference_radius

        delta_cosine = np.zeros((3, 3))
        delta_sine = np.zeros((3, 3))

        body_position = body.get_state_in_base_frame_from_ephemeris(time)[:3]
        for name in self.deforming_bodies:
            deforming = self._bodies[name]
            r_vec = (deforming.get_state_in_base_frame_from_ephemeris(time)[:3]
                     - body_position)
            if body.rotational_ephemeris is not None:
                r_vec = body.rotational_ephemeris.get_rotation_to_target_frame(time) @ r_vec

            r = np.linalg.norm(r_vec)
            sin_lat = r_vec[2] / r
            cos_lat = np.sqrt(max(0.0, 1.0 - sin_lat**2))
            longitude = np.arctan2(r_vec[1], r_vec[0])

            legendre = np.array([
                np.sqrt(5.0) * 0.5 * (3 * sin_lat**2 - 1),
                np.sqrt(15.0) * sin_lat * cos_lat,
                np.sqrt(15.0) * 0.5 * cos_lat**2,
            ])
            factor = (self.love_number / 5.0
                      * deforming.gravity_field.gravitational_parameter / mu * (R / r)**3)
            for m in range(3):
                delta_cosine[2, m] += factor * legendre[m] * np.cos(m * longitude)
                delta_sine[2, m] += factor * legendre[m] * np.sin(m * longitude)

        return delta_cosine, delta_sine


def create_gravity_field(settings: GravityFieldSettings, body: Body,
                         bodies: Mapping[str, Body]) -> GravityFieldModel:
    """Create a gravity field model from its settings."""
    if isinstance(settings, CentralGravityFieldSettings):
        return GravityFieldModel(settings.gravitational_parameter)

    elif isinstance(settings, MassRatioGravityFieldSettings):
        central = bodies[settings.central_body] if settings.central_body else None
        if central is None or central.gravity_field is None:
            raise ValueError(f"Mass ratio gravity field requires central body "
                             f"{settings.central_body} with a gravity field")
        return GravityFieldModel(
            settings.mass_ratio * central.gravity_field.gravitational_parameter)

    elif isinstance(settings, SphericalHarmonicsGravityFieldSettings):
        frame = settings.associated_reference_frame
        rotation = body.rotational_ephemeris
        if rotation is not None:
            if not frame:
                frame = rotation.target_frame_orientation
            elif frame != rotation.target_frame_orientation:
                raise ValueError(
                    f"Spherical harmonic field frame {frame} differs from body-fixed "
                    f"frame {rotation.target_frame_orientation} of the rotation model")
        return SphericalHarmonicsGravityField(
            settings.gravitational_parameter, settings.reference_radius,
            settings.cosine_coefficients, settings.sine_coefficients, frame)

    else:
        raise ValueError(f"Unknown gravity field settings type: {type(settings).__name__}")


def create_gravity_field_variation(settings: GravityFieldVariationSettings, body: Body,
                                   bodies: Mapping[str, Body]):
    """Create a single gravity field variation model from its settings."""
    if not isinstance(body.gravity_field, SphericalHarmonicsGravityField):
        raise ValueError("Gravity field variations require a spherical harmonic gravity field")

    if isinstance(settings, BasicSolidBodyTideSettings):
        for name in settings.deforming_bodies:
            deforming = bodies[name]
            if deforming.ephemeris is None or deforming.gravity_field is None:
                raise ValueError(f"Deforming body {name} needs an ephemeris and a gravity field")
        if body.ephemeris is None:
            raise ValueError("Solid body tide requires the deformed body to have an ephemeris")
        return BasicSolidBodyTideGravityFieldVariations(
            body.name, settings.deforming_bodies, settings.love_number, bodies)

    else:
        raise ValueError(f"Unknown gravity field variation settings type: {type(settings).__name__}")
