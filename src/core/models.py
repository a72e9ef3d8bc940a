"""
Core domain models for environment setup.

This module defines the settings records that describe which environment
models a body should carry, and the Body object assembled from them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import numpy as np


class EnvironmentSetupError(Exception):
    """Base class for all fatal errors raised while setting up bodies."""
    pass


# Per-kind settings bases. Concrete variants live in the environment package;
# the core only relies on dependencies().

@dataclass
class ModelSettings:
    """Base class for the settings of a single environment model."""

    def dependencies(self) -> List[str]:
        """Names of other bodies that must exist before this model is built."""
        return []


@dataclass
class EphemerisSettings(ModelSettings):
    """Settings for a translational ephemeris."""
    frame_origin: str = "SSB"
    frame_orientation: str = "ECLIPJ2000"

    def dependencies(self) -> List[str]:
        return [self.frame_origin]


@dataclass
class RotationModelSettings(ModelSettings):
    """Settings for a rotational ephemeris."""
    base_frame_orientation: str = "ECLIPJ2000"
    target_frame_orientation: str = ""


@dataclass
class GravityFieldSettings(ModelSettings):
    """Settings for a gravity field model."""
    central_body: Optional[str] = None

    def dependencies(self) -> List[str]:
        return [self.central_body] if self.central_body else []


@dataclass
class BodyShapeSettings(ModelSettings):
    """Settings for a body shape model."""
    pass


@dataclass
class AtmosphereSettings(ModelSettings):
    """Settings for an atmosphere model."""
    pass


@dataclass
class AerodynamicCoefficientSettings(ModelSettings):
    """Settings for an aerodynamic coefficient interface."""
    reference_area: float = 1.0


@dataclass
class RadiationPressureInterfaceSettings(ModelSettings):
    """Settings for a radiation pressure interface (source given by its key)."""
    occulting_bodies: List[str] = field(default_factory=list)

    def dependencies(self) -> List[str]:
        return list(self.occulting_bodies)


@dataclass
class GravityFieldVariationSettings(ModelSettings):
    """Settings for a single gravity field variation."""
    deforming_bodies: List[str] = field(default_factory=list)

    def dependencies(self) -> List[str]:
        return list(self.deforming_bodies)


@dataclass(frozen=True)
class BodySettings:
    """
    Settings for a body to be created.

    Every model field is optional; an absent field means no model of that
    kind is requested. Radiation pressure settings are keyed by the name of
    the radiating source body. Gravity field variations are kept in order,
    and are created in that order.
    """
    ephemeris_settings: Optional[EphemerisSettings] = None
    rotation_model_settings: Optional[RotationModelSettings] = None
    gravity_field_settings: Optional[GravityFieldSettings] = None
    shape_model_settings: Optional[BodyShapeSettings] = None
    atmosphere_settings: Optional[AtmosphereSettings] = None
    aerodynamic_coefficient_settings: Optional[AerodynamicCoefficientSettings] = None
    radiation_pressure_settings: Dict[str, RadiationPressureInterfaceSettings] = field(
        default_factory=dict)
    gravity_field_variation_settings: List[GravityFieldVariationSettings] = field(
        default_factory=list)

    def dependencies(self) -> List[Tuple[str, str]]:
        """
        List the bodies these settings refer to.

        Returns:
            (dependency_name, field_label) pairs, in declaration order.
            Duplicates are kept so that every offending field can be reported.
        """
        refs = []
        if self.ephemeris_settings is not None:
            refs += [(name, 'ephemeris frame origin')
                     for name in self.ephemeris_settings.dependencies()]
        if self.rotation_model_settings is not None:
            refs += [(name, 'rotation model central body')
                     for name in self.rotation_model_settings.dependencies()]
        if self.gravity_field_settings is not None:
            refs += [(name, 'gravity field central body')
                     for name in self.gravity_field_settings.dependencies()]
        for source, settings in self.radiation_pressure_settings.items():
            refs.append((source, 'radiation pressure source'))
            refs += [(name, f'radiation pressure occulting body (source {source})')
                     for name in settings.dependencies()]
        for variation in self.gravity_field_variation_settings:
            refs += [(name, 'gravity field variation deforming body')
                     for name in variation.dependencies()]
        return refs


@dataclass
class BaseStateInterface:
    """
    Time-dependent state of a body's ephemeris origin w.r.t. the global origin.

    Holds only the origin's name and a state function; the function itself
    resolves the origin body by name at call time.
    """
    base_frame_id: str
    state_function: Callable[[float], np.ndarray]

    def get_base_frame_state(self, time: float) -> np.ndarray:
        """Cartesian state (m, m/s) of the base frame origin at time (s since J2000)."""
        return np.asarray(self.state_function(time), dtype=float)


@dataclass
class Body:
    """
    A named simulation body aggregating its environment models.

    Models are owned by the body. The ephemeris_frame_to_base_frame slot is
    filled by the frame reconciliation pass once all bodies exist.
    """
    name: str
    ephemeris: Optional[Any] = None
    rotational_ephemeris: Optional[Any] = None
    gravity_field: Optional[Any] = None
    shape_model: Optional[Any] = None
    atmosphere_model: Optional[Any] = None
    aerodynamic_coefficient_interface: Optional[Any] = None
    radiation_pressure_interfaces: Dict[str, Any] = field(default_factory=dict)
    gravity_field_variations: List[Any] = field(default_factory=list)
    ephemeris_frame_to_base_frame: Optional[BaseStateInterface] = None

    def set_ephemeris_frame_to_base_frame(self, interface: BaseStateInterface):
        """
        Install the frame-transform slot.

        Raises:
            EnvironmentSetupError: if a transform to a different origin is
                already installed.
        """
        current = self.ephemeris_frame_to_base_frame
        if current is not None and current.base_frame_id != interface.base_frame_id:
            raise EnvironmentSetupError(
                f"Body {self.name} already has a frame transform from "
                f"{current.base_frame_id}, cannot replace it with one from "
                f"{interface.base_frame_id}"
            )
        self.ephemeris_frame_to_base_frame = interface

    def get_state_in_base_frame_from_ephemeris(self, time: float) -> np.ndarray:
        """
        Compute the body's state w.r.t. the global frame origin.

        Args:
            time: Seconds since J2000

        Returns:
            Cartesian state [x, y, z, vx, vy, vz] (m, m/s)
        """
        if self.ephemeris is None:
            raise EnvironmentSetupError(f"Body {self.name} has no ephemeris")

        state = np.asarray(self.ephemeris.get_cartesian_state(time), dtype=float)
        if self.ephemeris_frame_to_base_frame is not None:
            state = state + self.ephemeris_frame_to_base_frame.get_base_frame_state(time)
        return state

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
