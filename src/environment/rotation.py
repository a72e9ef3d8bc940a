"""
Rotational ephemeris models and their factory.

A rotational ephemeris gives the orientation of a body-fixed (target) frame
w.r.t. a base frame orientation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Mapping
import logging

import numpy as np

from core.models import Body, RotationModelSettings

logger = logging.getLogger(__name__)


@dataclass
class SimpleRotationModelSettings(RotationModelSettings):
    """Uniform rotation about the body-fixed z axis."""
    initial_orientation: List[List[float]] = field(
        default_factory=lambda: np.eye(3).tolist())
    initial_time: float = 0.0
    rotation_rate: float = 0.0  # rad/s


@dataclass
class SynchronousRotationModelSettings(RotationModelSettings):
    """Body-fixed x axis locked towards the central body (tidal locking)."""
    central_body: str = ""

    def dependencies(self) -> List[str]:
        return [self.central_body]


class RotationalEphemeris(ABC):
    """Abstract interface for rotational ephemerides."""

    def __init__(self, base_frame_orientation: str, target_frame_orientation: str):
        self.base_frame_orientation = base_frame_orientation
        self.target_frame_orientation = target_frame_orientation

    @abstractmethod
    def get_rotation_to_base_frame(self, time: float) -> np.ndarray:
        """
        Rotation matrix from target (body-fixed) frame to base frame.

        Args:
            time: Seconds since J2000

        Returns:
            3x3 rotation matrix
        """
        pass

    def get_rotation_to_target_frame(self, time: float) -> np.ndarray:
        """Rotation matrix from base frame to target (body-fixed) frame."""
        return self.get_rotation_to_base_frame(time).T

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(base='{self.base_frame_orientation}', "
                f"target='{self.target_frame_orientation}')")


class SimpleRotationalEphemeris(RotationalEphemeris):
    """
    Constant rotation rate about the body-fixed z axis.

    R(t) = R_0 @ Rz(omega * (t - t_0)), the same z-axis rotation used for
    ECI/ECEF conversion with GMST.
    """

    def __init__(self, initial_orientation: np.ndarray, initial_time: float,
                 rotation_rate: float, base_frame_orientation: str,
                 target_frame_orientation: str):
        super().__init__(base_frame_orientation, target_frame_orientation)
        R_0 = np.asarray(initial_orientation, dtype=float)
        if R_0.shape != (3, 3):
            raise ValueError(f"Initial orientation must be 3x3, got {R_0.shape}")
        if not np.allclose(R_0 @ R_0.T, np.eye(3), atol=1e-8):
            raise ValueError("Initial orientation is not a rotation matrix")

        self.initial_orientation = R_0
        self.initial_time = initial_time
        self.rotation_rate = rotation_rate

    def get_rotation_to_base_frame(self, time: float) -> np.ndarray:
        angle = self.rotation_rate * (time - self.initial_time)
        c, s = np.cos(angle), np.sin(angle)
        R_z = np.array([
            [c, -s, 0],
            [s,  c, 0],
            [0,  0, 1]
        ])
        return self.initial_orientation @ R_z


class SynchronousRotationalEphemeris(RotationalEphemeris):
    """
    Tidally locked rotation.

    The body-fixed x axis points to the central body, z along the orbital
    angular momentum. Both states are looked up by name in the body
    collection when evaluated, so evaluation requires the global frame to be
    set up.
    """

    def __init__(self, body_name: str, central_body: str, bodies: Mapping[str, Body],
                 base_frame_orientation: str, target_frame_orientation: str):
        super().__init__(base_frame_orientation, target_frame_orientation)
        self.body_name = body_name
        self.central_body = central_body
        self._bodies = bodies

    def get_rotation_to_base_frame(self, time: float) -> np.ndarray:
        state = (self._bodies[self.body_name].get_state_in_base_frame_from_ephemeris(time)
                 - self._bodies[self.central_body].get_state_in_base_frame_from_ephemeris(time))
        r, v = state[:3], state[3:]

        x_axis = -r / np.linalg.norm(r)
        h = np.cross(r, v)
        z_axis = h / np.linalg.norm(h)
        y_axis = np.cross(z_axis, x_axis)

        return np.column_stack([x_axis, y_axis, z_axis])


def create_rotation_model(settings: RotationModelSettings, body: Body,
                          bodies: Mapping[str, Body]) -> RotationalEphemeris:
    """Create a rotational ephemeris from its settings."""
    target = settings.target_frame_orientation or f"IAU_{body.name}"

    if isinstance(settings, SimpleRotationModelSettings):
        return SimpleRotationalEphemeris(
            settings.initial_orientation, settings.initial_time, settings.rotation_rate,
            settings.base_frame_orientation, target)

    elif isinstance(settings, SynchronousRotationModelSettings):
        if body.ephemeris is None:
            raise ValueError("Synchronous rotation requires the body to have an ephemeris")
        if bodies[settings.central_body].ephemeris is None:
            raise ValueError(f"Synchronous rotation requires central body "
                             f"{settings.central_body} to have an ephemeris")
        return SynchronousRotationalEphemeris(
            body.name, settings.central_body, bodies,
            settings.base_frame_orientation, target)

    else:
        raise ValueError(f"Unknown rotation model settings type: {type(settings).__name__}")
