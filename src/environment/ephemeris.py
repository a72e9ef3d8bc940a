"""
Translational ephemeris models and their factory.

An ephemeris gives the Cartesian state of a body w.r.t. its frame origin,
expressed in its frame orientation. Time is in seconds since J2000.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
import logging

import numpy as np
from scipy.interpolate import CubicSpline
from scipy.optimize import newton

from core.models import Body, EphemerisSettings

logger = logging.getLogger(__name__)

AU = 149597870700.0  # m
SECONDS_PER_JULIAN_CENTURY = 36525.0 * 86400.0


@dataclass
class ConstantEphemerisSettings(EphemerisSettings):
    """Body at a fixed state w.r.t. its frame origin."""
    constant_state: List[float] = field(default_factory=lambda: [0.0] * 6)


@dataclass
class KeplerEphemerisSettings(EphemerisSettings):
    """
    Unperturbed elliptic orbit around the frame origin.

    Elements are [a (m), e, i, argument of periapsis, RAAN, true anomaly],
    angles in radians. If no gravitational parameter is given, that of the
    frame origin body's gravity field is used.
    """
    initial_kepler_elements: List[float] = field(default_factory=lambda: [0.0] * 6)
    epoch_of_initial_state: float = 0.0
    central_body_gravitational_parameter: Optional[float] = None


@dataclass
class TabulatedEphemerisSettings(EphemerisSettings):
    """Ephemeris from a table of states, time (s) -> state."""
    body_state_history: Dict[float, List[float]] = field(default_factory=dict)


@dataclass
class ApproximateSunEphemerisSettings(EphemerisSettings):
    """Low-precision analytical position of the Sun w.r.t. Earth."""
    frame_origin: str = "Earth"
    frame_orientation: str = "J2000"


class Ephemeris(ABC):
    """Abstract interface for translational ephemerides."""

    def __init__(self, reference_frame_origin: str, reference_frame_orientation: str):
        self.reference_frame_origin = reference_frame_origin
        self.reference_frame_orientation = reference_frame_orientation

    @abstractmethod
    def get_cartesian_state(self, time: float) -> np.ndarray:
        """
        Cartesian state at the given time.

        Args:
            time: Seconds since J2000

        Returns:
            [x, y, z, vx, vy, vz] (m, m/s) w.r.t. reference_frame_origin
        """
        pass

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(origin='{self.reference_frame_origin}', "
                f"orientation='{self.reference_frame_orientation}')")


class ConstantEphemeris(Ephemeris):
    """Ephemeris returning the same state at all times."""

    def __init__(self, constant_state: np.ndarray, reference_frame_origin: str = "SSB",
                 reference_frame_orientation: str = "ECLIPJ2000"):
        super().__init__(reference_frame_origin, reference_frame_orientation)
        self.constant_state = np.asarray(constant_state, dtype=float)
        if self.constant_state.shape != (6,):
            raise ValueError(f"Constant state must have 6 entries, got {self.constant_state.shape}")

    def get_cartesian_state(self, time: float) -> np.ndarray:
        return self.constant_state.copy()


class KeplerEphemeris(Ephemeris):
    """
    Two-body Kepler orbit.

    Propagates the mean anomaly linearly from the initial epoch and solves
    Kepler's equation with Newton-Raphson. Only elliptic orbits are supported.
    """

    def __init__(self, initial_kepler_elements: np.ndarray, epoch_of_initial_state: float,
                 gravitational_parameter: float, reference_frame_origin: str = "SSB",
                 reference_frame_orientation: str = "ECLIPJ2000"):
        super().__init__(reference_frame_origin, reference_frame_orientation)

        elements = np.asarray(initial_kepler_elements, dtype=float)
        if elements.shape != (6,):
            raise ValueError(f"Kepler elements must have 6 entries, got {elements.shape}")
        if not 0.0 <= elements[1] < 1.0:
            raise ValueError(f"Only elliptic orbits are supported, got e={elements[1]}")
        if elements[0] <= 0.0:
            raise ValueError(f"Semi-major axis must be positive, got {elements[0]}")
        if gravitational_parameter <= 0.0:
            raise ValueError(f"Gravitational parameter must be positive, got {gravitational_parameter}")

        self.elements = elements
        self.epoch = epoch_of_initial_state
        self.mu = gravitational_parameter

        a, e = elements[0], elements[1]
        self.mean_motion = np.sqrt(self.mu / a**3)

        # Initial mean anomaly from true anomaly
        nu_0 = elements[5]
        E_0 = 2.0 * np.arctan2(np.sqrt(1 - e) * np.sin(nu_0 / 2),
                               np.sqrt(1 + e) * np.cos(nu_0 / 2))
        self.mean_anomaly_0 = E_0 - e * np.sin(E_0)

        # Perifocal to reference frame rotation: Rz(RAAN) Rx(i) Rz(omega)
        self.rotation = (self._rot_z(elements[4]) @ self._rot_x(elements[2])
                         @ self._rot_z(elements[3]))

    def get_cartesian_state(self, time: float) -> np.ndarray:
        a, e = self.elements[0], self.elements[1]

        M = self.mean_anomaly_0 + self.mean_motion * (time - self.epoch)
        E = newton(lambda E: E - e * np.sin(E) - M, M,
                   fprime=lambda E: 1 - e * np.cos(E), tol=1e-12, maxiter=100)
        nu = 2.0 * np.arctan2(np.sqrt(1 + e) * np.sin(E / 2),
                              np.sqrt(1 - e) * np.cos(E / 2))

        p = a * (1 - e**2)
        r = p / (1 + e * np.cos(nu))

        r_pf = r * np.array([np.cos(nu), np.sin(nu), 0.0])
        v_pf = np.sqrt(self.mu / p) * np.array([-np.sin(nu), e + np.cos(nu), 0.0])

        return np.concatenate([self.rotation @ r_pf, self.rotation @ v_pf])

    @staticmethod
    def _rot_x(angle: float) -> np.ndarray:
        c, s = np.cos(angle), np.sin(angle)
        return np.array([[1, 0, 0], [0, c, -s], [0, s, c]])

    @staticmethod
    def _rot_z(angle: float) -> np.ndarray:
        c, s = np.cos(angle), np.sin(angle)
        return np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]])


class TabulatedEphemeris(Ephemeris):
    """Cubic spline through a table of states."""

    def __init__(self, state_history: Dict[float, np.ndarray], reference_frame_origin: str = "SSB",
                 reference_frame_orientation: str = "ECLIPJ2000"):
        super().__init__(reference_frame_origin, reference_frame_orientation)
        if len(state_history) < 2:
            raise ValueError("Tabulated ephemeris needs at least two states")

        times = np.array(sorted(state_history), dtype=float)
        states = np.array([state_history[t] for t in sorted(state_history)], dtype=float)
        if states.shape[1] != 6:
            raise ValueError(f"Tabulated states must have 6 entries, got {states.shape[1]}")

        self.start_time = times[0]
        self.end_time = times[-1]
        self._spline = CubicSpline(times, states, axis=0)

    def get_cartesian_state(self, time: float) -> np.ndarray:
        if time < self.start_time or time > self.end_time:
            logger.warning(f"Tabulated ephemeris evaluated at t={time:.1f} s, outside "
                           f"[{self.start_time:.1f}, {self.end_time:.1f}] s")
        return self._spline(time)


class ApproximateSunEphemeris(Ephemeris):
    """
    Analytical geocentric Sun position.

    Implements Meeus "Astronomical Algorithms" (1998) Chapter 25, low
    accuracy version (~0.01 deg). Velocity from a central difference.
    """

    FINITE_DIFFERENCE_STEP = 60.0  # s

    def __init__(self, reference_frame_origin: str = "Earth",
                 reference_frame_orientation: str = "J2000"):
        if reference_frame_orientation not in ("J2000", "ECLIPJ2000"):
            raise ValueError(
                f"Approximate Sun ephemeris is available in J2000 or ECLIPJ2000, "
                f"not {reference_frame_orientation}")
        super().__init__(reference_frame_origin, reference_frame_orientation)

    def get_cartesian_state(self, time: float) -> np.ndarray:
        h = self.FINITE_DIFFERENCE_STEP
        position = self._position(time)
        velocity = (self._position(time + h) - self._position(time - h)) / (2 * h)
        return np.concatenate([position, velocity])

    def _position(self, time: float) -> np.ndarray:
        # Julian centuries from J2000.0
        T = time / SECONDS_PER_JULIAN_CENTURY

        # Mean longitude and mean anomaly (degrees)
        L0 = (280.46646 + 36000.76983 * T + 0.0003032 * T**2) % 360.0
        M = (357.52911 + 35999.05029 * T - 0.0001537 * T**2) % 360.0
        M_rad = np.deg2rad(M)

        # Equation of center (degrees)
        C = ((1.914602 - 0.004817 * T - 0.000014 * T**2) * np.sin(M_rad) +
             (0.019993 - 0.000101 * T) * np.sin(2 * M_rad) +
             0.000289 * np.sin(3 * M_rad))

        true_longitude_rad = np.deg2rad(L0 + C)

        e = 0.016708634 - 0.000042037 * T - 0.0000001267 * T**2
        nu_rad = np.deg2rad(M + C)
        R = AU * (1.000001018 * (1 - e**2)) / (1 + e * np.cos(nu_rad))

        x_ecl = R * np.cos(true_longitude_rad)
        y_ecl = R * np.sin(true_longitude_rad)

        if self.reference_frame_orientation == "ECLIPJ2000":
            return np.array([x_ecl, y_ecl, 0.0])

        # Ecliptic to equatorial, obliquity from the IAU formula
        epsilon = np.deg2rad(23.439291 - 0.0130042 * T - 1.64e-7 * T**2 + 5.04e-7 * T**3)
        return np.array([x_ecl, y_ecl * np.cos(epsilon), y_ecl * np.sin(epsilon)])


def create_ephemeris(settings: EphemerisSettings, body: Body,
                     bodies: Mapping[str, Body]) -> Ephemeris:
    """
    Create an ephemeris from its settings.

    Args:
        settings: Ephemeris settings
        body: Body the ephemeris is created for
        bodies: Bodies created so far

    Returns:
        Ephemeris model
    """
    origin = settings.frame_origin
    orientation = settings.frame_orientation

    if isinstance(settings, ConstantEphemerisSettings):
        return ConstantEphemeris(settings.constant_state, origin, orientation)

    elif isinstance(settings, KeplerEphemerisSettings):
        mu = settings.central_body_gravitational_parameter
        if mu is None:
            central_body = bodies.get(origin)
            if central_body is None or central_body.gravity_field is None:
                raise ValueError(
                    f"No gravitational parameter given and frame origin {origin} "
                    f"has no gravity field to take it from")
            mu = central_body.gravity_field.gravitational_parameter
        return KeplerEphemeris(settings.initial_kepler_elements,
                               settings.epoch_of_initial_state, mu, origin, orientation)

    elif isinstance(settings, TabulatedEphemerisSettings):
        return TabulatedEphemeris(settings.body_state_history, origin, orientation)

    elif isinstance(settings, ApproximateSunEphemerisSettings):
        return ApproximateSunEphemeris(origin, orientation)

    else:
        raise ValueError(f"Unknown ephemeris settings type: {type(settings).__name__}")
