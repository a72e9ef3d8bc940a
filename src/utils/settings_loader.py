"""
Load body settings from a YAML environment description.

Example:

    global_frame:
      origin: SSB
      orientation: ECLIPJ2000
    bodies:
      - name: Earth
        ephemeris: {type: kepler, frame_origin: Sun, initial_kepler_elements: [...]}
        gravity_field: {type: central, gravitational_parameter: 3.986004418e14}
      - name: Moon
        ...

Each model entry has a `type` selecting the settings class; the remaining
keys are passed to it. Radiation pressure is a mapping source -> entry,
gravity field variations a list of entries.
"""

from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
import logging

import yaml
from astropy.time import Time

from core.models import BodySettings, EnvironmentSetupError
from environment.aerodynamics import (
    ConstantAerodynamicCoefficientSettings,
    TabulatedAerodynamicCoefficientSettings,
)
from environment.atmosphere import ExponentialAtmosphereSettings, TabulatedAtmosphereSettings
from environment.ephemeris import (
    ApproximateSunEphemerisSettings,
    ConstantEphemerisSettings,
    KeplerEphemerisSettings,
    TabulatedEphemerisSettings,
)
from environment.gravity import (
    BasicSolidBodyTideSettings,
    CentralGravityFieldSettings,
    MassRatioGravityFieldSettings,
    SphericalHarmonicsGravityFieldSettings,
)
from environment.radiation import CannonballRadiationPressureSettings
from environment.rotation import SimpleRotationModelSettings, SynchronousRotationModelSettings
from environment.shape import OblateSpheroidBodyShapeSettings, SphericalBodyShapeSettings

logger = logging.getLogger(__name__)

J2000_EPOCH = Time(2451545.0, format='jd', scale='tdb')

# YAML key -> (BodySettings field, {type name -> settings class})
MODEL_TYPES = {
    'ephemeris': ('ephemeris_settings', {
        'constant': ConstantEphemerisSettings,
        'kepler': KeplerEphemerisSettings,
        'tabulated': TabulatedEphemerisSettings,
        'approximate_sun': ApproximateSunEphemerisSettings,
    }),
    'rotation_model': ('rotation_model_settings', {
        'simple': SimpleRotationModelSettings,
        'synchronous': SynchronousRotationModelSettings,
    }),
    'gravity_field': ('gravity_field_settings', {
        'central': CentralGravityFieldSettings,
        'mass_ratio': MassRatioGravityFieldSettings,
        'spherical_harmonic': SphericalHarmonicsGravityFieldSettings,
    }),
    'shape_model': ('shape_model_settings', {
        'spherical': SphericalBodyShapeSettings,
        'oblate_spheroid': OblateSpheroidBodyShapeSettings,
    }),
    'atmosphere': ('atmosphere_settings', {
        'exponential': ExponentialAtmosphereSettings,
        'tabulated': TabulatedAtmosphereSettings,
    }),
    'aerodynamic_coefficients': ('aerodynamic_coefficient_settings', {
        'constant': ConstantAerodynamicCoefficientSettings,
        'tabulated': TabulatedAerodynamicCoefficientSettings,
    }),
    'radiation_pressure': ('radiation_pressure_settings', {
        'cannonball': CannonballRadiationPressureSettings,
    }),
    'gravity_field_variations': ('gravity_field_variation_settings', {
        'solid_body_tide': BasicSolidBodyTideSettings,
    }),
}

# Settings fields holding epochs, which may be given as date strings
EPOCH_FIELDS = ('epoch_of_initial_state', 'initial_time')


class SettingsLoadError(EnvironmentSetupError):
    """Raised when an environment description cannot be turned into settings."""
    pass


@dataclass
class EnvironmentConfig:
    """Global frame and body settings read from an environment description."""
    global_frame_origin: str
    global_frame_orientation: str
    body_settings: Mapping[str, BodySettings]


def epoch_to_seconds_since_j2000(value: Any) -> float:
    """
    Convert an epoch to seconds since J2000 (TDB).

    Args:
        value: Seconds since J2000, or a date string (e.g. "2025-01-01T00:00:00"),
            interpreted in TDB

    Returns:
        Seconds since J2000
    """
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float((Time(value, scale='tdb') - J2000_EPOCH).sec)
    except ValueError as e:
        raise SettingsLoadError(f"Invalid epoch {value!r}: {e}") from e


def _parse_model(body_name: str, key: str, entry: Any):
    """Build one settings object from its {type: ..., **params} entry."""
    types = MODEL_TYPES[key][1]
    if not isinstance(entry, dict) or 'type' not in entry:
        raise SettingsLoadError(
            f"Body {body_name}: {key} entry must be a mapping with a 'type' key")

    params = dict(entry)
    type_name = params.pop('type')
    if type_name not in types:
        raise SettingsLoadError(
            f"Body {body_name}: unknown {key} type '{type_name}' "
            f"(available: {', '.join(sorted(types))})")

    settings_class = types[type_name]
    known = {f.name for f in fields(settings_class)}
    unknown = sorted(set(params) - known)
    if unknown:
        raise SettingsLoadError(
            f"Body {body_name}: unknown parameters for {key} type '{type_name}': "
            f"{', '.join(unknown)}")

    for name in EPOCH_FIELDS:
        if name in params:
            params[name] = epoch_to_seconds_since_j2000(params[name])

    return settings_class(**params)


def parse_body_settings(body_name: str, entry: Dict[str, Any]) -> BodySettings:
    """
    Build the settings of one body from its description.

    Args:
        body_name: Name of the body (for error messages)
        entry: Body description, without the name

    Returns:
        BodySettings
    """
    unknown = sorted(set(entry) - set(MODEL_TYPES))
    if unknown:
        raise SettingsLoadError(f"Body {body_name}: unknown keys {', '.join(unknown)}")

    kwargs = {}
    for key, value in entry.items():
        field_name = MODEL_TYPES[key][0]
        if value is None:
            continue
        if key == 'radiation_pressure':
            if not isinstance(value, dict):
                raise SettingsLoadError(
                    f"Body {body_name}: radiation_pressure must map source body to settings")
            kwargs[field_name] = {source: _parse_model(body_name, key, item)
                                  for source, item in value.items()}
        elif key == 'gravity_field_variations':
            if not isinstance(value, list):
                raise SettingsLoadError(
                    f"Body {body_name}: gravity_field_variations must be a list")
            kwargs[field_name] = [_parse_model(body_name, key, item) for item in value]
        else:
            kwargs[field_name] = _parse_model(body_name, key, value)

    return BodySettings(**kwargs)


def parse_environment_config(data: Dict[str, Any]) -> EnvironmentConfig:
    """Build an EnvironmentConfig from an already parsed description."""
    if not isinstance(data, dict):
        raise SettingsLoadError("Environment description must be a mapping")

    frame = data.get('global_frame') or {}
    if not isinstance(frame, dict):
        raise SettingsLoadError("global_frame must be a mapping with origin and orientation")
    origin: Optional[str] = frame.get('origin')
    orientation: Optional[str] = frame.get('orientation')
    if not origin or not orientation:
        raise SettingsLoadError("global_frame must define both origin and orientation")

    bodies = data.get('bodies')
    if not isinstance(bodies, list) or not bodies:
        raise SettingsLoadError("bodies must be a non-empty list")

    body_settings: Dict[str, BodySettings] = {}
    for entry in bodies:
        if not isinstance(entry, dict) or 'name' not in entry:
            raise SettingsLoadError(f"Body entry without a name: {entry!r}")
        entry = dict(entry)
        name = str(entry.pop('name'))
        if name in body_settings:
            raise SettingsLoadError(f"Body {name} is defined more than once")
        body_settings[name] = parse_body_settings(name, entry)

    logger.info(f"Loaded settings for {len(body_settings)} bodies, "
                f"global frame ({origin}, {orientation})")

    return EnvironmentConfig(origin, orientation, MappingProxyType(body_settings))


def load_environment_config(path: str) -> EnvironmentConfig:
    """
    Load an environment description from a YAML file.

    Args:
        path: YAML file path

    Returns:
        EnvironmentConfig with a read-only settings store
    """
    with open(path, 'r') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsLoadError(f"Cannot parse {path}: {e}") from e

    return parse_environment_config(data)
