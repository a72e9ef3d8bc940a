"""Environment models and the default factories used to create bodies."""

from core.assembly import ModelFactories

from .ephemeris import create_ephemeris
from .rotation import create_rotation_model
from .gravity import create_gravity_field, create_gravity_field_variation
from .shape import create_body_shape_model
from .atmosphere import create_atmosphere_model
from .aerodynamics import create_aerodynamic_coefficient_interface
from .radiation import create_radiation_pressure_interface


def default_model_factories() -> ModelFactories:
    """Factories for the model types defined in this package."""
    return ModelFactories(
        ephemeris=create_ephemeris,
        rotation_model=create_rotation_model,
        shape_model=create_body_shape_model,
        gravity_field=create_gravity_field,
        gravity_field_variation=create_gravity_field_variation,
        atmosphere=create_atmosphere_model,
        aerodynamic_coefficients=create_aerodynamic_coefficient_interface,
        radiation_pressure=create_radiation_pressure_interface,
    )


__all__ = [
    'default_model_factories',
    'create_ephemeris',
    'create_rotation_model',
    'create_gravity_field',
    'create_gravity_field_variation',
    'create_body_shape_model',
    'create_atmosphere_model',
    'create_aerodynamic_coefficient_interface',
    'create_radiation_pressure_interface',
]
