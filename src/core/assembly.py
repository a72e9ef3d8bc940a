"""
Assembly of bodies from ordered settings.

Bodies are built one at a time, in creation order, by handing each model's
settings to the factory for its kind. Frame consistency is not checked here;
see frames.set_global_frame_body_ephemerides.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple
import logging

from .models import Body, BodySettings, EnvironmentSetupError
from .ordering import determine_body_creation_order
from .frames import set_global_frame_body_ephemerides

logger = logging.getLogger(__name__)

# (settings, body under construction, read-only view of created bodies) -> model
ModelFactory = Callable[[Any, Body, Mapping[str, Body]], Any]


class ModelConstructionError(EnvironmentSetupError):
    """Raised when an environment model of a body cannot be created."""

    def __init__(self, body_name: str, model_kind: str, reason: str):
        self.body_name = body_name
        self.model_kind = model_kind
        super().__init__(
            f"Error when creating {model_kind} of body {body_name}: {reason}"
        )


class DuplicateBodyError(EnvironmentSetupError):
    """Raised when two bodies with the same name are to be created."""

    def __init__(self, body_name: str):
        self.body_name = body_name
        super().__init__(f"Error, body {body_name} is defined more than once")


@dataclass
class ModelFactories:
    """
    Per-kind model factories used to build bodies.

    The radiation pressure factory additionally receives the name of the
    source body: (settings, body, source_name, bodies).
    """
    ephemeris: ModelFactory
    rotation_model: ModelFactory
    shape_model: ModelFactory
    gravity_field: ModelFactory
    gravity_field_variation: ModelFactory
    atmosphere: ModelFactory
    aerodynamic_coefficients: ModelFactory
    radiation_pressure: Callable[[Any, Body, str, Mapping[str, Body]], Any]


def _build_model(body: Body, model_kind: str, factory: Callable, *args) -> Any:
    """Call a model factory, turning any failure into a ModelConstructionError."""
    try:
        model = factory(*args)
    except ModelConstructionError:
        raise
    except Exception as e:
        raise ModelConstructionError(body.name, model_kind, str(e)) from e

    logger.debug(f"Created {model_kind} of body {body.name}: {type(model).__name__}")
    return model


def create_body(name: str, settings: BodySettings, factories: ModelFactories,
                bodies: Mapping[str, Body]) -> Body:
    """
    Create a single body from its settings.

    Models are created in a fixed order (ephemeris, rotation, shape, gravity
    field, gravity field variations, atmosphere, aerodynamics, radiation
    pressure) so that later models can use earlier ones of the same body.

    Args:
        name: Body name
        settings: Settings of the body
        factories: Model factories
        bodies: Read-only view of the bodies created so far

    Returns:
        The new body
    """
    body = Body(name=name)

    if settings.ephemeris_settings is not None:
        body.ephemeris = _build_model(
            body, 'ephemeris', factories.ephemeris,
            settings.ephemeris_settings, body, bodies)

    if settings.rotation_model_settings is not None:
        body.rotational_ephemeris = _build_model(
            body, 'rotation model', factories.rotation_model,
            settings.rotation_model_settings, body, bodies)

    if settings.shape_model_settings is not None:
        body.shape_model = _build_model(
            body, 'shape model', factories.shape_model,
            settings.shape_model_settings, body, bodies)

    if settings.gravity_field_settings is not None:
        body.gravity_field = _build_model(
            body, 'gravity field', factories.gravity_field,
            settings.gravity_field_settings, body, bodies)

    for variation_settings in settings.gravity_field_variation_settings:
        body.gravity_field_variations.append(_build_model(
            body, 'gravity field variation', factories.gravity_field_variation,
            variation_settings, body, bodies))

    if settings.atmosphere_settings is not None:
        body.atmosphere_model = _build_model(
            body, 'atmosphere model', factories.atmosphere,
            settings.atmosphere_settings, body, bodies)

    if settings.aerodynamic_coefficient_settings is not None:
        body.aerodynamic_coefficient_interface = _build_model(
            body, 'aerodynamic coefficients', factories.aerodynamic_coefficients,
            settings.aerodynamic_coefficient_settings, body, bodies)

    for source, radiation_settings in settings.radiation_pressure_settings.items():
        body.radiation_pressure_interfaces[source] = _build_model(
            body, f'radiation pressure interface (source {source})',
            factories.radiation_pressure, radiation_settings, body, source, bodies)

    return body


def create_bodies(ordered_body_settings: Sequence[Tuple[str, BodySettings]],
                  factories: Optional[ModelFactories] = None) -> Dict[str, Body]:
    """
    Create all bodies from settings in creation order.

    Construction stops at the first failing model. The collection is only
    returned once every body has been created, so a failed run leaves nothing
    half-built behind.

    Args:
        ordered_body_settings: (name, settings) pairs, as returned by
            determine_body_creation_order
        factories: Model factories (default: environment.default_model_factories())

    Returns:
        Dict of created bodies, name -> Body

    Raises:
        DuplicateBodyError: a name occurs more than once
        ModelConstructionError: a model factory failed
    """
    if factories is None:
        from environment import default_model_factories
        factories = default_model_factories()

    bodies: Dict[str, Body] = {}
    view = MappingProxyType(bodies)

    for name, settings in ordered_body_settings:
        if name in bodies:
            raise DuplicateBodyError(name)
        bodies[name] = create_body(name, settings, factories, view)

    logger.info(f"Created {len(bodies)} bodies")

    return bodies


def create_environment(body_settings: Mapping[str, BodySettings],
                       global_frame_origin: str,
                       global_frame_orientation: str,
                       factories: Optional[ModelFactories] = None) -> Dict[str, Body]:
    """
    Resolve creation order, create all bodies and set the global frame.

    The three phases run strictly one after the other; reconciliation only
    starts once every body exists.

    Args:
        body_settings: Settings store, body name -> settings
        global_frame_origin: Global reference frame origin
        global_frame_orientation: Global reference frame orientation
        factories: Model factories (default: environment.default_model_factories())

    Returns:
        Dict of created bodies with consistent frames
    """
    order = determine_body_creation_order(
        body_settings, available_bodies=[global_frame_origin])
    bodies = create_bodies(order, factories)
    set_global_frame_body_ephemerides(
        bodies, global_frame_origin, global_frame_orientation)
    return bodies
