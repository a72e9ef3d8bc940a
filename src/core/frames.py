"""
Global reference frame consistency across an assembled set of bodies.

Every ephemeris and rotation model reports the frame it is expressed in. For
a simulation to be consistent, all of them have to agree on one global
origin and orientation. Origin mismatches can be repaired when the origin is
itself a body (a frame-transform function is installed); orientation
mismatches cannot.
"""

from typing import Callable, Dict, List, Mapping, Tuple
import logging
import numpy as np

from .models import BaseStateInterface, Body, EnvironmentSetupError

logger = logging.getLogger(__name__)

CONSISTENT = 'consistent'
REPAIRED = 'repaired'


class FrameOriginError(EnvironmentSetupError):
    """Raised when a body's ephemeris origin cannot be related to the global origin."""

    def __init__(self, body_name: str, frame_origin: str, global_frame_origin: str,
                 reason: str = "no such body exists"):
        self.body_name = body_name
        self.frame_origin = frame_origin
        self.global_frame_origin = global_frame_origin
        super().__init__(
            f"Error, body {body_name} has ephemeris in frame {frame_origin}, "
            f"but no conversion to frame {global_frame_origin} can be made "
            f"({reason})"
        )


class FrameOrientationError(EnvironmentSetupError):
    """Raised when a model's orientation differs from the global orientation."""

    def __init__(self, body_name: str, frame_orientation: str,
                 global_frame_orientation: str, model_kind: str):
        self.body_name = body_name
        self.frame_orientation = frame_orientation
        self.global_frame_orientation = global_frame_orientation
        self.model_kind = model_kind
        super().__init__(
            f"Error, {model_kind} orientation of body {body_name} is not the "
            f"same as global orientation: {frame_orientation}, "
            f"{global_frame_orientation}"
        )


def _ephemeris_state_function(bodies: Mapping[str, Body],
                              origin: str) -> Callable[[float], np.ndarray]:
    """Forward the raw ephemeris state of the origin body, looked up by name."""
    def state_function(time: float) -> np.ndarray:
        return bodies[origin].ephemeris.get_cartesian_state(time)
    return state_function


def set_global_frame_body_ephemerides(bodies: Mapping[str, Body],
                                      global_frame_origin: str,
                                      global_frame_orientation: str) -> Dict[str, str]:
    """
    Check and repair the frames of all bodies against the global frame.

    Bodies are processed in sorted name order, so the first reported error
    does not depend on how the collection was built. For each body with an
    ephemeris, an origin that differs from the global origin but names another
    body gets a single-hop transform forwarding that body's ephemeris state.
    All checks are done before anything is installed: on error, no body is
    modified.

    Args:
        bodies: Assembled bodies, name -> Body
        global_frame_origin: Global reference frame origin
        global_frame_orientation: Global reference frame orientation

    Returns:
        Outcome per checked body: 'consistent' or 'repaired'

    Raises:
        FrameOriginError: ephemeris origin is neither global nor a usable body
        FrameOrientationError: ephemeris or rotation model orientation differs
            from the global orientation
    """
    outcomes: Dict[str, str] = {}
    installs: List[Tuple[Body, BaseStateInterface]] = []

    for name in sorted(bodies):
        body = bodies[name]

        if body.ephemeris is not None:
            outcomes[name] = CONSISTENT
            origin = body.ephemeris.reference_frame_origin

            if origin != global_frame_origin:
                if origin not in bodies:
                    raise FrameOriginError(name, origin, global_frame_origin)
                if bodies[origin].ephemeris is None:
                    raise FrameOriginError(name, origin, global_frame_origin,
                                           reason=f"body {origin} has no ephemeris")

                current = body.ephemeris_frame_to_base_frame
                if current is not None and current.base_frame_id != origin:
                    raise FrameOriginError(
                        name, origin, global_frame_origin,
                        reason=f"a transform from {current.base_frame_id} is already set")
                if current is None:
                    installs.append((body, BaseStateInterface(
                        origin, _ephemeris_state_function(bodies, origin))))
                    outcomes[name] = REPAIRED

            orientation = body.ephemeris.reference_frame_orientation
            if orientation != global_frame_orientation:
                raise FrameOrientationError(name, orientation,
                                            global_frame_orientation, 'ephemeris')

        if body.rotational_ephemeris is not None:
            outcomes.setdefault(name, CONSISTENT)
            base_orientation = body.rotational_ephemeris.base_frame_orientation
            if base_orientation != global_frame_orientation:
                raise FrameOrientationError(name, base_orientation,
                                            global_frame_orientation, 'rotation model')

    for body, interface in installs:
        body.set_ephemeris_frame_to_base_frame(interface)
        logger.debug(f"Installed frame transform {interface.base_frame_id} -> "
                     f"{global_frame_origin} for body {body.name}")

    logger.info(
        f"Global frame ({global_frame_origin}, {global_frame_orientation}) set for "
        f"{len(outcomes)} bodies, {len(installs)} origin transforms installed"
    )

    return outcomes
