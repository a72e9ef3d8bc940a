"""Core body models, creation order, assembly and global frame setup."""

from .models import Body, BodySettings, BaseStateInterface, EnvironmentSetupError
from .ordering import (
    determine_body_creation_order,
    CyclicDependencyError,
    UnresolvedReferenceError,
)
from .frames import (
    set_global_frame_body_ephemerides,
    FrameOriginError,
    FrameOrientationError,
)
from .assembly import (
    create_bodies,
    create_environment,
    ModelFactories,
    ModelConstructionError,
    DuplicateBodyError,
)

__all__ = [
    'Body',
    'BodySettings',
    'BaseStateInterface',
    'EnvironmentSetupError',
    'determine_body_creation_order',
    'CyclicDependencyError',
    'UnresolvedReferenceError',
    'set_global_frame_body_ephemerides',
    'FrameOriginError',
    'FrameOrientationError',
    'create_bodies',
    'create_environment',
    'ModelFactories',
    'ModelConstructionError',
    'DuplicateBodyError',
]
