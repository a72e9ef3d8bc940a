"""
Creation order of interdependent bodies.

Some environment models are defined relative to other bodies (ephemeris
origins, central bodies, radiation sources, deforming bodies). Those bodies
have to exist before the models referring to them can be built.
"""

from typing import Dict, Iterable, List, Mapping, Tuple
import logging

from .models import BodySettings, EnvironmentSetupError

logger = logging.getLogger(__name__)


class CyclicDependencyError(EnvironmentSetupError):
    """Raised when body settings refer to each other in a cycle."""

    def __init__(self, cycle: List[str], field: str = ""):
        self.cycle = list(cycle)
        self.field = field
        if len(self.cycle) == 2 and self.cycle[0] == self.cycle[1]:
            message = f"Error, body {self.cycle[0]} references itself as its own {field}"
        else:
            message = ("Error, cyclic dependency between bodies: "
                       + " -> ".join(self.cycle))
        super().__init__(message)


class UnresolvedReferenceError(EnvironmentSetupError):
    """Raised when body settings refer to a body that does not exist."""

    def __init__(self, body_name: str, missing_name: str, field: str):
        self.body_name = body_name
        self.missing_name = missing_name
        self.field = field
        super().__init__(
            f"Error, body {body_name} requires body {missing_name} "
            f"({field}), but no such body is defined"
        )


def determine_body_creation_order(
        body_settings: Mapping[str, BodySettings],
        available_bodies: Iterable[str] = ()) -> List[Tuple[str, BodySettings]]:
    """
    Order body settings so that every body comes after the bodies it needs.

    Bodies are visited in input order and their dependencies in declaration
    order (depth-first, post-order), so the result is deterministic. Any
    valid topological order would do; this one keeps unrelated bodies in
    their input order.

    Args:
        body_settings: Settings store, body name -> settings
        available_bodies: Names that may be referenced without being part of
            the store (e.g. the global frame origin). They impose no ordering.

    Returns:
        List of (name, settings) pairs in creation order

    Raises:
        UnresolvedReferenceError: a dependency is neither in the store nor available
        CyclicDependencyError: the dependency graph is not acyclic
    """
    available = set(available_bodies)

    # Resolve all edges up front so that missing references are reported
    # before any ordering work.
    edges: Dict[str, List[Tuple[str, str]]] = {}
    for name, settings in body_settings.items():
        edges[name] = []
        for dependency, field in settings.dependencies():
            if dependency == name:
                raise CyclicDependencyError([name, name], field)
            if dependency in body_settings:
                edges[name].append((dependency, field))
            elif dependency not in available:
                raise UnresolvedReferenceError(name, dependency, field)

    order: List[Tuple[str, BodySettings]] = []
    done = set()
    path: List[str] = []

    for root in body_settings:
        if root in done:
            continue

        # Explicit stack of (name, remaining edges); path mirrors the names on it
        path.append(root)
        stack = [(root, iter(edges[root]))]
        while stack:
            name, remaining = stack[-1]
            for dependency, _ in remaining:
                if dependency in done:
                    continue
                if dependency in path:
                    raise CyclicDependencyError(path[path.index(dependency):] + [dependency])
                path.append(dependency)
                stack.append((dependency, iter(edges[dependency])))
                break
            else:
                stack.pop()
                path.pop()
                done.add(name)
                order.append((name, body_settings[name]))

    logger.info(f"Body creation order: {', '.join(name for name, _ in order)}")

    return order
