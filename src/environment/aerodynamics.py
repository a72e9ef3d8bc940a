"""
Aerodynamic coefficient interfaces and their factory.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence
import logging

import numpy as np
from scipy.interpolate import RegularGridInterpolator

from core.models import AerodynamicCoefficientSettings, Body

logger = logging.getLogger(__name__)


@dataclass
class ConstantAerodynamicCoefficientSettings(AerodynamicCoefficientSettings):
    """Force coefficients [C_D, C_S, C_L] independent of flight conditions."""
    force_coefficients: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])


@dataclass
class TabulatedAerodynamicCoefficientSettings(AerodynamicCoefficientSettings):
    """
    Force coefficients tabulated on a regular grid.

    force_coefficients has shape (len(grid_0), ..., len(grid_n), 3).
    """
    independent_variable_names: List[str] = field(
        default_factory=lambda: ['mach_number', 'angle_of_attack'])
    independent_variable_grids: List[List[float]] = field(default_factory=list)
    force_coefficients: List = field(default_factory=list)


class ConstantAerodynamicCoefficientInterface:
    """Aerodynamic coefficients that do not vary."""

    def __init__(self, reference_area: float, force_coefficients: Sequence[float]):
        if reference_area <= 0.0:
            raise ValueError(f"Reference area must be positive, got {reference_area}")
        coefficients = np.asarray(force_coefficients, dtype=float)
        if coefficients.shape != (3,):
            raise ValueError(f"Expected 3 force coefficients, got {coefficients.shape}")
        self.reference_area = reference_area
        self.independent_variable_names: List[str] = []
        self._coefficients = coefficients

    def get_force_coefficients(self, *independent_variables: float) -> np.ndarray:
        return self._coefficients.copy()


class TabulatedAerodynamicCoefficientInterface:
    """
    Aerodynamic coefficients interpolated (linearly) on a regular grid.

    Outside the grid, values are extrapolated from the nearest cells.
    """

    def __init__(self, reference_area: float, independent_variable_names: List[str],
                 grids: List[List[float]], force_coefficients):
        if reference_area <= 0.0:
            raise ValueError(f"Reference area must be positive, got {reference_area}")
        if len(grids) != len(independent_variable_names):
            raise ValueError(f"Got {len(grids)} grids for "
                             f"{len(independent_variable_names)} independent variables")

        grid_arrays = tuple(np.asarray(g, dtype=float) for g in grids)
        values = np.asarray(force_coefficients, dtype=float)
        expected = tuple(len(g) for g in grid_arrays) + (3,)
        if values.shape != expected:
            raise ValueError(f"Coefficient table has shape {values.shape}, expected {expected}")

        self.reference_area = reference_area
        self.independent_variable_names = list(independent_variable_names)
        self._interpolator = RegularGridInterpolator(
            grid_arrays, values, bounds_error=False, fill_value=None)

    def get_force_coefficients(self, *independent_variables: float) -> np.ndarray:
        """Force coefficients [C_D, C_S, C_L] at the given independent variables."""
        if len(independent_variables) != len(self.independent_variable_names):
            raise ValueError(f"Expected values for {self.independent_variable_names}")
        return self._interpolator(np.array([independent_variables], dtype=float))[0]


def create_aerodynamic_coefficient_interface(settings: AerodynamicCoefficientSettings,
                                             body: Body, bodies: Mapping[str, Body]):
    """Create an aerodynamic coefficient interface from its settings."""
    if isinstance(settings, ConstantAerodynamicCoefficientSettings):
        return ConstantAerodynamicCoefficientInterface(
            settings.reference_area, settings.force_coefficients)
    elif isinstance(settings, TabulatedAerodynamicCoefficientSettings):
        return TabulatedAerodynamicCoefficientInterface(
            settings.reference_area, settings.independent_variable_names,
            settings.independent_variable_grids, settings.force_coefficients)
    else:
        raise ValueError(
            f"Unknown aerodynamic coefficient settings type: {type(settings).__name__}")
