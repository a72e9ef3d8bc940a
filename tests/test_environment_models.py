"""
Tests for the environment models behind the default factories.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from core.models import Body, EphemerisSettings
from environment.aerodynamics import (
    ConstantAerodynamicCoefficientInterface,
    TabulatedAerodynamicCoefficientInterface,
)
from environment.atmosphere import ExponentialAtmosphere, TabulatedAtmosphere, TabulatedAtmosphereSettings
from environment.ephemeris import (
    ApproximateSunEphemeris,
    ConstantEphemeris,
    KeplerEphemeris,
    TabulatedEphemeris,
    create_ephemeris,
)
from environment.gravity import (
    BasicSolidBodyTideGravityFieldVariations,
    GravityFieldModel,
    SphericalHarmonicsGravityField,
)
from environment.radiation import CannonballRadiationPressureInterface
from environment.rotation import SimpleRotationalEphemeris
from environment.shape import OblateSpheroidBodyShapeModel, SphericalBodyShapeModel

MU_EARTH = 3.986004418e14
MU_SUN = 1.32712440018e20
AU = 1.495978707e11


class TestEphemerides:
    """Test translational ephemerides."""

    def test_constant_ephemeris(self):
        state = np.arange(6, dtype=float)
        ephemeris = ConstantEphemeris(state, 'Earth', 'J2000')

        assert np.allclose(ephemeris.get_cartesian_state(1.0e5), state)
        assert ephemeris.reference_frame_origin == 'Earth'
        assert ephemeris.reference_frame_orientation == 'J2000'

    def test_kepler_periapsis_and_energy(self):
        a, e = 7.0e6, 0.1
        ephemeris = KeplerEphemeris([a, e, 0.5, 0.3, 0.2, 0.0], 0.0, MU_EARTH)

        state = ephemeris.get_cartesian_state(0.0)
        assert np.isclose(np.linalg.norm(state[:3]), a * (1 - e))

        for t in [0.0, 1234.5, 5000.0]:
            state = ephemeris.get_cartesian_state(t)
            r, v = np.linalg.norm(state[:3]), np.linalg.norm(state[3:])
            assert np.isclose(v**2 / 2 - MU_EARTH / r, -MU_EARTH / (2 * a))

    def test_kepler_is_periodic(self):
        a = 7.0e6
        ephemeris = KeplerEphemeris([a, 0.1, 0.5, 0.3, 0.2, 1.0], 100.0, MU_EARTH)
        period = 2 * np.pi * np.sqrt(a**3 / MU_EARTH)

        assert np.allclose(ephemeris.get_cartesian_state(100.0),
                           ephemeris.get_cartesian_state(100.0 + period),
                           rtol=1e-8, atol=1e-2)

    def test_kepler_rejects_hyperbolic_orbit(self):
        with pytest.raises(ValueError):
            KeplerEphemeris([7.0e6, 1.5, 0.0, 0.0, 0.0, 0.0], 0.0, MU_EARTH)

    def test_tabulated_ephemeris_interpolates(self):
        s0 = np.array([0.0, 0.0, 0.0, 1.0, 2.0, 3.0])
        history = {t: s0 + t * np.array([1.0, 2.0, 3.0, 0.0, 0.0, 0.0])
                   for t in [0.0, 100.0, 200.0, 300.0]}
        ephemeris = TabulatedEphemeris(history)

        assert np.allclose(ephemeris.get_cartesian_state(150.0),
                           s0 + 150.0 * np.array([1.0, 2.0, 3.0, 0.0, 0.0, 0.0]))

    def test_approximate_sun_distance(self):
        ephemeris = ApproximateSunEphemeris()

        for t in [0.0, 90 * 86400.0, 180 * 86400.0]:
            distance = np.linalg.norm(ephemeris.get_cartesian_state(t)[:3])
            assert 0.98 * AU < distance < 1.02 * AU

    def test_approximate_sun_ecliptic_has_no_latitude(self):
        state = ApproximateSunEphemeris('Earth', 'ECLIPJ2000').get_cartesian_state(1.0e7)

        assert state[2] == 0.0

    def test_unknown_settings_type(self):
        with pytest.raises(ValueError):
            create_ephemeris(EphemerisSettings(), Body(name='Earth'), {})


class TestRotationAndShape:
    """Test rotational ephemerides and shape models."""

    def test_simple_rotation(self):
        omega = 7.2921159e-5
        rotation = SimpleRotationalEphemeris(np.eye(3), 0.0, omega, 'ECLIPJ2000', 'IAU_Earth')

        R = rotation.get_rotation_to_base_frame(np.pi / (2 * omega))
        assert np.allclose(R @ np.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0])
        assert np.allclose(rotation.get_rotation_to_target_frame(123.0)
                           @ rotation.get_rotation_to_base_frame(123.0), np.eye(3))

    def test_rotation_rejects_non_orthogonal_matrix(self):
        with pytest.raises(ValueError):
            SimpleRotationalEphemeris(2 * np.eye(3), 0.0, 0.0, 'ECLIPJ2000', 'IAU_Earth')

    def test_spherical_altitude(self):
        shape = SphericalBodyShapeModel(1.7374e6)

        assert np.isclose(shape.get_altitude(np.array([0.0, 1.7374e6 + 100.0, 0.0])), 100.0)

    def test_oblate_spheroid_altitude(self):
        shape = OblateSpheroidBodyShapeModel(6378137.0, 1 / 298.257223563)

        assert np.isclose(shape.get_altitude(np.array([6378137.0 + 1000.0, 0.0, 0.0])), 1000.0)
        assert np.isclose(shape.get_altitude(np.array([0.0, 0.0, shape.polar_radius + 500.0])), 500.0)
        assert shape.polar_radius < shape.average_radius < shape.equatorial_radius


class TestAtmosphereAndAerodynamics:
    """Test atmosphere models and aerodynamic coefficients."""

    def test_exponential_density(self):
        atmosphere = ExponentialAtmosphere(1.225, 8500.0)

        assert np.isclose(atmosphere.density(8500.0), 1.225 / np.e)

    def test_tabulated_density_matches_table(self):
        settings = TabulatedAtmosphereSettings()
        atmosphere = TabulatedAtmosphere(settings.altitudes, settings.densities)

        assert np.isclose(atmosphere.density(400000.0), 2.803e-12)
        assert atmosphere.density(450000.0) < atmosphere.density(420000.0)
        assert atmosphere.density(1.2e6) < atmosphere.density(1.0e6)

    def test_tabulated_density_rejects_unsorted_table(self):
        with pytest.raises(ValueError):
            TabulatedAtmosphere([0.0, 2.0, 1.0], [1.0, 0.5, 0.2])

    def test_constant_coefficients(self):
        interface = ConstantAerodynamicCoefficientInterface(0.03, [2.2, 0.0, 0.1])

        assert np.allclose(interface.get_force_coefficients(), [2.2, 0.0, 0.1])

    def test_tabulated_coefficients(self):
        coefficients = [
            [[1.0, 0.0, 0.0], [2.0, 0.0, 0.0]],
            [[2.0, 0.0, 0.0], [3.0, 0.0, 0.0]],
        ]
        interface = TabulatedAerodynamicCoefficientInterface(
            1.0, ['mach_number', 'angle_of_attack'], [[0.0, 1.0], [0.0, 0.1]], coefficients)

        assert np.allclose(interface.get_force_coefficients(0.5, 0.05), [2.0, 0.0, 0.0])

    def test_tabulated_coefficients_shape_check(self):
        with pytest.raises(ValueError):
            TabulatedAerodynamicCoefficientInterface(
                1.0, ['mach_number'], [[0.0, 1.0]], [[1.0, 0.0, 0.0]])


class TestGravityAndRadiation:
    """Test models that look up other bodies when evaluated."""

    @staticmethod
    def sun_and_earth():
        sun = Body(name='Sun',
                   ephemeris=ConstantEphemeris(np.zeros(6)),
                   gravity_field=GravityFieldModel(MU_SUN),
                   shape_model=SphericalBodyShapeModel(6.957e8))
        earth = Body(name='Earth',
                     ephemeris=ConstantEphemeris(np.array([AU, 0.0, 0.0, 0.0, 0.0, 0.0])),
                     gravity_field=SphericalHarmonicsGravityField(
                         MU_EARTH, 6378137.0, np.diag([1.0, 0.0, 0.0]), np.zeros((3, 3)),
                         'IAU_Earth'),
                     shape_model=SphericalBodyShapeModel(6378137.0))
        return {'Sun': sun, 'Earth': earth}

    def test_point_mass_acceleration(self):
        field = GravityFieldModel(MU_EARTH)
        acceleration = field.get_gravitational_acceleration(np.array([7.0e6, 0.0, 0.0]))

        assert np.allclose(acceleration, [-MU_EARTH / 7.0e6**2, 0.0, 0.0])

    def test_solid_body_tide_corrections(self):
        bodies = self.sun_and_earth()
        variation = BasicSolidBodyTideGravityFieldVariations('Earth', ['Sun'], 0.3, bodies)

        delta_cosine, delta_sine = variation.calculate_coefficient_corrections(0.0)

        assert delta_cosine.shape == (3, 3)
        assert delta_cosine[2, 0] < 0.0  # Sun in the equatorial plane
        assert delta_cosine[2, 2] > 0.0
        assert np.allclose(delta_cosine[:2], 0.0)
        assert np.allclose(delta_sine[2, 0], 0.0)

    def test_radiation_pressure_at_one_au(self):
        bodies = self.sun_and_earth()
        interface = CannonballRadiationPressureInterface(
            'Vehicle', 'Sun', 1.0, 1.2, 3.828e26, [], bodies)

        pressure = interface.get_radiation_pressure(0.0, np.array([AU, 1.0e7, 0.0]))
        assert 4.4e-6 < pressure < 4.7e-6

    def test_radiation_pressure_in_shadow(self):
        bodies = self.sun_and_earth()
        interface = CannonballRadiationPressureInterface(
            'Vehicle', 'Sun', 1.0, 1.2, 3.828e26, ['Earth'], bodies)

        behind_earth = np.array([AU + 7.0e6, 0.0, 0.0])
        beside_earth = np.array([AU, 7.0e6, 0.0])
        assert interface.get_radiation_pressure(0.0, behind_earth) == 0.0
        assert interface.get_radiation_pressure(0.0, beside_earth) > 0.0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
