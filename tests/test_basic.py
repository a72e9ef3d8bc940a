"""
Basic integration tests for environment setup.

Loads the bundled example description and creates the full environment.
"""

import json
import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.assembly import create_environment
from core.frames import set_global_frame_body_ephemerides
from utils.export import EnvironmentExporter, COLUMNS
from utils.settings_loader import load_environment_config
from run_environment_setup import run_environment_setup

EXAMPLE_CONFIG = Path(__file__).parent.parent / 'data' / 'environments' / 'inner_solar_system.yaml'


@pytest.fixture
def environment():
    config = load_environment_config(str(EXAMPLE_CONFIG))
    bodies = create_environment(config.body_settings, config.global_frame_origin,
                                config.global_frame_orientation)
    return config, bodies


class TestExampleEnvironment:
    """Test the example environment end-to-end."""

    def test_all_bodies_created(self, environment):
        config, bodies = environment

        assert sorted(bodies) == ['Earth', 'Moon', 'Sun', 'Vehicle']

    def test_origin_transforms(self, environment):
        config, bodies = environment

        assert bodies['Sun'].ephemeris_frame_to_base_frame is None
        assert bodies['Earth'].ephemeris_frame_to_base_frame.base_frame_id == 'Sun'
        assert bodies['Moon'].ephemeris_frame_to_base_frame.base_frame_id == 'Earth'
        assert bodies['Vehicle'].ephemeris_frame_to_base_frame.base_frame_id == 'Earth'

    def test_vehicle_state_near_earth(self, environment):
        config, bodies = environment
        t = 86400.0

        vehicle = bodies['Vehicle'].get_state_in_base_frame_from_ephemeris(t)
        earth = bodies['Earth'].get_state_in_base_frame_from_ephemeris(t)

        assert np.isclose(np.linalg.norm(earth[:3]), 1.496e11, rtol=0.03)
        assert 6.8e6 < np.linalg.norm(vehicle[:3] - earth[:3]) < 6.9e6

    def test_moon_is_tidally_locked(self, environment):
        config, bodies = environment
        t = 5.0e5

        R = bodies['Moon'].rotational_ephemeris.get_rotation_to_base_frame(t)
        relative = (bodies['Earth'].get_state_in_base_frame_from_ephemeris(t)
                    - bodies['Moon'].get_state_in_base_frame_from_ephemeris(t))[:3]

        assert np.allclose(R @ R.T, np.eye(3))
        assert np.isclose(np.linalg.det(R), 1.0)
        assert np.allclose(R[:, 0], relative / np.linalg.norm(relative))

    def test_models_are_usable(self, environment):
        config, bodies = environment

        pressure = bodies['Vehicle'].radiation_pressure_interfaces['Sun'].get_radiation_pressure(0.0)
        assert 0.0 <= pressure < 5.0e-6

        delta_cosine, _ = bodies['Earth'].gravity_field_variations[0].calculate_coefficient_corrections(0.0)
        assert delta_cosine[2, 0] != 0.0

        assert bodies['Earth'].atmosphere_model.density(400000.0) > 0.0

    def test_reconciliation_can_be_repeated(self, environment):
        config, bodies = environment
        transforms = {name: body.ephemeris_frame_to_base_frame for name, body in bodies.items()}

        outcomes = set_global_frame_body_ephemerides(
            bodies, config.global_frame_origin, config.global_frame_orientation)

        assert set(outcomes.values()) == {'consistent'}
        for name, body in bodies.items():
            assert body.ephemeris_frame_to_base_frame is transforms[name]


class TestExport:
    """Test body summary export."""

    def test_summary_rows(self, environment):
        config, bodies = environment
        rows = EnvironmentExporter.summarize(bodies)

        assert [row['name'] for row in rows] == ['Earth', 'Moon', 'Sun', 'Vehicle']
        assert all(list(row) == COLUMNS for row in rows)
        vehicle = rows[-1]
        assert vehicle['base_frame_transform'] == 'Earth'
        assert vehicle['radiation_sources'] == 'Sun'
        assert vehicle['rotation_model'] == ''

    def test_csv_and_json(self, environment, tmp_path):
        config, bodies = environment

        EnvironmentExporter.to_csv(bodies, str(tmp_path / 'out' / 'bodies.csv'))
        EnvironmentExporter.to_json(bodies, str(tmp_path / 'out' / 'environment.json'),
                                    config.global_frame_origin, config.global_frame_orientation)

        lines = (tmp_path / 'out' / 'bodies.csv').read_text().strip().splitlines()
        assert lines[0].split(',') == COLUMNS
        assert len(lines) == 5

        data = json.loads((tmp_path / 'out' / 'environment.json').read_text())
        assert data['global_frame'] == {'origin': 'SSB', 'orientation': 'ECLIPJ2000'}
        assert len(data['bodies']) == 4

    def test_run_script(self, tmp_path, capsys):
        bodies = run_environment_setup(str(EXAMPLE_CONFIG), str(tmp_path / 'run'))

        assert len(bodies) == 4
        assert (tmp_path / 'run' / 'bodies.csv').exists()
        assert (tmp_path / 'run' / 'environment.json').exists()
        assert 'Vehicle' in capsys.readouterr().out


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
