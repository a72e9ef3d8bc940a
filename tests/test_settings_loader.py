"""
Tests for loading body settings from YAML.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from environment.ephemeris import ConstantEphemerisSettings, KeplerEphemerisSettings
from environment.gravity import BasicSolidBodyTideSettings
from environment.radiation import CannonballRadiationPressureSettings
from utils.settings_loader import (
    load_environment_config,
    parse_environment_config,
    epoch_to_seconds_since_j2000,
    SettingsLoadError,
)

EXAMPLE_CONFIG = Path(__file__).parent.parent / 'data' / 'environments' / 'inner_solar_system.yaml'


def minimal_config(**body_entries):
    return {
        'global_frame': {'origin': 'SSB', 'orientation': 'ECLIPJ2000'},
        'bodies': [dict(name='Sun', **body_entries)],
    }


class TestLoadExample:
    """Test loading of the bundled example."""

    def test_bodies_and_frame(self):
        config = load_environment_config(str(EXAMPLE_CONFIG))

        assert config.global_frame_origin == 'SSB'
        assert config.global_frame_orientation == 'ECLIPJ2000'
        assert list(config.body_settings) == ['Sun', 'Earth', 'Moon', 'Vehicle']

    def test_model_types(self):
        settings = load_environment_config(str(EXAMPLE_CONFIG)).body_settings

        assert isinstance(settings['Sun'].ephemeris_settings, ConstantEphemerisSettings)
        assert isinstance(settings['Earth'].ephemeris_settings, KeplerEphemerisSettings)
        assert settings['Earth'].ephemeris_settings.frame_origin == 'Sun'
        assert isinstance(settings['Earth'].gravity_field_variation_settings[0],
                          BasicSolidBodyTideSettings)
        radiation = settings['Vehicle'].radiation_pressure_settings
        assert list(radiation) == ['Sun']
        assert isinstance(radiation['Sun'], CannonballRadiationPressureSettings)
        assert radiation['Sun'].occulting_bodies == ['Earth']

    def test_epoch_string_converted(self):
        settings = load_environment_config(str(EXAMPLE_CONFIG)).body_settings
        epoch = settings['Vehicle'].ephemeris_settings.epoch_of_initial_state

        # 2025-01-01 is 9131.5 days after J2000
        assert epoch == pytest.approx(9131.5 * 86400.0, abs=1e-3)

    def test_settings_store_is_read_only(self):
        config = load_environment_config(str(EXAMPLE_CONFIG))

        with pytest.raises(TypeError):
            config.body_settings['Mars'] = config.body_settings['Sun']


class TestEpochs:
    """Test epoch conversion."""

    def test_number_passes_through(self):
        assert epoch_to_seconds_since_j2000(42) == 42.0

    def test_j2000_is_zero(self):
        assert epoch_to_seconds_since_j2000('2000-01-01T12:00:00') == pytest.approx(0.0, abs=1e-3)

    def test_one_day(self):
        assert epoch_to_seconds_since_j2000('2000-01-02T12:00:00') == pytest.approx(86400.0, abs=1e-3)

    def test_invalid_string(self):
        with pytest.raises(SettingsLoadError):
            epoch_to_seconds_since_j2000('not a date')


class TestLoadErrors:
    """Test rejection of malformed descriptions."""

    def test_duplicate_body(self):
        data = minimal_config()
        data['bodies'].append({'name': 'Sun'})

        with pytest.raises(SettingsLoadError, match='more than once'):
            parse_environment_config(data)

    def test_unknown_model_type(self):
        data = minimal_config(ephemeris={'type': 'spice'})

        with pytest.raises(SettingsLoadError, match='spice'):
            parse_environment_config(data)

    def test_unknown_parameter(self):
        data = minimal_config(shape_model={'type': 'spherical', 'radius': 1.0, 'colour': 'yellow'})

        with pytest.raises(SettingsLoadError, match='colour'):
            parse_environment_config(data)

    def test_unknown_body_key(self):
        data = minimal_config(magnetic_field={'type': 'dipole'})

        with pytest.raises(SettingsLoadError, match='magnetic_field'):
            parse_environment_config(data)

    def test_global_frame_not_a_mapping(self):
        data = minimal_config()
        data['global_frame'] = 'SSB'

        with pytest.raises(SettingsLoadError, match='global_frame'):
            parse_environment_config(data)

    def test_missing_global_frame(self):
        data = minimal_config()
        del data['global_frame']

        with pytest.raises(SettingsLoadError, match='global_frame'):
            parse_environment_config(data)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'broken.yaml'
        path.write_text('bodies: [unclosed\n')

        with pytest.raises(SettingsLoadError):
            load_environment_config(str(path))


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
