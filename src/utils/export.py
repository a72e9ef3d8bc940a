"""
Export a summary of created bodies and their frames.

Supports: CSV, JSON.
"""

import json
import csv
from typing import Any, Dict, List, Mapping
from pathlib import Path
import logging

from core.models import Body

logger = logging.getLogger(__name__)

COLUMNS = [
    'name', 'ephemeris', 'ephemeris_origin', 'ephemeris_orientation',
    'base_frame_transform', 'rotation_model', 'rotation_base_orientation',
    'rotation_target_orientation', 'gravity_field', 'shape_model',
    'atmosphere_model', 'aerodynamic_coefficients', 'radiation_sources',
    'gravity_field_variations',
]


class EnvironmentExporter:
    """Export body summaries to standard formats."""

    @staticmethod
    def summarize(bodies: Mapping[str, Body]) -> List[Dict[str, Any]]:
        """
        One row per body, sorted by name.

        Args:
            bodies: Created bodies

        Returns:
            List of dicts with the keys in COLUMNS
        """
        def type_name(model):
            return type(model).__name__ if model is not None else ''

        rows = []
        for name in sorted(bodies):
            body = bodies[name]
            ephemeris = body.ephemeris
            rotation = body.rotational_ephemeris
            transform = body.ephemeris_frame_to_base_frame

            rows.append({
                'name': name,
                'ephemeris': type_name(ephemeris),
                'ephemeris_origin': ephemeris.reference_frame_origin if ephemeris else '',
                'ephemeris_orientation': ephemeris.reference_frame_orientation if ephemeris else '',
                'base_frame_transform': transform.base_frame_id if transform else '',
                'rotation_model': type_name(rotation),
                'rotation_base_orientation': rotation.base_frame_orientation if rotation else '',
                'rotation_target_orientation': rotation.target_frame_orientation if rotation else '',
                'gravity_field': type_name(body.gravity_field),
                'shape_model': type_name(body.shape_model),
                'atmosphere_model': type_name(body.atmosphere_model),
                'aerodynamic_coefficients': type_name(body.aerodynamic_coefficient_interface),
                'radiation_sources': ';'.join(body.radiation_pressure_interfaces),
                'gravity_field_variations': ';'.join(
                    type_name(v) for v in body.gravity_field_variations),
            })
        return rows

    @staticmethod
    def to_csv(bodies: Mapping[str, Body], output_path: str):
        """
        Export body summary to CSV file.

        Args:
            bodies: Created bodies
            output_path: Output file path
        """
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=COLUMNS)
            writer.writeheader()
            writer.writerows(EnvironmentExporter.summarize(bodies))

        logger.info(f"Exported body summary to {output_path}")

    @staticmethod
    def to_json(bodies: Mapping[str, Body], output_path: str,
                global_frame_origin: str = '', global_frame_orientation: str = ''):
        """
        Export body summary to JSON.

        Args:
            bodies: Created bodies
            output_path: Output file path
            global_frame_origin: Global frame origin, recorded in the file
            global_frame_orientation: Global frame orientation, recorded in the file
        """
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        data = {
            'global_frame': {
                'origin': global_frame_origin,
                'orientation': global_frame_orientation,
            },
            'bodies': EnvironmentExporter.summarize(bodies),
        }

        with open(output_path, 'w') as f:
            json.dump(data, f, indent=2)

        logger.info(f"Exported environment to {output_path}")
