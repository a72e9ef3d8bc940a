#!/usr/bin/env python3
"""
Environment setup from a YAML description.

Resolves the body creation order, creates all bodies and sets the global
reference frame, then prints a summary.

Usage:
    python run_environment_setup.py
    python run_environment_setup.py --config data/environments/inner_solar_system.yaml
    python run_environment_setup.py --output outputs/environment --verbose
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from core.assembly import create_environment
from utils.export import EnvironmentExporter
from utils.settings_loader import load_environment_config

logger = logging.getLogger(__name__)


def run_environment_setup(config_file: str, output_dir: str = None):
    """
    Create the environment described in config_file.

    Args:
        config_file: Path to environment YAML
        output_dir: Directory for CSV/JSON summaries (none written if None)

    Returns:
        Dict of created bodies
    """
    print("=" * 70)
    print("ENVIRONMENT SETUP")
    print("=" * 70)
    print()

    print(f"Loading environment from {config_file}...")
    config = load_environment_config(config_file)
    print(f"✓ Bodies: {len(config.body_settings)}")
    print(f"  Global frame: {config.global_frame_origin} / {config.global_frame_orientation}")
    print()

    bodies = create_environment(
        config.body_settings,
        config.global_frame_origin,
        config.global_frame_orientation,
    )

    print(f"{'Body':<12} {'Ephemeris origin':<18} {'Orientation':<14} {'Transform':<10}")
    print("-" * 70)
    for row in EnvironmentExporter.summarize(bodies):
        print(f"{row['name']:<12} {row['ephemeris_origin'] or '-':<18} "
              f"{row['ephemeris_orientation'] or '-':<14} "
              f"{row['base_frame_transform'] or '-':<10}")
    print()

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        EnvironmentExporter.to_csv(bodies, os.path.join(output_dir, 'bodies.csv'))
        EnvironmentExporter.to_json(
            bodies, os.path.join(output_dir, 'environment.json'),
            config.global_frame_origin, config.global_frame_orientation)
        print(f"✓ Summaries written to {output_dir}")

    return bodies


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create bodies and set the global frame")
    parser.add_argument(
        "--config",
        default="data/environments/inner_solar_system.yaml",
        help="Path to environment YAML file"
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output directory for body summaries"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(message)s')

    try:
        run_environment_setup(args.config, args.output)
        sys.exit(0)
    except Exception as e:
        print(f"ERROR: {e}")
        sys.exit(1)
