"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera_id: "cam01"
active_module: "intrusion"

roi:
  - [0, 0]
  - [100, 0]
  - [100, 100]
  - [0, 100]

modules:
  intrusion:
    buffer_size: 5
    threshold: 3
  collision:
    collision_distance_px: 100
    collision_buffer_frames: 5
    collision_cooldown_seconds: 30

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera_id": "cam01",
        "active_module": "intrusion",
        "roi": [[0, 0], [100, 0], [100, 100], [0, 100]],
        "modules": {
            "intrusion": {"buffer_size": 5, "threshold": 3},
            "throwing": {"smoothing_window": 3, "consecutive_threshold": 5},
            "vehicle": {"speed_threshold_kmh": 30, "meters_per_pixel": 0.05, "fps": 25},
            "collision": {
                "collision_distance_px": 100,
                "collision_buffer_frames": 3,
                "collision_cooldown_seconds": 20,
            },
            "ppe": {"ppe_persistence_frames": 5, "ppe_cooldown_seconds": 20},
        },
        "dispatcher": {"dedup_epsilon": 0.01},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def square_roi():
    return [(0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0)]
