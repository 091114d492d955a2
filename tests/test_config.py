"""
Smoke tests for configuration loading, validation and logging setup.
"""

import logging

import pytest

from models.config import Config, VehicleConfig
from ops.config import ConfigError, load_config, validate_config
from ops.logging import setup_logging


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        """A complete valid config passes validation."""
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize("key", ["camera_id", "active_module", "log_path", "log_level"])
    def test_missing_required_key(self, valid_config, key):
        del valid_config[key]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert key in error

    def test_unknown_active_module(self, valid_config):
        valid_config["active_module"] = "smoke"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "active_module" in error

    def test_invalid_log_level(self, valid_config):
        valid_config["log_level"] = "VERBOSE"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error

    def test_roi_needs_three_points(self, valid_config):
        valid_config["roi"] = [[0, 0], [10, 10]]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "3 points" in error

    def test_roi_accepts_xy_mappings(self, valid_config):
        valid_config["roi"] = [{"x": 0, "y": 0}, {"x": 10, "y": 0}, {"x": 10, "y": 10}]

        is_valid, error = validate_config(valid_config)

        assert is_valid is True

    def test_roi_rejects_malformed_points(self, valid_config):
        valid_config["roi"] = [[0, 0], [10], [10, 10]]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "roi" in error

    def test_unknown_module_section(self, valid_config):
        valid_config["modules"]["smoke"] = {}

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "smoke" in error

    def test_non_positive_buffer_size(self, valid_config):
        valid_config["modules"]["intrusion"]["buffer_size"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "buffer_size" in error

    def test_negative_speed_threshold(self, valid_config):
        valid_config["modules"]["vehicle"]["speed_threshold_kmh"] = -5

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "speed_threshold_kmh" in error

    def test_vehicle_classes_must_be_strings(self, valid_config):
        valid_config["modules"]["vehicle"]["classes"] = ["car", 3]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "classes" in error

    def test_stale_track_seconds(self, valid_config):
        valid_config["dispatcher"]["stale_track_seconds"] = None
        assert validate_config(valid_config) == (True, None)

        valid_config["dispatcher"]["stale_track_seconds"] = 0
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "stale_track_seconds" in error


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_yaml(self, temp_config_dir):
        """Config loads from default.yaml when only it exists."""
        config_path = str(temp_config_dir / "config.yaml")

        config = load_config(config_path)

        assert config["camera_id"] == "cam01"
        assert config["active_module"] == "intrusion"
        assert config["modules"]["intrusion"]["threshold"] == 3

    def test_local_overrides_merge(self, temp_config_dir):
        """Local config.yaml overrides default.yaml."""
        config_yaml = temp_config_dir / "config.yaml"
        config_yaml.write_text("""
camera_id: "gate-2"
modules:
  intrusion:
    threshold: 4
""")

        config = load_config(str(config_yaml))

        # Overridden values
        assert config["camera_id"] == "gate-2"
        assert config["modules"]["intrusion"]["threshold"] == 4

        # Original values preserved
        assert config["modules"]["intrusion"]["buffer_size"] == 5
        assert config["modules"]["collision"]["collision_distance_px"] == 100

    def test_explicit_path_applied_last(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("active_module: throwing\n")
        explicit = temp_config_dir / "site.yaml"
        explicit.write_text("active_module: ppe\n")

        config = load_config(str(explicit))

        assert config["active_module"] == "ppe"
        assert config["log_level"] == "INFO"

    def test_invalid_yaml_raises(self, temp_config_dir):
        config_yaml = temp_config_dir / "config.yaml"
        config_yaml.write_text("modules: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(str(config_yaml))

    def test_non_mapping_yaml_raises(self, temp_config_dir):
        config_yaml = temp_config_dir / "config.yaml"
        config_yaml.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError):
            load_config(str(config_yaml))

    def test_loaded_config_is_valid_and_typed(self, temp_config_dir):
        config = load_config(str(temp_config_dir / "config.yaml"))
        assert validate_config(config) == (True, None)

        typed = Config.from_dict(config)
        assert typed.intrusion.roi == ((0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0))
        assert typed.collision.collision_buffer_frames == 5
        assert typed.vehicle == VehicleConfig()


class TestSetupLogging:

    def test_file_handler_created(self, tmp_path):
        log_path = tmp_path / "logs" / "argus.log"

        setup_logging(str(log_path), "DEBUG")
        root = logging.getLogger()
        try:
            logging.info("hello from test")
            for handler in root.handlers:
                handler.flush()

            assert log_path.exists()
            assert "hello from test" in log_path.read_text()
            assert root.level == logging.DEBUG
        finally:
            for handler in list(root.handlers):
                handler.close()
                root.removeHandler(handler)
            root.setLevel(logging.WARNING)

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logging(None, "LOUD")
