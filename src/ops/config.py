"""
Configuration loading and validation.

Configs are layered:
- `config/default.yaml` (checked in)
- `config/config.yaml` (local overrides)
- plus any explicitly provided path (treated as overrides)
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

import yaml

from models.config import MODULES
from ops.logging import VALID_LOG_LEVELS


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or parsed."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML in {path} must be a mapping")
    return data


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering relative to the directory of `config_path`.

    Raises:
        ConfigError: if any layer cannot be read or parsed.
    """
    config_dir = os.path.dirname(config_path)
    base_path = os.path.join(config_dir, "default.yaml")
    local_overrides_path = os.path.join(config_dir, "config.yaml")
    try:
        merged: Dict[str, Any] = {}
        if os.path.exists(base_path):
            merged = _read_yaml(base_path)
        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        # Finally apply explicit config_path if it's not one of the layers above
        explicit = os.path.abspath(config_path)
        if os.path.exists(config_path) and explicit not in (
            os.path.abspath(base_path),
            os.path.abspath(local_overrides_path),
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))
        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        raise ConfigError(f"Failed to load configuration from {config_path}: {e}") from e


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_roi(roi: Any, where: str) -> Optional[str]:
    if not isinstance(roi, list):
        return f"{where} must be a list of [x, y] points"
    for p in roi:
        if isinstance(p, dict):
            if not (_is_number(p.get("x")) and _is_number(p.get("y"))):
                return f"{where} points must have numeric x and y"
        elif not (isinstance(p, (list, tuple)) and len(p) == 2 and all(_is_number(v) for v in p)):
            return f"{where} points must be [x, y] number pairs"
    if roi and len(roi) < 3:
        return f"{where} needs at least 3 points"
    return None


_POSITIVE_INTS = {
    "intrusion": ("buffer_size", "threshold"),
    "throwing": ("smoothing_window", "consecutive_threshold"),
    "collision": ("collision_buffer_frames",),
    "ppe": ("ppe_persistence_frames",),
}

_NON_NEGATIVE_NUMBERS = {
    "vehicle": ("speed_threshold_kmh", "speed_threshold", "meters_per_pixel", "fps",
                "cooldown_seconds", "process_noise", "measurement_noise"),
    "collision": ("collision_distance_px", "collision_distance", "collision_cooldown_seconds"),
    "ppe": ("ppe_cooldown_seconds",),
}


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and value types.

    Threshold magnitudes beyond basic sign checks are trusted.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    # Required top-level settings
    for key in ("camera_id", "active_module", "log_path", "log_level"):
        if key not in config:
            return False, f"Missing required configuration key: {key}"

    if not isinstance(config["camera_id"], str) or not config["camera_id"]:
        return False, "camera_id must be a non-empty string"

    if config["active_module"] not in MODULES:
        return False, f"active_module must be one of: {', '.join(MODULES)}"

    if config["log_level"] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    if "roi" in config and config["roi"] is not None:
        error = _validate_roi(config["roi"], "roi")
        if error:
            return False, error

    modules = config.get("modules", {}) or {}
    if not isinstance(modules, dict):
        return False, "modules must be a mapping of module name to settings"
    for name, section in modules.items():
        if name not in MODULES:
            return False, f"modules.{name} is not a known module"
        if not isinstance(section, dict):
            return False, f"modules.{name} must be a mapping"
        for key in _POSITIVE_INTS.get(name, ()):
            if key in section and (not isinstance(section[key], int) or isinstance(section[key], bool)
                                   or section[key] <= 0):
                return False, f"modules.{name}.{key} must be a positive integer"
        for key in _NON_NEGATIVE_NUMBERS.get(name, ()):
            if key in section and (not _is_number(section[key]) or section[key] < 0):
                return False, f"modules.{name}.{key} must be a non-negative number"
        if name == "intrusion" and section.get("roi") is not None:
            error = _validate_roi(section["roi"], "modules.intrusion.roi")
            if error:
                return False, error
        if name == "vehicle" and "classes" in section:
            classes = section["classes"]
            if not isinstance(classes, list) or not all(isinstance(c, str) for c in classes):
                return False, "modules.vehicle.classes must be a list of strings"

    dispatcher = config.get("dispatcher", {}) or {}
    if "dedup_epsilon" in dispatcher and (not _is_number(dispatcher["dedup_epsilon"])
                                          or dispatcher["dedup_epsilon"] < 0):
        return False, "dispatcher.dedup_epsilon must be a non-negative number"
    stale = dispatcher.get("stale_track_seconds")
    if stale is not None and (not _is_number(stale) or stale <= 0):
        return False, "dispatcher.stale_track_seconds must be a positive number or null"

    return True, None
