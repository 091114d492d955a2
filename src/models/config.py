"""
Typed configuration models matching the YAML config structure.

Module configs are frozen: they are supplied once per module activation and
stay immutable for the lifetime of that activation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .detection import DEFAULT_VEHICLE_CLASSES, Point

MODULE_INTRUSION = "intrusion"
MODULE_THROWING = "throwing"
MODULE_VEHICLE = "vehicle"
MODULE_COLLISION = "collision"
MODULE_PPE = "ppe"

MODULES = (MODULE_INTRUSION, MODULE_THROWING, MODULE_VEHICLE, MODULE_COLLISION, MODULE_PPE)


def _roi_from(value) -> Tuple[Point, ...]:
    """Accept [[x, y], ...] or [{"x": .., "y": ..}, ...] polygons."""
    if not value:
        return ()
    points = []
    for p in value:
        if isinstance(p, dict):
            points.append((float(p["x"]), float(p["y"])))
        else:
            points.append((float(p[0]), float(p[1])))
    return tuple(points)


@dataclass(frozen=True)
class IntrusionConfig:
    """Perimeter intrusion: debounced presence of any person inside the ROI."""
    roi: Tuple[Point, ...] = ()
    buffer_size: int = 5
    threshold: int = 3

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "IntrusionConfig":
        return cls(
            roi=_roi_from(d.get("roi")),
            buffer_size=int(d.get("buffer_size", 5)),
            threshold=int(d.get("threshold", 3)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roi": [list(p) for p in self.roi],
            "buffer_size": self.buffer_size,
            "threshold": self.threshold,
        }


@dataclass(frozen=True)
class ThrowingConfig:
    """Throwing/littering: smoothed classifier labels held for N frames."""
    smoothing_window: int = 3
    consecutive_threshold: int = 10

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ThrowingConfig":
        return cls(
            smoothing_window=int(d.get("smoothing_window", 3)),
            consecutive_threshold=int(d.get("consecutive_threshold", 10)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "smoothing_window": self.smoothing_window,
            "consecutive_threshold": self.consecutive_threshold,
        }


@dataclass(frozen=True)
class VehicleConfig:
    """
    Vehicle overspeed.

    Attributes:
        speed_threshold_kmh: Alert when speed strictly exceeds this value.
        meters_per_pixel: Ground scale used to convert pixel velocity.
        fps: Source frame rate; the motion filter steps by 1/fps.
        cooldown_seconds: Per-vehicle alert suppression window.
        classes: Class labels treated as vehicles.
        process_noise: Motion filter process noise.
        measurement_noise: Motion filter measurement noise.
    """
    speed_threshold_kmh: float = 30.0
    meters_per_pixel: float = 0.05
    fps: float = 25.0
    cooldown_seconds: float = 30.0
    classes: Tuple[str, ...] = DEFAULT_VEHICLE_CLASSES
    process_noise: float = 0.5
    measurement_noise: float = 2.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VehicleConfig":
        threshold = d.get("speed_threshold_kmh", d.get("speed_threshold", 30.0))
        return cls(
            speed_threshold_kmh=float(threshold),
            meters_per_pixel=float(d.get("meters_per_pixel", 0.05)),
            fps=float(d.get("fps", 25.0)),
            cooldown_seconds=float(d.get("cooldown_seconds", 30.0)),
            classes=tuple(d.get("classes") or DEFAULT_VEHICLE_CLASSES),
            process_noise=float(d.get("process_noise", 0.5)),
            measurement_noise=float(d.get("measurement_noise", 2.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speed_threshold_kmh": self.speed_threshold_kmh,
            "meters_per_pixel": self.meters_per_pixel,
            "fps": self.fps,
            "cooldown_seconds": self.cooldown_seconds,
            "classes": list(self.classes),
            "process_noise": self.process_noise,
            "measurement_noise": self.measurement_noise,
        }


@dataclass(frozen=True)
class CollisionConfig:
    """Human-vehicle collision risk: sustained proximity of a person/vehicle pair."""
    collision_distance_px: float = 100.0
    collision_buffer_frames: int = 5
    collision_cooldown_seconds: float = 30.0
    vehicle_classes: Tuple[str, ...] = DEFAULT_VEHICLE_CLASSES

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CollisionConfig":
        distance = d.get("collision_distance_px", d.get("collision_distance", 100.0))
        return cls(
            collision_distance_px=float(distance),
            collision_buffer_frames=int(d.get("collision_buffer_frames", 5)),
            collision_cooldown_seconds=float(d.get("collision_cooldown_seconds", 30.0)),
            vehicle_classes=tuple(d.get("vehicle_classes") or DEFAULT_VEHICLE_CLASSES),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collision_distance_px": self.collision_distance_px,
            "collision_buffer_frames": self.collision_buffer_frames,
            "collision_cooldown_seconds": self.collision_cooldown_seconds,
            "vehicle_classes": list(self.vehicle_classes),
        }


@dataclass(frozen=True)
class PPEConfig:
    """PPE compliance: missing equipment reported for N consecutive frames."""
    ppe_persistence_frames: int = 15
    ppe_cooldown_seconds: float = 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PPEConfig":
        return cls(
            ppe_persistence_frames=int(d.get("ppe_persistence_frames", 15)),
            ppe_cooldown_seconds=float(d.get("ppe_cooldown_seconds", 60.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ppe_persistence_frames": self.ppe_persistence_frames,
            "ppe_cooldown_seconds": self.ppe_cooldown_seconds,
        }


_MODULE_CONFIG_TYPES = {
    MODULE_INTRUSION: IntrusionConfig,
    MODULE_THROWING: ThrowingConfig,
    MODULE_VEHICLE: VehicleConfig,
    MODULE_COLLISION: CollisionConfig,
    MODULE_PPE: PPEConfig,
}


def module_config_from_dict(module: str, d: Dict[str, Any]) -> Any:
    """Build the typed config for `module` from a thresholds dict."""
    try:
        config_type = _MODULE_CONFIG_TYPES[module]
    except KeyError:
        raise ValueError(f"Unknown module: {module!r} (expected one of {', '.join(MODULES)})")
    return config_type.from_dict(d or {})


@dataclass
class DispatcherConfig:
    """
    Frame dispatcher settings.

    Attributes:
        dedup_epsilon: Frames closer than this (seconds) to the last processed
            frame are treated as re-deliveries and dropped.
        stale_track_seconds: Evict per-track state not updated for this long.
            None disables eviction.
        stats_log_interval: Frames between statistics log messages (0 disables).
    """
    dedup_epsilon: float = 0.01
    stale_track_seconds: Optional[float] = None
    stats_log_interval: int = 500

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DispatcherConfig":
        stale = d.get("stale_track_seconds")
        return cls(
            dedup_epsilon=float(d.get("dedup_epsilon", 0.01)),
            stale_track_seconds=float(stale) if stale is not None else None,
            stats_log_interval=int(d.get("stats_log_interval", 500)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dedup_epsilon": self.dedup_epsilon,
            "stale_track_seconds": self.stale_track_seconds,
            "stats_log_interval": self.stats_log_interval,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure. A top-level
    `roi` applies to the intrusion module unless its section sets its own.
    """
    camera_id: str = "cam01"
    active_module: str = MODULE_INTRUSION
    intrusion: IntrusionConfig = field(default_factory=IntrusionConfig)
    throwing: ThrowingConfig = field(default_factory=ThrowingConfig)
    vehicle: VehicleConfig = field(default_factory=VehicleConfig)
    collision: CollisionConfig = field(default_factory=CollisionConfig)
    ppe: PPEConfig = field(default_factory=PPEConfig)
    dispatcher: DispatcherConfig = field(default_factory=DispatcherConfig)
    log_path: str = "logs/argus.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        modules = d.get("modules", {}) or {}
        intrusion_dict = dict(modules.get(MODULE_INTRUSION, {}) or {})
        if "roi" not in intrusion_dict and d.get("roi"):
            intrusion_dict["roi"] = d["roi"]
        return cls(
            camera_id=str(d.get("camera_id", "cam01")),
            active_module=d.get("active_module", MODULE_INTRUSION),
            intrusion=IntrusionConfig.from_dict(intrusion_dict),
            throwing=ThrowingConfig.from_dict(modules.get(MODULE_THROWING, {}) or {}),
            vehicle=VehicleConfig.from_dict(modules.get(MODULE_VEHICLE, {}) or {}),
            collision=CollisionConfig.from_dict(modules.get(MODULE_COLLISION, {}) or {}),
            ppe=PPEConfig.from_dict(modules.get(MODULE_PPE, {}) or {}),
            dispatcher=DispatcherConfig.from_dict(d.get("dispatcher", {}) or {}),
            log_path=d.get("log_path", "logs/argus.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def module_config(self, module: str) -> Any:
        """Return the typed config for a module name."""
        if module not in MODULES:
            raise ValueError(f"Unknown module: {module!r} (expected one of {', '.join(MODULES)})")
        return getattr(self, module)

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        modules: Dict[str, Any] = {name: self.module_config(name).to_dict() for name in MODULES}
        return {
            "camera_id": self.camera_id,
            "active_module": self.active_module,
            "modules": modules,
            "dispatcher": self.dispatcher.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
