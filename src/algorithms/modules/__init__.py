"""
Surveillance module state machines.

Each module consumes per-frame detection views and produces Alerts.

Available modules:
- IntrusionModule: zone-wide debounced presence inside the ROI
- ThrowingModule: smoothed throwing-classifier runs per track
- VehicleModule: Kalman-filtered overspeed per vehicle
- CollisionModule: sustained person/vehicle proximity per pair
- PPEModule: persistent missing equipment per person
"""

from typing import Any, Dict, Type

from models.config import (
    MODULE_COLLISION,
    MODULE_INTRUSION,
    MODULE_PPE,
    MODULE_THROWING,
    MODULE_VEHICLE,
    MODULES,
)
from .base import ModuleStateMachine
from .intrusion import IntrusionModule, IntrusionState
from .throwing import ThrowingModule, ThrowingTrackState
from .vehicle import VehicleModule, VehicleTrackState
from .collision import CollisionModule, CollisionPairState, pair_key
from .ppe import PPEModule, PPETrackState

MODULE_TYPES: Dict[str, Type[ModuleStateMachine]] = {
    MODULE_INTRUSION: IntrusionModule,
    MODULE_THROWING: ThrowingModule,
    MODULE_VEHICLE: VehicleModule,
    MODULE_COLLISION: CollisionModule,
    MODULE_PPE: PPEModule,
}


def create_module(name: str, config: Any) -> ModuleStateMachine:
    """
    Factory function to create a module state machine by name.

    Args:
        name: One of MODULES.
        config: The module's typed config.
    """
    try:
        module_type = MODULE_TYPES[name]
    except KeyError:
        raise ValueError(f"Unknown module: {name!r} (expected one of {', '.join(MODULES)})")
    return module_type(config)


__all__ = [
    "ModuleStateMachine",
    "IntrusionModule",
    "IntrusionState",
    "ThrowingModule",
    "ThrowingTrackState",
    "VehicleModule",
    "VehicleTrackState",
    "CollisionModule",
    "CollisionPairState",
    "PPEModule",
    "PPETrackState",
    "pair_key",
    "MODULE_TYPES",
    "create_module",
]
