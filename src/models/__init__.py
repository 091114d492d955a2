"""
Typed models for the Argus monitor core.

These models give the frame dispatcher and module state machines strong
typing. Use the `from_dict` adapters to convert from the external dict shapes.
"""

from .frame import Frame
from .detection import (
    BoundingBox,
    Detection,
    PersonView,
    PPEView,
    ThrowingView,
    VehicleView,
)
from .alert import Alert, ALERT_END, ALERT_START
from .config import (
    Config,
    CollisionConfig,
    DispatcherConfig,
    IntrusionConfig,
    PPEConfig,
    ThrowingConfig,
    VehicleConfig,
    MODULES,
)

__all__ = [
    # Frame
    "Frame",
    # Detection
    "BoundingBox",
    "Detection",
    "PersonView",
    "PPEView",
    "ThrowingView",
    "VehicleView",
    # Alerts
    "Alert",
    "ALERT_END",
    "ALERT_START",
    # Config
    "Config",
    "CollisionConfig",
    "DispatcherConfig",
    "IntrusionConfig",
    "PPEConfig",
    "ThrowingConfig",
    "VehicleConfig",
    "MODULES",
]
