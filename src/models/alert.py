"""
Alert model for surveillance module transitions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

ALERT_START = 1
ALERT_END = 0


@dataclass(frozen=True)
class Alert:
    """
    An alert emitted when a module's violation starts or ends.

    Attributes:
        module: Module name ("intrusion", "throwing", "vehicle", "collision", "ppe").
        state: Transition state, 1 for violation started, 0 for ended.
        timestamp: Video time (seconds) of the frame that produced the alert.
        camera_id: Camera identifier, stamped by the dispatcher.
        detected_time: Wall-clock ISO timestamp, stamped by the dispatcher.
        track_id: Track that triggered a throwing or PPE alert.
        vehicle_id: Track that triggered an overspeed alert.
        speed: Vehicle speed in km/h, rounded to 0.1.
        human_id: Person track of a collision pair.
        piv_id: Vehicle track of a collision pair.
        violations: Missing PPE items.
    """
    module: str
    state: int
    timestamp: float
    camera_id: Optional[str] = None
    detected_time: Optional[str] = None
    track_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    speed: Optional[float] = None
    human_id: Optional[int] = None
    piv_id: Optional[int] = None
    violations: Optional[Tuple[str, ...]] = None

    @property
    def is_start(self) -> bool:
        return self.state == ALERT_START

    def stamped(self, camera_id: str, detected_time: str) -> "Alert":
        """Return a copy carrying camera and wall-clock metadata."""
        return replace(self, camera_id=camera_id, detected_time=detected_time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the external alert dict; unset optional fields are omitted."""
        d: Dict[str, Any] = {
            "camera_id": self.camera_id,
            "module": self.module,
            "state": self.state,
            "detected_time": self.detected_time,
            "t": self.timestamp,
        }
        for key in ("track_id", "vehicle_id", "speed", "human_id", "piv_id"):
            value = getattr(self, key)
            if value is not None:
                d[key] = value
        if self.violations is not None:
            d["violations"] = list(self.violations)
        return d
