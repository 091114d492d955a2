"""
Frame model for per-frame detection batches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .detection import Detection, detections_from_dicts


@dataclass
class Frame:
    """
    Detections observed in a single video frame.

    Attributes:
        timestamp: Video time of the frame in seconds.
        detections: Ordered detections as delivered by the tracker.
    """
    timestamp: float
    detections: List[Detection] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Frame":
        """Adapter: Create from the external `{t, detections}` shape."""
        return cls(
            timestamp=float(d.get("t", d.get("timestamp", 0.0))),
            detections=detections_from_dicts(d.get("detections") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "t": self.timestamp,
            "detections": [det.to_dict() for det in self.detections],
        }

    def __len__(self) -> int:
        return len(self.detections)
