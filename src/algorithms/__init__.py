"""
Algorithms for the Argus monitor core.

- geometry: pure point/box helpers
- buffers: rolling windows and cooldown bookkeeping
- filters: per-track motion and value smoothing
- modules: one state machine per surveillance module
"""

from .geometry import (
    bbox_bottom_center,
    bbox_center,
    bboxes_overlap,
    distance,
    iou,
    point_in_polygon,
)
from .buffers import ClassSmoothingBuffer, CooldownTracker, PersistenceBuffer
from .filters import EMAFilter, PositionKalman, ScalarKalman

__all__ = [
    "bbox_bottom_center",
    "bbox_center",
    "bboxes_overlap",
    "distance",
    "iou",
    "point_in_polygon",
    "ClassSmoothingBuffer",
    "CooldownTracker",
    "PersistenceBuffer",
    "EMAFilter",
    "PositionKalman",
    "ScalarKalman",
]
