"""
Detection models for tracked object detections.

A `Detection` is the common base shape delivered by the upstream detector and
tracker. Each surveillance module only needs a few of its optional fields, so
the dispatcher projects detections into small per-module views instead of
passing the loosely-typed base object around.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

Point = Tuple[float, float]
BBox = Tuple[float, float, float, float]

PERSON_CLASS = "person"
THROWING_CLASSES = ("throwing", "normal")
DEFAULT_VEHICLE_CLASSES = ("car", "truck", "bus", "motorcycle", "forklift")


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates.

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate.
        y2: Bottom edge y coordinate.
    """
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> Point:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    @property
    def bottom_center(self) -> Point:
        return ((self.x1 + self.x2) / 2, self.y2)

    @property
    def area(self) -> float:
        return self.width * self.height

    def as_tuple(self) -> BBox:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x1, self.y1, self.x2, self.y2)

    @classmethod
    def from_tuple(cls, t) -> "BoundingBox":
        """Create from (x1, y1, x2, y2) tuple or list."""
        return cls(x1=float(t[0]), y1=float(t[1]), x2=float(t[2]), y2=float(t[3]))


def _point_or_none(value) -> Optional[Point]:
    if value is None:
        return None
    return (float(value[0]), float(value[1]))


@dataclass(frozen=True)
class Detection:
    """
    A single tracked detection within one frame.

    `track_id` is unique per class within a frame and stable across frames
    for the same physical object. Optional fields are derived upstream and
    may be absent.

    Attributes:
        track_id: Stable track identifier.
        class_label: Detector class label (e.g. "person", "car", "throwing").
        bbox: Bounding box in pixel coordinates.
        bottom_center: Ground contact point (feet) of a person.
        centroid: Center point used for vehicle motion.
        missing_items: PPE items missing for this person. None means the
            detection was not evaluated for PPE; an empty tuple means compliant.
        speed_kmh: Externally measured speed, overrides the motion filter.
        plane_hint: Ground plane index for multi-plane calibrations.
        confidence: Detection confidence score (0-1).
    """
    track_id: int
    class_label: str
    bbox: BoundingBox
    bottom_center: Optional[Point] = None
    centroid: Optional[Point] = None
    missing_items: Optional[Tuple[str, ...]] = None
    speed_kmh: Optional[float] = None
    plane_hint: Optional[int] = None
    confidence: float = 1.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Detection":
        """
        Adapter: Create from the external detection dict shape.

        Accepts `cls`/`class_label`, `missing`/`missing_items` and `conf`/
        `confidence` spellings.
        """
        missing = d.get("missing", d.get("missing_items"))
        speed = d.get("speed_kmh")
        plane = d.get("plane_hint")
        return cls(
            track_id=int(d["track_id"]),
            class_label=str(d.get("cls", d.get("class_label", ""))),
            bbox=BoundingBox.from_tuple(d["bbox"]),
            bottom_center=_point_or_none(d.get("bottom_center")),
            centroid=_point_or_none(d.get("centroid")),
            missing_items=tuple(missing) if missing is not None else None,
            speed_kmh=float(speed) if speed is not None else None,
            plane_hint=int(plane) if plane is not None else None,
            confidence=float(d.get("conf", d.get("confidence", 1.0))),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the external detection dict shape."""
        d: Dict[str, Any] = {
            "track_id": self.track_id,
            "cls": self.class_label,
            "bbox": list(self.bbox.as_tuple()),
            "conf": self.confidence,
        }
        if self.bottom_center is not None:
            d["bottom_center"] = list(self.bottom_center)
        if self.centroid is not None:
            d["centroid"] = list(self.centroid)
        if self.missing_items is not None:
            d["missing"] = list(self.missing_items)
        if self.speed_kmh is not None:
            d["speed_kmh"] = self.speed_kmh
        if self.plane_hint is not None:
            d["plane_hint"] = self.plane_hint
        return d


@dataclass(frozen=True)
class PersonView:
    """Person projection: a track with a ground contact point."""
    track_id: int
    bottom_center: Point


@dataclass(frozen=True)
class VehicleView:
    """Vehicle projection: a track with a centroid and optional measured speed."""
    track_id: int
    centroid: Point
    speed_kmh: Optional[float] = None
    plane_hint: Optional[int] = None


@dataclass(frozen=True)
class ThrowingView:
    """Throwing classifier projection: label 1 for throwing, 0 for normal."""
    track_id: int
    label: int


@dataclass(frozen=True)
class PPEView:
    """PPE projection: the items missing in this frame (empty when compliant)."""
    track_id: int
    missing: Tuple[str, ...]


def as_person(det: Detection) -> Optional[PersonView]:
    """Project a detection for zone/proximity tests, or None if not applicable."""
    if det.class_label != PERSON_CLASS or det.bottom_center is None:
        return None
    return PersonView(track_id=det.track_id, bottom_center=det.bottom_center)


def as_vehicle(
    det: Detection,
    vehicle_classes: Tuple[str, ...] = DEFAULT_VEHICLE_CLASSES,
) -> Optional[VehicleView]:
    """Project a detection for motion tracking, or None if not applicable."""
    if det.class_label not in vehicle_classes or det.centroid is None:
        return None
    return VehicleView(
        track_id=det.track_id,
        centroid=det.centroid,
        speed_kmh=det.speed_kmh,
        plane_hint=det.plane_hint,
    )


def as_throwing(det: Detection) -> Optional[ThrowingView]:
    if det.class_label not in THROWING_CLASSES:
        return None
    return ThrowingView(track_id=det.track_id, label=1 if det.class_label == "throwing" else 0)


def as_ppe(det: Detection) -> Optional[PPEView]:
    if det.missing_items is None:
        return None
    return PPEView(track_id=det.track_id, missing=tuple(det.missing_items))


def detections_from_dicts(items: List[Dict[str, Any]]) -> List[Detection]:
    """
    Adapter: Convert a list of detection dicts to Detection objects.
    """
    if not items:
        return []
    return [Detection.from_dict(d) for d in items]
