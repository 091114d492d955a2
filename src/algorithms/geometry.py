"""
Geometry helpers shared by the surveillance modules.

Points are (x, y) tuples and bounding boxes are (x1, y1, x2, y2) sequences in
pixel coordinates. All functions are pure.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

Point = Tuple[float, float]
BBox = Sequence[float]


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """
    Ray casting test for a point against a polygon.

    Each edge counts as a crossing when the point's y lies in the half-open
    span between the edge endpoints' y values and the point is left of the
    edge at that y. A point on a horizontal edge never crosses it.

    Args:
        point: Point to test.
        polygon: Ordered polygon vertices.

    Returns:
        True if the point is inside; always False for fewer than 3 vertices.
    """
    if polygon is None or len(polygon) < 3:
        return False

    px, py = point[0], point[1]
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i][0], polygon[i][1]
        xj, yj = polygon[j][0], polygon[j][1]
        if (yi > py) != (yj > py) and px < (xj - xi) * (py - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def bbox_center(bbox: BBox) -> Point:
    return ((bbox[0] + bbox[2]) / 2, (bbox[1] + bbox[3]) / 2)


def bbox_bottom_center(bbox: BBox) -> Point:
    """Midpoint of the bottom edge (feet position for a person)."""
    return ((bbox[0] + bbox[2]) / 2, bbox[3])


def bboxes_overlap(b1: BBox, b2: BBox) -> bool:
    """
    Check whether two boxes share a positive-area region.

    Boxes that only touch along an edge or corner do not overlap.
    """
    return not (
        b1[2] <= b2[0]  # b1 left of b2
        or b1[0] >= b2[2]  # b1 right of b2
        or b1[3] <= b2[1]  # b1 above b2
        or b1[1] >= b2[3]  # b1 below b2
    )


def iou(b1: BBox, b2: BBox) -> float:
    """
    Intersection over Union of two boxes.

    Returns:
        IoU in [0, 1]; 0 when the boxes do not intersect or the union is empty.
    """
    x1 = max(b1[0], b2[0])
    y1 = max(b1[1], b2[1])
    x2 = min(b1[2], b2[2])
    y2 = min(b1[3], b2[3])

    if x2 < x1 or y2 < y1:
        return 0.0

    intersection = (x2 - x1) * (y2 - y1)
    area1 = (b1[2] - b1[0]) * (b1[3] - b1[1])
    area2 = (b2[2] - b2[0]) * (b2[3] - b2[1])
    union = area1 + area2 - intersection
    return intersection / union if union > 0 else 0.0
