"""
Plain geometric value types and rectangle utilities.

Every type here is an immutable dataclass: engine functions never mutate
their inputs, they return new values (``dataclasses.replace``).  Overlap and
gap tests go through Shapely so that they agree with the rest of the
polygon tooling.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from shapely.geometry import Point as ShapelyPoint, box

from .errors import LayoutInputError


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def translated(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle; ``(x, y)`` is the north-west corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def contains_point(self, x: float, y: float) -> bool:
        """Boundary-inclusive containment."""
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def to_polygon(self):
        """Rectangle as a Shapely polygon."""
        return box(self.x, self.y, self.right, self.bottom)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Footprint:
    """Nominal plot rectangle.

    ``orientation`` (degrees, 0-360) is carried for display only; it never
    rotates stored coordinates.
    """

    width: float
    height: float
    orientation: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height, "orientation": self.orientation}


# ---------------------------------------------------------------------------
# Validation helpers (boundary functions only)
# ---------------------------------------------------------------------------

def is_finite_number(value) -> bool:
    """True for real, finite numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate_footprint(footprint: Footprint) -> Footprint:
    """Reject non-positive or non-finite footprint dimensions."""
    for name in ("width", "height"):
        value = getattr(footprint, name)
        if not is_finite_number(value) or value <= 0:
            raise LayoutInputError(f"Footprint {name} must be a positive number, got {value!r}")
    if not is_finite_number(footprint.orientation):
        raise LayoutInputError(f"Footprint orientation must be numeric, got {footprint.orientation!r}")
    return Footprint(
        width=float(footprint.width),
        height=float(footprint.height),
        orientation=float(footprint.orientation) % 360.0,
    )


# ---------------------------------------------------------------------------
# Rectangle utilities
# ---------------------------------------------------------------------------

def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp into ``[lo, hi]``; when ``hi < lo`` the upper bound wins."""
    return min(max(value, lo), hi)


def rect_gap(a: Rect, b: Rect) -> float:
    """Shortest distance between two rectangles (0 when touching or overlapping)."""
    return a.to_polygon().distance(b.to_polygon())


def distance_to_rect_boundary(rect: Rect, x: float, y: float) -> float:
    """Distance from a point to the perimeter of *rect*."""
    return rect.to_polygon().exterior.distance(ShapelyPoint(x, y))


def detect_overlaps(rects: Sequence[Rect], tolerance: float = 0.01) -> List[Tuple[int, int]]:
    """
    Return ``(i, j)`` index pairs of rectangles that overlap.

    Rectangles sharing only an edge (zero-area intersection) are not
    overlapping.  *tolerance* is the minimum intersection area that counts.
    """
    polys = [r.to_polygon() for r in rects]
    overlaps = []
    for i in range(len(polys)):
        for j in range(i + 1, len(polys)):
            if polys[i].intersection(polys[j]).area > tolerance:
                overlaps.append((i, j))
    return overlaps


def bounding_rect(rects: Sequence[Rect]) -> Rect:
    """Bounding box of a set of rectangles; degenerate rect when empty."""
    if not rects:
        return Rect(0.0, 0.0, 0.0, 0.0)
    min_x = min(r.x for r in rects)
    min_y = min(r.y for r in rects)
    max_x = max(r.right for r in rects)
    max_y = max(r.bottom for r in rects)
    return Rect(min_x, min_y, max_x - min_x, max_y - min_y)


def require_number(data: dict, key: str, context: str) -> float:
    """``data[key]`` as a float; raises ``LayoutInputError`` if missing or non-finite."""
    if not isinstance(data, dict) or key not in data:
        raise LayoutInputError(f"{context}: missing field {key!r}")
    value = data[key]
    if not is_finite_number(value):
        raise LayoutInputError(f"{context}: field {key!r} must be a finite number, got {value!r}")
    return float(value)


def point_from_dict(data, context: str) -> Point:
    """Accept ``{"x": .., "y": ..}`` or an ``[x, y]`` pair."""
    if isinstance(data, (list, tuple)) and len(data) == 2:
        data = {"x": data[0], "y": data[1]}
    return Point(require_number(data, "x", context), require_number(data, "y", context))
