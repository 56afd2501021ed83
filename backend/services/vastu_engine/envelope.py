"""
Built envelope extraction.

The Vastu grid is laid over the *built* structure (the bounding box of the
external walls), not the nominal plot.  Adapting a small template onto a
large plot must not stretch the compass grid into the unbuilt margin.
"""

from typing import Dict, Sequence, Tuple

from .geometry import Point, Rect, Size


def extract_envelope(walls: Sequence) -> Rect:
    """Bounding box of every external wall; ``Rect(0, 0, 0, 0)`` if none."""
    external = [w for w in walls if w.is_external]
    if not external:
        return Rect(0.0, 0.0, 0.0, 0.0)

    xs = [c for w in external for c in (w.start.x, w.end.x)]
    ys = [c for w in external for c in (w.start.y, w.end.y)]
    min_x, min_y = min(xs), min(ys)
    return Rect(min_x, min_y, max(xs) - min_x, max(ys) - min_y)


def envelope_center(envelope: Rect) -> Point:
    return envelope.center


def envelope_area(envelope: Rect) -> float:
    return envelope.area


def point_in_envelope(point: Point, envelope: Rect) -> bool:
    return envelope.contains_point(point.x, point.y)


def clamp_to_envelope(rect: Rect, envelope: Rect) -> Rect:
    """Slide (and if needed shrink) *rect* so it lies inside *envelope*."""
    x = max(envelope.x, min(envelope.right - rect.width, rect.x))
    y = max(envelope.y, min(envelope.bottom - rect.height, rect.y))
    width, height = rect.width, rect.height

    if width > envelope.width:
        width, x = envelope.width, envelope.x
    if height > envelope.height:
        height, y = envelope.height, envelope.y

    return Rect(x, y, width, height)


def scale_envelope(base: Size, target: Size) -> Tuple[float, Size]:
    """Largest uniform scale that fits *base* inside *target*."""
    scale = min(target.width / base.width, target.height / base.height)
    return scale, Size(base.width * scale, base.height * scale)


def buildable_envelope(plot: Size, setbacks: Dict[str, float]) -> Rect:
    """Plot rectangle minus front/rear/left/right setbacks (front is north)."""
    left = setbacks.get("left", 0.0)
    right = setbacks.get("right", 0.0)
    front = setbacks.get("front", 0.0)
    rear = setbacks.get("rear", 0.0)
    return Rect(left, front, plot.width - left - right, plot.height - front - rear)


def fits_within_buildable(envelope: Size, buildable: Rect) -> bool:
    return envelope.width <= buildable.width and envelope.height <= buildable.height
