"""
Room model.

``zone``, ``score`` and ``violation`` are derived from ``(rect, category)``
and the active zone grid.  Rooms are frozen, so the only way to change a
rectangle is ``with_rect`` which re-derives all three in the same step.
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional, Sequence

from .compliance import room_label, score_room
from .errors import LayoutInputError
from .geometry import Rect, require_number
from .zones import Zone, pick_zone


@dataclass(frozen=True)
class Room:
    id: str
    category: str
    label: str
    rect: Rect
    zone: str
    score: int
    violation: Optional[str] = None
    template_id: Optional[str] = None

    @property
    def area(self) -> float:
        return self.rect.area

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "label": self.label,
            "x": self.rect.x,
            "y": self.rect.y,
            "width": self.rect.width,
            "height": self.rect.height,
            "zone": self.zone,
            "score": self.score,
            "violation": self.violation,
            "template_id": self.template_id,
        }

    def __repr__(self) -> str:
        return (
            f"Room(id={self.id}, category={self.category}, zone={self.zone}, "
            f"rect=({self.rect.x:.2f},{self.rect.y:.2f},{self.rect.width:.2f}x{self.rect.height:.2f}))"
        )


def make_room(
    room_id: str,
    category: str,
    rect: Rect,
    zones: Sequence[Zone],
    label: Optional[str] = None,
    template_id: Optional[str] = None,
    rules: Optional[Dict] = None,
) -> Room:
    """Build a room with its zone taken from the rectangle's centre."""
    center = rect.center
    zone = pick_zone(zones, center.x, center.y)
    score, violation = score_room(category, zone, rules)
    return Room(
        id=room_id,
        category=category,
        label=label if label is not None else room_label(category),
        rect=rect,
        zone=zone,
        score=score,
        violation=violation,
        template_id=template_id,
    )


def with_rect(room: Room, rect: Rect, zones: Sequence[Zone], rules: Optional[Dict] = None) -> Room:
    """Copy of *room* moved/resized to *rect*, derived fields refreshed."""
    return rederive(replace(room, rect=rect), zones, rules)


def rederive(room: Room, zones: Sequence[Zone], rules: Optional[Dict] = None) -> Room:
    """Recompute zone, score and violation against *zones*."""
    return make_room(
        room.id,
        room.category,
        room.rect,
        zones,
        label=room.label,
        template_id=room.template_id,
        rules=rules,
    )


def room_from_dict(
    data: dict,
    zones: Sequence[Zone],
    rules: Optional[Dict] = None,
    known_categories: Optional[Sequence[str]] = None,
) -> Room:
    """
    Rebuild a room from external data (snapshot or generated candidate).

    Only ``id``, ``category`` (or ``type``), ``label`` and the rectangle are
    read; zone and score are always re-derived.

    Raises
    ------
    LayoutInputError
        Missing fields, non-numeric coordinates, non-positive size or an
        unknown category.
    """
    if not isinstance(data, dict):
        raise LayoutInputError(f"Room entry must be an object, got {type(data).__name__}")
    room_id = data.get("id")
    if not room_id:
        raise LayoutInputError("Room entry is missing 'id'")
    context = f"Room {room_id}"

    category = data.get("category") or data.get("type")
    if not category:
        raise LayoutInputError(f"{context}: missing 'category'")
    if known_categories is not None and category not in known_categories:
        raise LayoutInputError(f"{context}: unknown category {category!r}")

    rect = Rect(
        require_number(data, "x", context),
        require_number(data, "y", context),
        require_number(data, "width", context),
        require_number(data, "height", context),
    )
    if rect.width <= 0 or rect.height <= 0:
        raise LayoutInputError(f"{context}: width and height must be positive")

    return make_room(
        str(room_id),
        category,
        rect,
        zones,
        label=data.get("label"),
        template_id=data.get("template_id"),
        rules=rules,
    )
