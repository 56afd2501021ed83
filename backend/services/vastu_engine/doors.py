"""
Door placement on room walls.

A door has no coordinates of its own: it references a wall and a
normalized position along it, so moving the wall moves the door.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from services.layout_constants import (
    DOOR_SWING_ANGLE,
    DOOR_WALL_TOLERANCE,
    DOOR_WIDTH_DEFAULT,
    DOOR_WIDTH_WIDE,
)

from .errors import LayoutInputError
from .geometry import Point, distance_to_rect_boundary, is_finite_number, require_number
from .walls import Wall, point_along_wall

# Categories that get the wide door
WIDE_DOOR_CATEGORIES = ("living_room",)


@dataclass(frozen=True)
class Door:
    """A single door at a normalized offset along a wall."""

    id: str
    wall_id: str
    position: float                 # 0 = wall start, 1 = wall end
    width: float = DOOR_WIDTH_DEFAULT
    swing_angle: float = DOOR_SWING_ANGLE
    swing_direction: str = "left"   # left | right | double

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "wall_id": self.wall_id,
            "position": self.position,
            "width": self.width,
            "swing_angle": self.swing_angle,
            "swing_direction": self.swing_direction,
        }

    def __repr__(self) -> str:
        return f"Door(id={self.id}, wall={self.wall_id}, pos={self.position:.2f})"


def door_location(door: Door, walls: Sequence[Wall]) -> Optional[Point]:
    """
    Resolve a door's coordinates from its wall.

    Returns None if the wall no longer exists.
    """
    for wall in walls:
        if wall.id == door.wall_id:
            return point_along_wall(wall, door.position)
    return None


def _wall_touches_room(wall: Wall, room, tolerance: float) -> bool:
    return (
        distance_to_rect_boundary(room.rect, wall.start.x, wall.start.y) < tolerance
        or distance_to_rect_boundary(room.rect, wall.end.x, wall.end.y) < tolerance
    )


def place_doors(
    rooms: Sequence,
    walls: Sequence[Wall],
    tolerance: float = DOOR_WALL_TOLERANCE,
) -> List[Door]:
    """
    One door per room, at the midpoint of the first wall touching it.

    A wall touches a room when its start or end lies within *tolerance* of
    the room's boundary.  Living spaces get the wide door.

    Parameters
    ----------
    rooms : list[Room]
        Final room rectangles.
    walls : list[Wall]
        Walls synthesized from those rectangles.

    Returns
    -------
    list[Door]
        Rooms with no touching wall get no door.
    """
    doors: List[Door] = []

    for idx, room in enumerate(rooms):
        wall = next((w for w in walls if _wall_touches_room(w, room, tolerance)), None)
        if wall is None:
            continue

        doors.append(
            Door(
                id=f"door-{idx}",
                wall_id=wall.id,
                position=0.5,
                width=DOOR_WIDTH_WIDE if room.category in WIDE_DOOR_CATEGORIES else DOOR_WIDTH_DEFAULT,
            )
        )

    return doors


def door_from_dict(data: dict) -> Door:
    """Rebuild a door from external data; raises ``LayoutInputError`` when malformed."""
    if not isinstance(data, dict):
        raise LayoutInputError(f"Door entry must be an object, got {type(data).__name__}")
    door_id = data.get("id")
    wall_id = data.get("wall_id", data.get("wallId"))
    if not door_id or not wall_id:
        raise LayoutInputError("Door entry needs 'id' and 'wall_id'")
    context = f"Door {door_id}"

    position = require_number(data, "position", context)
    if not 0.0 <= position <= 1.0:
        raise LayoutInputError(f"{context}: position must lie in [0, 1]")

    width = data.get("width", DOOR_WIDTH_DEFAULT)
    if not is_finite_number(width) or width <= 0:
        raise LayoutInputError(f"{context}: width must be a positive number")

    return Door(
        id=str(door_id),
        wall_id=str(wall_id),
        position=position,
        width=float(width),
        swing_angle=data.get("swing_angle", data.get("swingAngle", DOOR_SWING_ANGLE)),
        swing_direction=data.get("swing_direction", data.get("swingDirection", "left")),
    )
