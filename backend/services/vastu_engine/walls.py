"""
Wall topology.

Walls are undirected segments that meet at shared endpoints.  Two walls are
connected when any pair of their endpoints lies within 1 cm.  ``WallGraph``
indexes endpoints by their rounded coordinates so connectivity lookups do
not need a pairwise scan, and ``move_wall`` drags every coupled endpoint
with the wall it moves.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple, Union

from services.layout_constants import (
    AXIS_ALIGNED_DEGREES,
    CONNECT_TOLERANCE,
    WALL_EXTERNAL_M,
    WALL_INTERNAL_M,
)

from .errors import LayoutInputError
from .geometry import Point, is_finite_number, point_from_dict

END_NAMES = ("start", "end")


@dataclass(frozen=True)
class Wall:
    id: str
    start: Point
    end: Point
    thickness: float
    is_external: bool = False
    adjacent_rooms: Tuple[str, ...] = ()

    def endpoint(self, name: str) -> Point:
        return self.start if name == "start" else self.end

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "thickness": self.thickness,
            "is_external": self.is_external,
            "adjacent_rooms": list(self.adjacent_rooms),
        }


@dataclass(frozen=True)
class MoveResult:
    success: bool
    walls: List[Wall]
    moved_ids: List[str] = field(default_factory=list)
    reason: Optional[str] = None


@dataclass(frozen=True)
class TopologyReport:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Segment geometry
# ---------------------------------------------------------------------------

def distance_point_to_segment(p: Point, a: Point, b: Point) -> float:
    """Distance from *p* to segment ``ab``; a degenerate segment is the point *a*."""
    cx, cy = b.x - a.x, b.y - a.y
    len_sq = cx * cx + cy * cy
    if len_sq == 0:
        return math.hypot(p.x - a.x, p.y - a.y)

    t = ((p.x - a.x) * cx + (p.y - a.y) * cy) / len_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p.x - (a.x + t * cx), p.y - (a.y + t * cy))


def wall_length(wall: Wall) -> float:
    return wall.start.distance_to(wall.end)


def wall_midpoint(wall: Wall) -> Point:
    return Point((wall.start.x + wall.end.x) / 2, (wall.start.y + wall.end.y) / 2)


def wall_angle(wall: Wall) -> float:
    """Direction of the wall in radians."""
    return math.atan2(wall.end.y - wall.start.y, wall.end.x - wall.start.x)


def is_axis_aligned(wall: Wall, tolerance_deg: float = AXIS_ALIGNED_DEGREES) -> bool:
    """Horizontal or vertical within *tolerance_deg*."""
    threshold = math.radians(tolerance_deg)
    normalized = abs(wall_angle(wall)) % (math.pi / 2)
    return normalized < threshold or (math.pi / 2 - normalized) < threshold


def point_along_wall(wall: Wall, t: float) -> Point:
    """Point at normalized offset *t* (0 = start, 1 = end)."""
    return Point(
        wall.start.x + t * (wall.end.x - wall.start.x),
        wall.start.y + t * (wall.end.y - wall.start.y),
    )


def snap_to_wall(point: Point, wall: Wall) -> Point:
    """Nearest point on the wall segment."""
    cx, cy = wall.end.x - wall.start.x, wall.end.y - wall.start.y
    len_sq = cx * cx + cy * cy
    if len_sq == 0:
        return wall.start
    t = ((point.x - wall.start.x) * cx + (point.y - wall.start.y) * cy) / len_sq
    return point_along_wall(wall, max(0.0, min(1.0, t)))


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------

def walls_connected(w1: Wall, w2: Wall, tolerance: float = CONNECT_TOLERANCE) -> bool:
    """True iff any of the four endpoint pairs is closer than *tolerance*."""
    return any(
        p.distance_to(q) < tolerance
        for p in (w1.start, w1.end)
        for q in (w2.start, w2.end)
    )


class WallGraph:
    """
    Endpoint index over a wall set.

    Endpoints are bucketed on a grid the size of the connection tolerance;
    a lookup inspects the 3x3 neighbouring buckets and then confirms the
    exact distance, so results match ``walls_connected``.
    """

    def __init__(self, walls: Sequence[Wall], tolerance: float = CONNECT_TOLERANCE):
        self.tolerance = tolerance
        self.walls: Dict[str, Wall] = {w.id: w for w in walls}
        self._buckets: Dict[Tuple[int, int], List[Tuple[str, str]]] = defaultdict(list)
        for w in walls:
            for name in END_NAMES:
                self._buckets[self._key(w.endpoint(name))].append((w.id, name))

    def _key(self, p: Point) -> Tuple[int, int]:
        return (math.floor(p.x / self.tolerance), math.floor(p.y / self.tolerance))

    def endpoints_near(self, point: Point, exclude: Optional[str] = None) -> List[Tuple[str, str]]:
        """``(wall_id, 'start'|'end')`` of every endpoint within tolerance of *point*."""
        kx, ky = self._key(point)
        found = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for wall_id, name in self._buckets.get((kx + dx, ky + dy), ()):
                    if wall_id == exclude:
                        continue
                    if self.walls[wall_id].endpoint(name).distance_to(point) < self.tolerance:
                        found.append((wall_id, name))
        return found

    def neighbours(self, wall_id: str) -> List[str]:
        """Ids of walls sharing an endpoint with *wall_id*, in first-seen order."""
        wall = self.walls[wall_id]
        seen = []
        for name in END_NAMES:
            for other_id, _ in self.endpoints_near(wall.endpoint(name), exclude=wall_id):
                if other_id not in seen:
                    seen.append(other_id)
        return seen


def connected_walls(wall: Wall, walls: Sequence[Wall]) -> List[Wall]:
    """Every other wall in *walls* connected to *wall*."""
    others = [w for w in walls if w.id != wall.id]
    graph = WallGraph([wall] + others)
    by_id = {w.id: w for w in others}
    return [by_id[i] for i in graph.neighbours(wall.id)]


def move_wall(
    wall: Union[Wall, str],
    offset: Point,
    walls: Sequence[Wall],
) -> MoveResult:
    """
    Translate a wall and every endpoint coupled to it.

    The wall's own endpoints move by *offset*; for every other wall, only
    the endpoints that coincided with one of the original endpoints move,
    by the same offset.  Unknown ids fail with the input list returned
    untouched.  Walls that are not coupled are returned as the same
    objects.
    """
    wall_id = wall if isinstance(wall, str) else wall.id
    graph = WallGraph(walls)
    target = graph.walls.get(wall_id)
    if target is None:
        return MoveResult(success=False, walls=walls, reason=f"Wall {wall_id} not found")

    moves: Dict[str, set] = defaultdict(set)
    moves[wall_id].update(END_NAMES)
    for name in END_NAMES:
        for other_id, other_end in graph.endpoints_near(target.endpoint(name), exclude=wall_id):
            moves[other_id].add(other_end)

    updated = []
    for w in walls:
        ends = moves.get(w.id)
        if not ends:
            updated.append(w)
            continue
        changes = {name: w.endpoint(name).translated(offset.x, offset.y) for name in ends}
        updated.append(replace(w, **changes))

    return MoveResult(success=True, walls=updated, moved_ids=[w.id for w in walls if w.id in moves])


def validate_topology(walls: Sequence[Wall]) -> TopologyReport:
    """Every external wall needs at least two external neighbours (closed loop)."""
    external = [w for w in walls if w.is_external]
    graph = WallGraph(external)
    errors = [
        f"External wall {w.id} is not properly connected"
        for w in external
        if len(graph.neighbours(w.id)) < 2
    ]
    return TopologyReport(is_valid=not errors, errors=errors)


def wall_from_dict(data: dict) -> Wall:
    """Rebuild a wall from external data; raises ``LayoutInputError`` when malformed."""
    if not isinstance(data, dict):
        raise LayoutInputError(f"Wall entry must be an object, got {type(data).__name__}")
    wall_id = data.get("id")
    if not wall_id:
        raise LayoutInputError("Wall entry is missing 'id'")
    context = f"Wall {wall_id}"

    for key in ("start", "end"):
        if key not in data:
            raise LayoutInputError(f"{context}: missing field {key!r}")

    is_external = bool(data.get("is_external", data.get("isExternal", False)))
    thickness = data.get("thickness")
    if thickness is None:
        thickness = WALL_EXTERNAL_M if is_external else WALL_INTERNAL_M
    if not is_finite_number(thickness) or thickness <= 0:
        raise LayoutInputError(f"{context}: thickness must be a positive number")

    return Wall(
        id=str(wall_id),
        start=point_from_dict(data["start"], context),
        end=point_from_dict(data["end"], context),
        thickness=float(thickness),
        is_external=is_external,
        adjacent_rooms=tuple(data.get("adjacent_rooms", ())),
    )
