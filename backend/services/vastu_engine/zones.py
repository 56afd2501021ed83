"""
Compass zone grid.

A footprint is split into a 3x3 grid of equal thirds.  ``NW`` sits at the
origin, ``x`` grows east and ``y`` grows south (north is up).
"""

from dataclasses import dataclass, replace
from typing import List, Sequence

from services.layout_constants import ZONE_DIRECTIONS, ZONE_IDS, ZONE_LABELS

from .geometry import Rect

DEFAULT_ZONE = "C"

# (column, row) of each zone in the grid
_GRID_CELLS = {
    "NW": (0, 0), "N": (1, 0), "NE": (2, 0),
    "W": (0, 1), "C": (1, 1), "E": (2, 1),
    "SW": (0, 2), "S": (1, 2), "SE": (2, 2),
}


@dataclass(frozen=True)
class Zone:
    id: str
    x: float
    y: float
    w: float
    h: float

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.w, self.h)

    @property
    def area(self) -> float:
        return self.w * self.h

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.w and self.y <= y <= self.y + self.h

    def to_dict(self) -> dict:
        return {"id": self.id, "x": self.x, "y": self.y, "w": self.w, "h": self.h}


def compute_zones(width: float, height: float, origin_x: float = 0.0, origin_y: float = 0.0) -> List[Zone]:
    """
    Partition a ``width x height`` rectangle into the nine compass zones.

    Always returns nine zones in ``ZONE_IDS`` order.  The far edges are
    computed as ``width - 2w`` so the tiling sums to the exact area.
    """
    col_x = (0.0, width / 3, 2 * width / 3, width)
    row_y = (0.0, height / 3, 2 * height / 3, height)

    zones = []
    for zone_id in ZONE_IDS:
        col, row = _GRID_CELLS[zone_id]
        zones.append(
            Zone(
                id=zone_id,
                x=origin_x + col_x[col],
                y=origin_y + row_y[row],
                w=col_x[col + 1] - col_x[col],
                h=row_y[row + 1] - row_y[row],
            )
        )
    return zones


def zones_for_rect(rect: Rect) -> List[Zone]:
    """Zone grid laid over an arbitrary rectangle (e.g. a built envelope)."""
    return compute_zones(rect.width, rect.height, origin_x=rect.x, origin_y=rect.y)


def pick_zone(zones: Sequence[Zone], x: float, y: float) -> str:
    """
    Id of the first zone containing ``(x, y)`` (boundary-inclusive).

    Points outside every zone resolve to the centre zone.
    """
    for zone in zones:
        if zone.contains(x, y):
            return zone.id
    return DEFAULT_ZONE


def find_zone(zones: Sequence[Zone], zone_id: str) -> Zone:
    """Zone with *zone_id*; the centre zone when the id is absent."""
    for zone in zones:
        if zone.id == zone_id:
            return zone
    for zone in zones:
        if zone.id == DEFAULT_ZONE:
            return zone
    return zones[0]


def offset_zones(zones: Sequence[Zone], dx: float, dy: float) -> List[Zone]:
    return [replace(z, x=z.x + dx, y=z.y + dy) for z in zones]


def zone_label(zone_id: str) -> str:
    return ZONE_LABELS.get(zone_id, zone_id)


def zone_direction(zone_id: str) -> int:
    return ZONE_DIRECTIONS.get(zone_id, 0)
