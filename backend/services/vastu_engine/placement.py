"""
Greedy guillotine placement of room requests into the compass grid.

The nine zone rectangles are the initial free-rectangle pool.  Requests are
placed largest/most-urgent first, each trying its preferred zones, then its
allowed zones, then everything else.  A placed room takes the origin of the
first free rectangle big enough for it and the leftover is split into a
right strip and a bottom strip.

Placement never fails: when no zone fits and no free rectangle is big
enough to shrink into, the room is forced into the centre of the ``C``
zone.  Forced rooms may overlap earlier ones; they are recorded as
``forced`` and logged so the caller can warn about them.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from services.layout_constants import (
    DEFAULT_PRIORITY,
    MIN_FREE_RECT,
    ROOM_CATEGORIES,
    TARGET_ASPECT,
    VASTU_RULES,
    ZONE_IDS,
)

from .errors import LayoutInputError
from .geometry import Footprint, Rect, detect_overlaps, is_finite_number, validate_footprint
from .rooms import Room, make_room
from .zones import DEFAULT_ZONE, Zone, compute_zones, find_zone

logger = logging.getLogger(__name__)

# Size comparisons against free rectangles
_FIT_EPSILON = 1e-6

PLACED_EXACT = "exact"
PLACED_SHRUNK = "shrunk"
PLACED_FORCED = "forced"


@dataclass(frozen=True)
class RoomRequest:
    category: str
    target_area: float
    priority: Optional[int] = None
    id: Optional[str] = None
    label: Optional[str] = None

    @property
    def effective_priority(self) -> int:
        return DEFAULT_PRIORITY if self.priority is None else self.priority


@dataclass(frozen=True)
class FreeRect:
    zone_id: str
    x: float
    y: float
    w: float
    h: float

    @property
    def area(self) -> float:
        return self.w * self.h


@dataclass(frozen=True)
class PlacementRecord:
    room_id: str
    zone: str           # zone the room landed in (before centre re-derivation)
    method: str         # exact | shrunk | forced

    def to_dict(self) -> dict:
        return {"room_id": self.room_id, "zone": self.zone, "method": self.method}


@dataclass
class PlacementResult:
    rooms: List[Room]
    zones: List[Zone]
    records: List[PlacementRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def forced(self) -> List[str]:
        return [r.room_id for r in self.records if r.method == PLACED_FORCED]


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def validate_requests(requests: Sequence[RoomRequest], rules: Optional[Dict] = None) -> List[RoomRequest]:
    """
    Check a request list and assign ids to requests that lack one.

    Ids default to ``room-<input index>`` so they do not depend on the
    placement order.

    Raises
    ------
    LayoutInputError
        Empty list, unknown category, or a non-positive / non-finite area.
    """
    if not requests:
        raise LayoutInputError("At least one room request is required")

    rules = VASTU_RULES if rules is None else rules
    known = set(ROOM_CATEGORIES) | set(rules)
    checked = []
    seen_ids = set()

    for idx, req in enumerate(requests):
        if req.category not in known:
            raise LayoutInputError(f"Unknown room category: {req.category!r}")
        if not is_finite_number(req.target_area) or req.target_area <= 0:
            raise LayoutInputError(
                f"Room {idx} ({req.category}) needs a positive target area, got {req.target_area!r}"
            )
        if req.priority is not None and not is_finite_number(req.priority):
            raise LayoutInputError(f"Room {idx} ({req.category}) has a non-numeric priority")

        room_id = req.id or f"room-{idx}"
        if room_id in seen_ids:
            raise LayoutInputError(f"Duplicate room id: {room_id}")
        seen_ids.add(room_id)

        checked.append(
            RoomRequest(
                category=req.category,
                target_area=float(req.target_area),
                priority=req.priority,
                id=room_id,
                label=req.label,
            )
        )
    return checked


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def zone_try_order(category: str, rules: Dict) -> List[str]:
    """Preferred zones, then allowed, then the rest in grid order."""
    rule = rules.get(category) or {}
    preferred = list(rule.get("preferred", []))
    allowed = list(rule.get("allowed", []))
    rest = [z for z in ZONE_IDS if z not in preferred and z not in allowed]
    return preferred + allowed + rest


def desired_size(target_area: float, aspect: float = TARGET_ASPECT):
    """``(w, h)`` of a rectangle with the target area and aspect ratio."""
    return math.sqrt(target_area * aspect), math.sqrt(target_area / aspect)


def _split(fr: FreeRect, w: float, h: float) -> List[FreeRect]:
    """Guillotine split of *fr* after placing ``w x h`` at its origin."""
    right = FreeRect(fr.zone_id, fr.x + w, fr.y, fr.w - w, h)
    bottom = FreeRect(fr.zone_id, fr.x, fr.y + h, fr.w, fr.h - h)
    return [r for r in (right, bottom) if r.w > MIN_FREE_RECT and r.h > MIN_FREE_RECT]


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

def greedy_place_rooms(
    footprint: Footprint,
    requests: Sequence[RoomRequest],
    rules: Optional[Dict] = None,
) -> PlacementResult:
    """
    Place every request into the zone grid of *footprint*.

    Parameters
    ----------
    footprint : Footprint
        Plot rectangle; validated here.
    requests : list[RoomRequest]
        Rooms to place; validated here.
    rules : dict, optional
        Vastu rule table (defaults to the loaded table).

    Returns
    -------
    PlacementResult
        One room per request, in placement order, with zones re-derived
        from each room's centre.
    """
    rules = VASTU_RULES if rules is None else rules
    footprint = validate_footprint(footprint)
    checked = validate_requests(requests, rules)

    zones = compute_zones(footprint.width, footprint.height)
    free_rects: List[FreeRect] = [FreeRect(z.id, z.x, z.y, z.w, z.h) for z in zones]

    # sorted() is stable: equal priority and area keep input order
    ordered = sorted(checked, key=lambda r: (r.effective_priority, -r.target_area))

    rooms: List[Room] = []
    records: List[PlacementRecord] = []
    warnings: List[str] = []

    for req in ordered:
        want_w, want_h = desired_size(req.target_area)
        rect = None
        landed = None
        method = None

        for zone_id in zone_try_order(req.category, rules):
            idx = next(
                (
                    i for i, fr in enumerate(free_rects)
                    if fr.zone_id == zone_id
                    and fr.w >= want_w - _FIT_EPSILON
                    and fr.h >= want_h - _FIT_EPSILON
                ),
                None,
            )
            if idx is None:
                continue
            fr = free_rects.pop(idx)
            w, h = min(want_w, fr.w), min(want_h, fr.h)
            rect = Rect(fr.x, fr.y, w, h)
            free_rects.extend(_split(fr, w, h))
            landed, method = zone_id, PLACED_EXACT
            break

        if rect is None:
            # Shrink into the largest free rectangle holding half the target
            candidates = [
                (i, fr) for i, fr in enumerate(free_rects)
                if fr.area >= 0.5 * req.target_area
            ]
            if candidates:
                # Equal grid thirds differ only by float noise; first in pool order wins
                best = max(fr.area for _, fr in candidates)
                idx, fr = next(c for c in candidates if c[1].area >= best - _FIT_EPSILON)
                free_rects.pop(idx)
                area = min(fr.area, req.target_area)
                w = min(fr.w, max(1.0, math.sqrt(area * TARGET_ASPECT)))
                h = min(fr.h, max(1.0, math.sqrt(area / TARGET_ASPECT)))
                rect = Rect(fr.x, fr.y, w, h)
                landed, method = fr.zone_id, PLACED_SHRUNK

        if rect is None:
            center = find_zone(zones, DEFAULT_ZONE)
            w = max(0.0, min(want_w, center.w - 0.1))
            h = max(0.0, min(want_h, center.h - 0.1))
            rect = Rect(center.x + (center.w - w) / 2, center.y + (center.h - h) / 2, w, h)
            landed, method = DEFAULT_ZONE, PLACED_FORCED
            message = f"{req.id} ({req.category}) could not be packed; forced into the centre zone"
            logger.warning(message)
            warnings.append(message)

        rooms.append(
            make_room(req.id, req.category, rect, zones, label=req.label, rules=rules)
        )
        records.append(PlacementRecord(room_id=req.id, zone=landed, method=method))

    for i, j in detect_overlaps([r.rect for r in rooms]):
        message = f"Rooms {rooms[i].id} and {rooms[j].id} overlap"
        logger.warning(message)
        warnings.append(message)

    return PlacementResult(rooms=rooms, zones=zones, records=records, warnings=warnings)
