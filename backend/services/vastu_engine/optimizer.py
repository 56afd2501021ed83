"""
Seeded local search over a placed layout.

Each iteration draws one mutation (swap two rooms' zones, nudge a room
inside its zone, or resize a room inside its zone) from the PRNG stream
and keeps it only when the result has no hard violation and a strictly
higher mean score than the best so far.  The iteration count is the only
termination control.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from services.layout_constants import VASTU_RULES, VIOLATION_FORBIDDEN

from .compliance import HardViolation, adjacency_violations, room_label, score_room
from .geometry import Rect, clamp
from .rng import Mulberry32, next_int, step
from .rooms import Room, with_rect
from .zones import Zone, find_zone

logger = logging.getLogger(__name__)

# Mutation kinds, drawn uniformly
MOVE_SWAP = 0
MOVE_NUDGE = 1
MOVE_RESIZE = 2

NUDGE_FRACTION = 0.3        # of the zone's extent, centred on zero
RESIZE_SPREAD = 0.2         # factor in [0.9, 1.1)
RESIZE_MAX_FRACTION = 0.9   # of the zone's extent
RESIZE_MIN_SIDE = 0.5


@dataclass(frozen=True)
class OptimizationResult:
    rooms: List[Room]
    score: float
    hard_violation: Optional[HardViolation]
    initial_score: float
    accepted_moves: int = 0


def layout_objective(rooms: Sequence[Room], rules: Optional[Dict] = None) -> Tuple[float, Optional[HardViolation]]:
    """
    Mean compliance score, or ``-inf`` with the first hard violation.

    A worship room within the veto gap of a wet room, or any room in a
    forbidden zone, rejects the layout outright.
    """
    adjacency = adjacency_violations(rooms)
    if adjacency:
        return -math.inf, adjacency[0]

    total = 0
    for room in rooms:
        score, violation = score_room(room.category, room.zone, rules)
        if violation == VIOLATION_FORBIDDEN:
            return -math.inf, HardViolation(
                room.id, f"{room_label(room.category)} is forbidden in {room.zone} zone"
            )
        total += score

    return total / max(1, len(rooms)), None


def _clamped_rect(x: float, y: float, w: float, h: float, zone: Zone) -> Rect:
    return Rect(
        clamp(x, zone.x, zone.x + zone.w - w),
        clamp(y, zone.y, zone.y + zone.h - h),
        w,
        h,
    )


def _swap(rooms, zones, rng, rules):
    n = len(rooms)
    rng, i = next_int(rng, n)
    rng, j = next_int(rng, n)
    if j == i:
        j = (i + 1) % n

    a, b = rooms[i], rooms[j]
    zone_a, zone_b = find_zone(zones, a.zone), find_zone(zones, b.zone)

    a_rect = _clamped_rect(
        zone_b.x + (zone_b.w - a.rect.width) / 2,
        zone_b.y + (zone_b.h - a.rect.height) / 2,
        a.rect.width, a.rect.height, zone_b,
    )
    b_rect = _clamped_rect(
        zone_a.x + (zone_a.w - b.rect.width) / 2,
        zone_a.y + (zone_a.h - b.rect.height) / 2,
        b.rect.width, b.rect.height, zone_a,
    )

    candidate = list(rooms)
    candidate[i] = with_rect(a, a_rect, zones, rules)
    candidate[j] = with_rect(b, b_rect, zones, rules)
    return rng, candidate


def _nudge(rooms, zones, rng, rules):
    rng, i = next_int(rng, len(rooms))
    room = rooms[i]
    zone = find_zone(zones, room.zone)
    rng, rx = step(rng)
    rng, ry = step(rng)
    dx = (rx - 0.5) * NUDGE_FRACTION * zone.w
    dy = (ry - 0.5) * NUDGE_FRACTION * zone.h

    rect = _clamped_rect(room.rect.x + dx, room.rect.y + dy, room.rect.width, room.rect.height, zone)
    candidate = list(rooms)
    candidate[i] = with_rect(room, rect, zones, rules)
    return rng, candidate


def _resize(rooms, zones, rng, rules):
    rng, i = next_int(rng, len(rooms))
    room = rooms[i]
    rng, r = step(rng)
    factor = 1 + (r - 0.5) * RESIZE_SPREAD
    zone = find_zone(zones, room.zone)

    w = max(RESIZE_MIN_SIDE, min(room.rect.width * factor, RESIZE_MAX_FRACTION * zone.w))
    h = max(RESIZE_MIN_SIDE, min(room.rect.height * factor, RESIZE_MAX_FRACTION * zone.h))

    rect = _clamped_rect(room.rect.x, room.rect.y, w, h, zone)
    candidate = list(rooms)
    candidate[i] = with_rect(room, rect, zones, rules)
    return rng, candidate


def local_improve(
    rooms: Sequence[Room],
    zones: Sequence[Zone],
    rules: Optional[Dict] = None,
    iterations: int = 150,
    seed: int = 1234,
) -> OptimizationResult:
    """
    Hill-climb *rooms* towards a higher mean compliance score.

    Parameters
    ----------
    rooms : list[Room]
        Placed layout; never modified.
    zones : list[Zone]
        Zone grid the rooms were placed in.
    iterations : int
        Fixed number of mutation attempts.
    seed : int
        PRNG seed; identical inputs and seed give identical output.

    Returns
    -------
    OptimizationResult
        If the initial layout already has a hard violation it is returned
        as-is with that violation.  Otherwise ``score`` is never below
        ``initial_score``.
    """
    rules = VASTU_RULES if rules is None else rules
    best = list(rooms)
    best_score, hard = layout_objective(best, rules)

    if hard is not None:
        logger.warning(f"Initial layout has a hard violation ({hard.reason}); skipping optimization")
        return OptimizationResult(best, best_score, hard, best_score, 0)

    if not best:
        return OptimizationResult(best, best_score, None, best_score, 0)

    initial_score = best_score
    accepted = 0
    rng = Mulberry32.seeded(seed)

    for it in range(iterations):
        rng, move = next_int(rng, 3)

        if move == MOVE_SWAP and len(best) >= 2:
            rng, candidate = _swap(best, zones, rng, rules)
        elif move == MOVE_NUDGE:
            rng, candidate = _nudge(best, zones, rng, rules)
        else:
            # MOVE_RESIZE, or a swap drawn for a single-room layout
            rng, candidate = _resize(best, zones, rng, rules)

        score, violation = layout_objective(candidate, rules)
        if violation is None and score > best_score:
            logger.debug(f"Iteration {it}: move {move} accepted, score {best_score:.2f} -> {score:.2f}")
            best, best_score = candidate, score
            accepted += 1

    return OptimizationResult(best, best_score, None, initial_score, accepted)
