"""
Layout pipeline.

Freeform path: requests -> greedy placement -> local search -> walls and
doors synthesized from the final rectangles -> compliance report.

Template path: template -> adapter -> layout state.

Both paths end in a ``LayoutState``, the unit that edits, persistence and
the HTTP layer work with.  Externally generated candidates enter through
``accept_candidate`` and are re-validated exactly like local layouts.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from services.layout_constants import (
    EXTERNAL_EDGE_TOLERANCE,
    ROOM_CATEGORIES,
    VASTU_RULES,
    WALL_EXTERNAL_M,
    WALL_INTERNAL_M,
)

from .adapter import AdaptedLayout, adapt_template
from .compliance import VASTU_MODES, ComplianceReport, HardViolation, layout_report, validate_room
from .doors import Door, door_from_dict, place_doors
from .envelope import extract_envelope
from .errors import LayoutInputError
from .geometry import (
    Footprint,
    Point,
    Rect,
    bounding_rect,
    is_finite_number,
    validate_footprint,
)
from .optimizer import local_improve
from .placement import PlacementRecord, RoomRequest, greedy_place_rooms
from .rooms import Room, rederive, room_from_dict, with_rect
from .templates import PlanTemplate
from .walls import MoveResult, TopologyReport, Wall, move_wall, validate_topology, wall_from_dict
from .zones import Zone, compute_zones, zones_for_rect

logger = logging.getLogger(__name__)

# Reported and local scores closer than this are treated as agreeing
SCORE_AGREEMENT = 1.0


# ---------------------------------------------------------------------------
# Structural synthesis
# ---------------------------------------------------------------------------

def _on_bbox_side(x1, y1, x2, y2, bbox: Rect, tol: float) -> bool:
    return (
        (abs(y1 - bbox.y) < tol and abs(y2 - bbox.y) < tol)
        or (abs(x1 - bbox.right) < tol and abs(x2 - bbox.right) < tol)
        or (abs(y1 - bbox.bottom) < tol and abs(y2 - bbox.bottom) < tol)
        or (abs(x1 - bbox.x) < tol and abs(x2 - bbox.x) < tol)
    )


def generate_walls_from_rooms(
    rooms: Sequence[Room],
    tolerance: float = EXTERNAL_EDGE_TOLERANCE,
) -> List[Wall]:
    """
    Four walls per room (top, right, bottom, left), clockwise.

    An edge lying on the bounding box of all rooms is external.  Edges
    shared by neighbouring rooms are emitted once per room.
    """
    if not rooms:
        return []

    bbox = bounding_rect([r.rect for r in rooms])
    walls = []
    for room in rooms:
        left, top, right, bottom = room.rect.x, room.rect.y, room.rect.right, room.rect.bottom
        edges = (
            (left, top, right, top),
            (right, top, right, bottom),
            (right, bottom, left, bottom),
            (left, bottom, left, top),
        )
        for x1, y1, x2, y2 in edges:
            external = _on_bbox_side(x1, y1, x2, y2, bbox, tolerance)
            walls.append(
                Wall(
                    id=f"wall-{len(walls)}",
                    start=Point(x1, y1),
                    end=Point(x2, y2),
                    thickness=WALL_EXTERNAL_M if external else WALL_INTERNAL_M,
                    is_external=external,
                    adjacent_rooms=(room.id,),
                )
            )
    return walls


# ---------------------------------------------------------------------------
# Freeform generation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LayoutResult:
    footprint: Footprint
    rooms: List[Room]
    zones: List[Zone]
    walls: List[Wall]
    doors: List[Door]
    compliance: ComplianceReport
    placements: List[PlacementRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    seed: int = 1234
    iterations: int = 120
    initial_score: float = 0.0
    accepted_moves: int = 0
    hard_violation: Optional[HardViolation] = None

    def to_dict(self) -> dict:
        return {
            "footprint": self.footprint.to_dict(),
            "rooms": [r.to_dict() for r in self.rooms],
            "zones": [z.to_dict() for z in self.zones],
            "walls": [w.to_dict() for w in self.walls],
            "doors": [d.to_dict() for d in self.doors],
            "compliance": self.compliance.to_dict(),
            "placements": [p.to_dict() for p in self.placements],
            "warnings": list(self.warnings),
            "seed": self.seed,
            "iterations": self.iterations,
            # -inf when placement left a hard violation; not representable in JSON
            "initial_score": self.initial_score if math.isfinite(self.initial_score) else None,
            "accepted_moves": self.accepted_moves,
            "hard_violation": self.hard_violation.to_dict() if self.hard_violation else None,
        }


def generate_layout(
    footprint: Footprint,
    requests: Sequence[RoomRequest],
    iterations: int = 120,
    seed: int = 1234,
    rules: Optional[Dict] = None,
) -> LayoutResult:
    """
    Place, optimize and structure a freeform layout.

    Parameters
    ----------
    footprint : Footprint
        Plot rectangle.
    requests : list[RoomRequest]
        Rooms to place.
    iterations : int
        Local-search budget.
    seed : int
        PRNG seed; the whole pipeline is deterministic in it.

    Raises
    ------
    LayoutInputError
        Malformed footprint or request list.
    """
    rules = VASTU_RULES if rules is None else rules
    if not isinstance(iterations, int) or iterations < 0:
        raise LayoutInputError(f"Iterations must be a non-negative integer, got {iterations!r}")

    placed = greedy_place_rooms(footprint, requests, rules)
    improved = local_improve(placed.rooms, placed.zones, rules, iterations=iterations, seed=seed)

    rooms = improved.rooms
    walls = generate_walls_from_rooms(rooms)
    doors = place_doors(rooms, walls)
    report = layout_report(rooms, rules)

    logger.info(
        f"Generated layout: {len(rooms)} rooms, score {report.total_score:.1f} "
        f"(initial {improved.initial_score:.1f}, {improved.accepted_moves} moves accepted), seed={seed}"
    )

    return LayoutResult(
        footprint=validate_footprint(footprint),
        rooms=rooms,
        zones=placed.zones,
        walls=walls,
        doors=doors,
        compliance=report,
        placements=placed.records,
        warnings=placed.warnings,
        seed=seed,
        iterations=iterations,
        initial_score=improved.initial_score,
        accepted_moves=improved.accepted_moves,
        hard_violation=improved.hard_violation,
    )


# ---------------------------------------------------------------------------
# Layout state and edits
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LayoutState:
    footprint: Footprint
    rooms: Tuple[Room, ...]
    walls: Tuple[Wall, ...]
    doors: Tuple[Door, ...]
    zones: Tuple[Zone, ...]
    vastu_mode: str = "soft"
    template_id: Optional[str] = None

    def room(self, room_id: str) -> Optional[Room]:
        return next((r for r in self.rooms if r.id == room_id), None)

    def compliance(self, rules: Optional[Dict] = None) -> ComplianceReport:
        return layout_report(self.rooms, rules)

    def to_dict(self, rules: Optional[Dict] = None) -> dict:
        return {
            "footprint": self.footprint.to_dict(),
            "rooms": [r.to_dict() for r in self.rooms],
            "walls": [w.to_dict() for w in self.walls],
            "doors": [d.to_dict() for d in self.doors],
            "zones": [z.to_dict() for z in self.zones],
            "vastu_mode": self.vastu_mode,
            "template_id": self.template_id,
            "compliance": self.compliance(rules).to_dict(),
        }


@dataclass(frozen=True)
class EditResult:
    state: LayoutState
    valid: bool
    message: str
    score: int = 0


def _check_mode(vastu_mode: str) -> str:
    if vastu_mode not in VASTU_MODES:
        raise LayoutInputError(f"Unknown vastu mode {vastu_mode!r}; expected one of {', '.join(VASTU_MODES)}")
    return vastu_mode


def state_from_result(result: LayoutResult, vastu_mode: str = "soft") -> LayoutState:
    return LayoutState(
        footprint=result.footprint,
        rooms=tuple(result.rooms),
        walls=tuple(result.walls),
        doors=tuple(result.doors),
        zones=tuple(result.zones),
        vastu_mode=_check_mode(vastu_mode),
    )


def layout_from_template(
    template: PlanTemplate,
    footprint: Footprint,
    vastu_mode: str = "soft",
    rules: Optional[Dict] = None,
) -> LayoutState:
    adapted = adapt_template(template, footprint, rules)
    return state_from_adapted(adapted, footprint, vastu_mode)


def state_from_adapted(
    adapted: AdaptedLayout,
    footprint: Footprint,
    vastu_mode: str = "soft",
    rooms: Optional[Sequence[Room]] = None,
) -> LayoutState:
    """Wrap an adapted template as a layout state; *rooms* replaces the adapted rooms (e.g. after nudging)."""
    return LayoutState(
        footprint=validate_footprint(footprint),
        rooms=tuple(adapted.rooms if rooms is None else rooms),
        walls=tuple(adapted.walls),
        doors=tuple(adapted.doors),
        zones=tuple(adapted.zones),
        vastu_mode=_check_mode(vastu_mode),
        template_id=adapted.template_id,
    )


def edit_room(
    state: LayoutState,
    room_id: str,
    rect: Rect,
    rules: Optional[Dict] = None,
) -> EditResult:
    """
    Move or resize one room, re-deriving its zone and score.

    Under ``strict`` mode an edit that lands the room in a forbidden zone
    is refused and the original state is returned.  ``soft`` reports it as
    a warning; ``off`` accepts everything.

    Freeform layouts have their walls and doors synthesized again from the
    edited rooms.  Template walls are authored and are left to
    ``move_state_wall``.
    """
    room = state.room(room_id)
    if room is None:
        return EditResult(state, False, f"Room {room_id} not found")
    if rect.width <= 0 or rect.height <= 0:
        return EditResult(state, False, "Width and height must be positive")

    updated = with_rect(room, rect, state.zones, rules)
    verdict = validate_room(updated, state.vastu_mode, rules)
    if not verdict["is_valid"]:
        return EditResult(state, False, verdict["message"], verdict["score"])

    rooms = tuple(updated if r.id == room_id else r for r in state.rooms)
    if state.template_id is not None:
        return EditResult(replace(state, rooms=rooms), True, verdict["message"], verdict["score"])

    walls = generate_walls_from_rooms(rooms)
    doors = place_doors(rooms, walls)
    new_state = replace(state, rooms=rooms, walls=tuple(walls), doors=tuple(doors))
    return EditResult(new_state, True, verdict["message"], verdict["score"])


def move_state_wall(state: LayoutState, wall_id: str, offset: Point) -> Tuple[LayoutState, MoveResult]:
    """
    Move a wall (and its coupled endpoints); doors follow their walls.

    On a template layout, moving an external wall changes the envelope, so
    the zone grid is recomputed from it and every room is re-derived.
    Freeform zones come from the footprint and stay put.
    """
    result = move_wall(wall_id, offset, list(state.walls))
    if not result.success:
        return state, result

    new_state = replace(state, walls=tuple(result.walls))
    envelope_moved = any(w.is_external for w in result.walls if w.id in result.moved_ids)
    if state.template_id is None or not envelope_moved:
        return new_state, result

    zones = tuple(zones_for_rect(extract_envelope(result.walls)))
    rooms = tuple(rederive(r, zones) for r in state.rooms)
    logger.debug(f"External wall {wall_id} moved; zones recomputed for {len(rooms)} rooms")
    return replace(new_state, zones=zones, rooms=rooms), result


# ---------------------------------------------------------------------------
# External candidates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CandidateResult:
    rooms: List[Room]
    walls: List[Wall]
    doors: List[Door]
    zones: List[Zone]
    compliance: ComplianceReport
    topology: TopologyReport
    reported_score: Optional[float] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "rooms": [r.to_dict() for r in self.rooms],
            "walls": [w.to_dict() for w in self.walls],
            "doors": [d.to_dict() for d in self.doors],
            "zones": [z.to_dict() for z in self.zones],
            "compliance": self.compliance.to_dict(),
            "topology": {"is_valid": self.topology.is_valid, "errors": list(self.topology.errors)},
            "reported_score": self.reported_score,
            "warnings": list(self.warnings),
        }


def accept_candidate(
    candidate: dict,
    footprint: Footprint,
    rules: Optional[Dict] = None,
) -> CandidateResult:
    """
    Validate and re-score an externally produced layout.

    Rooms and walls are rebuilt from the raw data; zones come from the
    candidate's built envelope when it has external walls, otherwise from
    the footprint.  A candidate without walls gets walls and doors
    synthesized from its rooms.  The candidate's own ``score`` is kept only
    as ``reported_score``.

    Raises
    ------
    LayoutInputError
        Not an object, missing or empty ``rooms``, malformed entries,
        duplicate room ids or unknown categories.
    """
    rules = VASTU_RULES if rules is None else rules
    footprint = validate_footprint(footprint)
    if not isinstance(candidate, dict):
        raise LayoutInputError("Candidate layout must be an object")

    raw_rooms = candidate.get("rooms")
    if not isinstance(raw_rooms, list) or not raw_rooms:
        raise LayoutInputError("Candidate layout has no rooms")
    raw_walls = candidate.get("walls") or []
    if not isinstance(raw_walls, list):
        raise LayoutInputError("Candidate 'walls' must be a list")
    raw_doors = candidate.get("doors") or []
    if not isinstance(raw_doors, list):
        raise LayoutInputError("Candidate 'doors' must be a list")

    walls = [wall_from_dict(w) for w in raw_walls]
    envelope = extract_envelope(walls)
    if envelope.width > 0 and envelope.height > 0:
        zones = zones_for_rect(envelope)
    else:
        zones = compute_zones(footprint.width, footprint.height)

    known = set(ROOM_CATEGORIES) | set(rules)
    rooms = [room_from_dict(r, zones, rules, known_categories=known) for r in raw_rooms]
    ids = [r.id for r in rooms]
    if len(set(ids)) != len(ids):
        raise LayoutInputError("Candidate layout has duplicate room ids")

    warnings = []
    if walls:
        wall_ids = {w.id for w in walls}
        doors = []
        for raw in raw_doors:
            door = door_from_dict(raw)
            if door.wall_id not in wall_ids:
                warnings.append(f"Door {door.id} references unknown wall {door.wall_id}; dropped")
                continue
            doors.append(door)
    else:
        walls = generate_walls_from_rooms(rooms)
        doors = place_doors(rooms, walls)
        warnings.append("Candidate had no walls; walls and doors synthesized from rooms")

    report = layout_report(rooms, rules)
    topology = validate_topology(walls)

    reported = candidate.get("score")
    reported = float(reported) if is_finite_number(reported) else None
    if reported is not None and abs(reported - report.total_score) > SCORE_AGREEMENT:
        message = (
            f"Candidate reported score {reported:.1f} but scores {report.total_score:.1f} locally"
        )
        logger.warning(message)
        warnings.append(message)

    return CandidateResult(
        rooms=rooms,
        walls=walls,
        doors=doors,
        zones=zones,
        compliance=report,
        topology=topology,
        reported_score=reported,
        warnings=warnings,
    )
