"""
Freeform layout routes: generate, score and edit layouts, and wall
topology operations.
"""

from fastapi import APIRouter, HTTPException

from config import DEFAULT_VASTU_MODE, OPTIMIZER_ITERATIONS, OPTIMIZER_SEED
from schemas import (
    AcceptCandidateRequest,
    EditRoomRequest,
    EditRoomResponse,
    GenerateLayoutRequest,
    MoveWallRequest,
    ScoreRequest,
    TopologyOut,
    ValidateWallsRequest,
)
from services.layout_constants import ROOM_CATEGORIES, VASTU_RULES
from services.vastu_engine.compliance import layout_report
from services.vastu_engine.errors import LayoutInputError
from services.vastu_engine.geometry import Rect
from services.vastu_engine.pipeline import (
    accept_candidate,
    edit_room,
    generate_layout,
    state_from_result,
)
from services.vastu_engine.rooms import room_from_dict
from services.vastu_engine.snapshot import deserialize, serialize
from services.vastu_engine.walls import move_wall, validate_topology, wall_from_dict
from services.vastu_engine.zones import compute_zones

router = APIRouter(prefix="/api/layout", tags=["layout"])


def _walls(raw):
    return [wall_from_dict(w.model_dump()) for w in raw]


@router.post("/generate")
async def generate(data: GenerateLayoutRequest):
    """
    Pack the requested rooms into the footprint and improve Vastu compliance
    with a seeded local search.  Same input and seed give the same layout.
    """
    try:
        result = generate_layout(
            data.footprint.to_footprint(),
            [r.to_request() for r in data.rooms],
            iterations=OPTIMIZER_ITERATIONS if data.iterations is None else data.iterations,
            seed=OPTIMIZER_SEED if data.seed is None else data.seed,
        )
        state = state_from_result(result, data.vastu_mode or DEFAULT_VASTU_MODE)
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    payload = result.to_dict()
    payload["snapshot"] = serialize(state)
    return payload


@router.post("/score")
async def score(data: ScoreRequest):
    """Score rooms against the zone grid of the footprint."""
    fp = data.footprint
    zones = compute_zones(fp.width, fp.height)
    known = set(ROOM_CATEGORIES) | set(VASTU_RULES)
    try:
        rooms = [room_from_dict(r.model_dump(), zones, known_categories=known) for r in data.rooms]
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "rooms": [r.to_dict() for r in rooms],
        "compliance": layout_report(rooms).to_dict(),
    }


@router.post("/accept")
async def accept(data: AcceptCandidateRequest):
    """Validate and re-score an externally generated candidate layout."""
    try:
        result = accept_candidate(data.candidate, data.footprint.to_footprint())
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return result.to_dict()


@router.post("/edit", response_model=EditRoomResponse)
async def edit(data: EditRoomRequest):
    """
    Move or resize one room of a saved layout.  A strict-mode edit that
    lands in a forbidden zone comes back with ``valid=false`` and the
    snapshot unchanged.
    """
    try:
        state = deserialize(data.snapshot)
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if state.room(data.room_id) is None:
        raise HTTPException(status_code=404, detail=f"Room {data.room_id} not found")

    result = edit_room(state, data.room_id, Rect(data.x, data.y, data.width, data.height))
    return EditRoomResponse(
        valid=result.valid,
        message=result.message,
        score=result.score,
        snapshot=serialize(result.state),
    )


@router.post("/walls/move")
async def walls_move(data: MoveWallRequest):
    """Move a wall and drag every wall sharing one of its endpoints."""
    try:
        walls = _walls(data.walls)
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = move_wall(data.wall_id, data.offset.to_point(), walls)
    return {
        "success": result.success,
        "reason": result.reason,
        "moved_ids": result.moved_ids,
        "walls": [w.to_dict() for w in result.walls],
    }


@router.post("/walls/validate", response_model=TopologyOut)
async def walls_validate(data: ValidateWallsRequest):
    """Check that the external walls form a closed loop."""
    try:
        walls = _walls(data.walls)
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    report = validate_topology(walls)
    return TopologyOut(is_valid=report.is_valid, errors=report.errors)
