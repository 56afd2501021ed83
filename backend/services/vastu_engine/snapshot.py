"""
Project snapshots: the unit of save/load.

``serialize`` flattens a ``LayoutState`` into plain JSON-able data.
``deserialize`` rebuilds one, re-deriving every zone and score instead of
trusting the stored values.  Storage is the caller's business.
"""

import logging
from typing import Dict, Optional

from services.layout_constants import ROOM_CATEGORIES, VASTU_RULES

from .adapter import adapt_template
from .compliance import VASTU_MODES
from .doors import door_from_dict, place_doors
from .errors import LayoutInputError
from .geometry import Footprint, require_number, validate_footprint
from .pipeline import LayoutState, generate_walls_from_rooms
from .rooms import room_from_dict
from .templates import get_template
from .walls import wall_from_dict
from .zones import compute_zones

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def serialize(state: LayoutState, rules: Optional[Dict] = None) -> dict:
    return {
        "version": SNAPSHOT_VERSION,
        "footprint": state.footprint.to_dict(),
        "rooms": [r.to_dict() for r in state.rooms],
        "walls": [w.to_dict() for w in state.walls],
        "doors": [d.to_dict() for d in state.doors],
        "vastu_mode": state.vastu_mode,
        "compliance_score": round(state.compliance(rules).total_score, 2),
        "template_id": state.template_id,
    }


def deserialize(snapshot: dict, rules: Optional[Dict] = None) -> LayoutState:
    """
    Rebuild a layout state from a snapshot.

    Zones come from the adapted template when ``template_id`` names a known
    template, otherwise from the footprint.  Missing walls and doors are
    taken from the template, or synthesized from the rooms.

    Raises
    ------
    LayoutInputError
        Malformed footprint, rooms, walls or doors, or an unknown vastu mode.
    """
    rules = VASTU_RULES if rules is None else rules
    if not isinstance(snapshot, dict):
        raise LayoutInputError("Snapshot must be an object")

    raw_fp = snapshot.get("footprint")
    footprint = validate_footprint(
        Footprint(
            width=require_number(raw_fp, "width", "Footprint"),
            height=require_number(raw_fp, "height", "Footprint"),
            orientation=raw_fp.get("orientation", 0.0),
        )
    )

    vastu_mode = snapshot.get("vastu_mode", "soft")
    if vastu_mode not in VASTU_MODES:
        raise LayoutInputError(f"Unknown vastu mode {vastu_mode!r}")

    raw_rooms = snapshot.get("rooms")
    if not isinstance(raw_rooms, list):
        raise LayoutInputError("Snapshot 'rooms' must be a list")

    template_id = snapshot.get("template_id")
    template = get_template(template_id) if template_id else None
    adapted = adapt_template(template, footprint, rules) if template else None
    if template_id and template is None:
        logger.warning(f"Snapshot references unknown template {template_id}; using plot zones")

    zones = adapted.zones if adapted else compute_zones(footprint.width, footprint.height)
    known = set(ROOM_CATEGORIES) | set(rules)
    rooms = [room_from_dict(r, zones, rules, known_categories=known) for r in raw_rooms]

    raw_walls = snapshot.get("walls")
    if raw_walls:
        walls = [wall_from_dict(w) for w in raw_walls]
        doors = [door_from_dict(d) for d in snapshot.get("doors") or []]
    elif adapted:
        walls, doors = adapted.walls, adapted.doors
    else:
        walls = generate_walls_from_rooms(rooms)
        doors = place_doors(rooms, walls)

    return LayoutState(
        footprint=footprint,
        rooms=tuple(rooms),
        walls=tuple(walls),
        doors=tuple(doors),
        zones=tuple(zones),
        vastu_mode=vastu_mode,
        template_id=template_id if template else None,
    )
