"""
Vastu layout engine.

Compass zones, rule-based compliance scoring, greedy room placement with a
seeded local search, template adaptation and wall topology.  Everything in
this package is synchronous and works on immutable values.
"""

from .adapter import AdaptedLayout, adapt_template, nudge_rooms_to_intent, resize_room, validate_fit
from .compliance import ComplianceReport, layout_report, score_report, score_room, validate_room
from .doors import Door, door_location, place_doors
from .envelope import extract_envelope
from .errors import LayoutInputError
from .geometry import Footprint, Point, Rect, Size
from .optimizer import local_improve
from .pipeline import (
    LayoutState,
    accept_candidate,
    edit_room,
    generate_layout,
    generate_walls_from_rooms,
    layout_from_template,
    move_state_wall,
    state_from_adapted,
)
from .placement import RoomRequest, greedy_place_rooms
from .rooms import Room
from .snapshot import deserialize, serialize
from .templates import PlanTemplate, get_template, list_templates, templates_by_bedrooms
from .walls import Wall, WallGraph, move_wall, validate_topology, walls_connected
from .zones import Zone, compute_zones, pick_zone

__all__ = [
    "AdaptedLayout",
    "adapt_template",
    "nudge_rooms_to_intent",
    "resize_room",
    "validate_fit",
    "ComplianceReport",
    "layout_report",
    "score_report",
    "score_room",
    "validate_room",
    "Door",
    "door_location",
    "place_doors",
    "extract_envelope",
    "LayoutInputError",
    "Footprint",
    "Point",
    "Rect",
    "Size",
    "local_improve",
    "LayoutState",
    "accept_candidate",
    "edit_room",
    "generate_layout",
    "generate_walls_from_rooms",
    "layout_from_template",
    "move_state_wall",
    "state_from_adapted",
    "RoomRequest",
    "greedy_place_rooms",
    "Room",
    "deserialize",
    "serialize",
    "PlanTemplate",
    "get_template",
    "list_templates",
    "templates_by_bedrooms",
    "Wall",
    "WallGraph",
    "move_wall",
    "validate_topology",
    "walls_connected",
    "Zone",
    "compute_zones",
    "pick_zone",
]
