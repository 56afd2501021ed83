"""
Fit a reference template onto a plot.

The template is scaled uniformly (never x and y independently) so that it
fills at most 90% of the plot in either direction, then centred.  Zones
are laid over the built envelope of the scaled external walls, not the
plot, so a small design on a large plot keeps its own compass grid.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from services.layout_constants import FIT_SCALE_MAX, FIT_SCALE_MIN, TEMPLATE_MARGIN, VASTU_RULES

from .doors import Door
from .envelope import extract_envelope, scale_envelope
from .geometry import Footprint, Point, Rect, Size, clamp, is_finite_number, validate_footprint
from .rooms import Room, make_room, with_rect
from .templates import PlanTemplate, RoomTemplate
from .walls import Wall
from .zones import Zone, zones_for_rect

logger = logging.getLogger(__name__)

NUDGE_STRENGTH = 0.3


@dataclass(frozen=True)
class AdaptedLayout:
    template_id: str
    rooms: List[Room]
    walls: List[Wall]
    doors: List[Door]
    zones: List[Zone]
    envelope: Rect
    scale: float
    offset: Point

    def to_dict(self) -> dict:
        return {
            "template_id": self.template_id,
            "rooms": [r.to_dict() for r in self.rooms],
            "walls": [w.to_dict() for w in self.walls],
            "doors": [d.to_dict() for d in self.doors],
            "zones": [z.to_dict() for z in self.zones],
            "envelope": self.envelope.to_dict(),
            "scale": self.scale,
            "offset": self.offset.to_dict(),
        }


@dataclass(frozen=True)
class FitReport:
    fits: bool
    scale: float
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {"fits": self.fits, "scale": self.scale, "reason": self.reason}


@dataclass(frozen=True)
class ResizeResult:
    room: Optional[Room]
    valid: bool
    reason: Optional[str] = None


def template_scale(template: PlanTemplate, footprint: Footprint) -> Tuple[float, Size]:
    """Uniform scale and scaled size of *template* inside the plot margin."""
    target = Size(footprint.width * TEMPLATE_MARGIN, footprint.height * TEMPLATE_MARGIN)
    return scale_envelope(template.base_envelope, target)


def _scale_wall(wall: Wall, scale: float, offset: Point) -> Wall:
    return replace(
        wall,
        start=Point(wall.start.x * scale + offset.x, wall.start.y * scale + offset.y),
        end=Point(wall.end.x * scale + offset.x, wall.end.y * scale + offset.y),
        thickness=wall.thickness * scale,
    )


def _scale_rect(rect: Rect, scale: float, offset: Point) -> Rect:
    return Rect(
        rect.x * scale + offset.x,
        rect.y * scale + offset.y,
        rect.width * scale,
        rect.height * scale,
    )


def adapt_template(
    template: PlanTemplate,
    footprint: Footprint,
    rules: Optional[Dict] = None,
) -> AdaptedLayout:
    """
    Scale and centre *template* on *footprint*.

    Parameters
    ----------
    template : PlanTemplate
        Reference design.
    footprint : Footprint
        Target plot; validated here.

    Returns
    -------
    AdaptedLayout
        Rooms carry ``template_id`` pointing at their room template; doors
        are unchanged because their positions are relative to walls.
    """
    rules = VASTU_RULES if rules is None else rules
    footprint = validate_footprint(footprint)

    scale, scaled = template_scale(template, footprint)
    offset = Point((footprint.width - scaled.width) / 2, (footprint.height - scaled.height) / 2)

    walls = [_scale_wall(w, scale, offset) for w in template.walls]
    envelope = extract_envelope(walls)
    zones = zones_for_rect(envelope)

    rooms = [
        make_room(
            rt.id,
            rt.category,
            _scale_rect(rt.rect, scale, offset),
            zones,
            label=rt.label,
            template_id=rt.id,
            rules=rules,
        )
        for rt in template.rooms
    ]

    logger.info(
        f"Adapted template {template.id} to {footprint.width}x{footprint.height}: "
        f"scale={scale:.3f}, offset=({offset.x:.2f}, {offset.y:.2f})"
    )
    return AdaptedLayout(
        template_id=template.id,
        rooms=rooms,
        walls=walls,
        doors=list(template.doors),
        zones=zones,
        envelope=envelope,
        scale=scale,
        offset=offset,
    )


def validate_fit(template: PlanTemplate, footprint: Footprint) -> FitReport:
    """Advisory check on the adaptation scale; never blocks adaptation."""
    footprint = validate_footprint(footprint)
    scale, _ = template_scale(template, footprint)

    if scale < FIT_SCALE_MIN:
        return FitReport(
            fits=False,
            scale=scale,
            reason="Template is too large for this plot (would be scaled down too much)",
        )
    if scale > FIT_SCALE_MAX:
        return FitReport(
            fits=False,
            scale=scale,
            reason="Template is too small for this plot (would be scaled up too much)",
        )
    return FitReport(fits=True, scale=scale)


def _anchored_origin(room: Room, anchor: str, new_w: float, new_h: float) -> Tuple[float, float]:
    x, y, w, h = room.rect.x, room.rect.y, room.rect.width, room.rect.height
    if anchor == "ne":
        return x + w - new_w, y
    if anchor == "sw":
        return x, y + h - new_h
    if anchor == "se":
        return x + w - new_w, y + h - new_h
    if anchor == "center":
        return x + (w - new_w) / 2, y + (h - new_h) / 2
    return x, y


def resize_room(
    room: Room,
    room_template: Optional[RoomTemplate],
    new_width: float,
    new_height: float,
    zones: Sequence[Zone],
    rules: Optional[Dict] = None,
) -> ResizeResult:
    """
    Resize *room* within its template's size bounds.

    Bounds are checked width-min, width-max, height-min, height-max and the
    first failure is reported; the room is returned unchanged.  On success
    the corner (or centre) named by the template's anchor stays put.
    """
    if room_template is None:
        return ResizeResult(room, False, "Room template not found")
    if not is_finite_number(new_width) or not is_finite_number(new_height):
        return ResizeResult(room, False, "Width and height must be numbers")

    lo, hi = room_template.min_size, room_template.max_size
    if new_width < lo.width:
        return ResizeResult(room, False, f"Width too small (min: {lo.width}m)")
    if new_width > hi.width:
        return ResizeResult(room, False, f"Width too large (max: {hi.width}m)")
    if new_height < lo.height:
        return ResizeResult(room, False, f"Height too small (min: {lo.height}m)")
    if new_height > hi.height:
        return ResizeResult(room, False, f"Height too large (max: {hi.height}m)")

    x, y = _anchored_origin(room, room_template.anchor, new_width, new_height)
    return ResizeResult(with_rect(room, Rect(x, y, new_width, new_height), zones, rules), True)


def resize_in_layout(
    rooms: Sequence[Room],
    template: PlanTemplate,
    room_id: str,
    new_width: float,
    new_height: float,
    zones: Sequence[Zone],
    rules: Optional[Dict] = None,
) -> Tuple[List[Room], ResizeResult]:
    """Resize one room of an adapted layout; every other room is untouched."""
    room = next((r for r in rooms if r.id == room_id), None)
    if room is None:
        return list(rooms), ResizeResult(None, False, f"Room {room_id} not found")

    result = resize_room(room, template.room(room.template_id), new_width, new_height, zones, rules)
    if not result.valid:
        return list(rooms), result
    return [result.room if r.id == room_id else r for r in rooms], result


def nudge_rooms_to_intent(
    rooms: Sequence[Room],
    template: PlanTemplate,
    zones: Sequence[Zone],
    max_nudge: float = 0.5,
    rules: Optional[Dict] = None,
) -> List[Room]:
    """
    Pull each room 30% of the way toward its nearest intended zone centre.

    The shift is clamped to ``max_nudge`` per axis.  Rooms without a zone
    intent (or whose intended zones are missing) are left alone.
    """
    nudged = []
    for room in rooms:
        rt = template.room(room.template_id) if room.template_id else None
        targets = [z for z in zones if rt and z.id in rt.zone_intent]
        if not targets:
            nudged.append(room)
            continue

        center = room.rect.center
        closest = min(targets, key=lambda z: center.distance_to(z.rect.center))
        target = closest.rect.center

        dx = clamp((target.x - center.x) * NUDGE_STRENGTH, -max_nudge, max_nudge)
        dy = clamp((target.y - center.y) * NUDGE_STRENGTH, -max_nudge, max_nudge)
        rect = replace(room.rect, x=room.rect.x + dx, y=room.rect.y + dy)
        nudged.append(with_rect(room, rect, zones, rules))
    return nudged
