"""
Reference plan catalog.

Templates are curated designs stored in ``data/plan_templates.json`` and
loaded once into frozen dataclasses.  Coordinates are in template units
(meters at scale 1) with the north-west corner of the base envelope at the
origin.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .doors import Door
from .geometry import Point, Rect, Size
from .walls import Wall

logger = logging.getLogger(__name__)

TEMPLATES_PATH = Path(__file__).parent / "data" / "plan_templates.json"

ANCHORS = ("nw", "ne", "sw", "se", "center")


@dataclass(frozen=True)
class RoomTemplate:
    id: str
    label: str
    category: str
    rect: Rect
    zone_intent: Tuple[str, ...]
    forbidden_zones: Tuple[str, ...]
    anchor: str
    min_size: Size
    max_size: Size
    wall_ids: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "category": self.category,
            "rect": self.rect.to_dict(),
            "zone_intent": list(self.zone_intent),
            "forbidden_zones": list(self.forbidden_zones),
            "anchor": self.anchor,
            "min_size": self.min_size.to_dict(),
            "max_size": self.max_size.to_dict(),
            "wall_ids": list(self.wall_ids),
        }


@dataclass(frozen=True)
class PlanTemplate:
    id: str
    name: str
    facing: str
    base_envelope: Size
    description: str
    floors: int
    bedrooms: int
    walls: Tuple[Wall, ...]
    rooms: Tuple[RoomTemplate, ...]
    doors: Tuple[Door, ...]

    def room(self, room_id: str) -> Optional[RoomTemplate]:
        return next((rt for rt in self.rooms if rt.id == room_id), None)

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "facing": self.facing,
            "bedrooms": self.bedrooms,
            "floors": self.floors,
            "description": self.description,
            "base_envelope": self.base_envelope.to_dict(),
        }

    def to_dict(self) -> dict:
        data = self.summary()
        data["walls"] = [w.to_dict() for w in self.walls]
        data["rooms"] = [rt.to_dict() for rt in self.rooms]
        data["doors"] = [d.to_dict() for d in self.doors]
        return data


def _wall_from_json(data: dict) -> Wall:
    return Wall(
        id=data["id"],
        start=Point(*data["start"]),
        end=Point(*data["end"]),
        thickness=data["thickness"],
        is_external=data.get("is_external", False),
    )


def _room_from_json(data: dict) -> RoomTemplate:
    anchor = data.get("anchor", "center")
    if anchor not in ANCHORS:
        raise ValueError(f"Room template {data['id']} has unknown anchor {anchor!r}")
    return RoomTemplate(
        id=data["id"],
        label=data["label"],
        category=data["category"],
        rect=Rect(*data["rect"]),
        zone_intent=tuple(data.get("zone_intent", [])),
        forbidden_zones=tuple(data.get("forbidden_zones", [])),
        anchor=anchor,
        min_size=Size(*data["min_size"]),
        max_size=Size(*data["max_size"]),
        wall_ids=tuple(data.get("wall_ids", [])),
    )


def _template_from_json(data: dict) -> PlanTemplate:
    env = data["base_envelope"]
    return PlanTemplate(
        id=data["id"],
        name=data["name"],
        facing=data["facing"],
        base_envelope=Size(env["width"], env["height"]),
        description=data.get("description", ""),
        floors=data.get("floors", 1),
        bedrooms=data["bedrooms"],
        walls=tuple(_wall_from_json(w) for w in data["walls"]),
        rooms=tuple(_room_from_json(r) for r in data["rooms"]),
        doors=tuple(Door(**d) for d in data.get("doors", [])),
    )


def load_templates(path: Path = TEMPLATES_PATH) -> Dict[str, PlanTemplate]:
    """Parse a template catalog file into ``{id: PlanTemplate}`` (file order)."""
    with open(path, "r") as f:
        data = json.load(f)
    templates = {}
    for entry in data["templates"]:
        template = _template_from_json(entry)
        templates[template.id] = template
    logger.info(f"Loaded {len(templates)} plan templates from {path.name}")
    return templates


@lru_cache(maxsize=1)
def _catalog() -> Dict[str, PlanTemplate]:
    return load_templates()


def list_templates() -> List[PlanTemplate]:
    return list(_catalog().values())


def get_template(template_id: str) -> Optional[PlanTemplate]:
    return _catalog().get(template_id)


def templates_by_bedrooms(bedrooms: int) -> List[PlanTemplate]:
    return [t for t in _catalog().values() if t.bedrooms == bedrooms]
