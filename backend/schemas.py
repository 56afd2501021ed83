"""Pydantic schemas for API request/response validation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from services.layout_constants import DEFAULT_TARGET_AREAS
from services.vastu_engine.geometry import Footprint, Point
from services.vastu_engine.placement import RoomRequest


# ---------- Geometry ----------
class FootprintIn(BaseModel):
    width: float = Field(..., gt=0, description="East-west extent in meters")
    height: float = Field(..., gt=0, description="North-south extent in meters")
    orientation: float = Field(0.0, description="Compass rotation in degrees, display only")

    def to_footprint(self) -> Footprint:
        return Footprint(self.width, self.height, self.orientation)


class PointIn(BaseModel):
    x: float
    y: float

    def to_point(self) -> Point:
        return Point(self.x, self.y)


# ---------- Rooms ----------
class RoomRequestIn(BaseModel):
    category: str
    target_area: Optional[float] = Field(None, description="Square meters; defaults per category")
    priority: Optional[int] = None
    id: Optional[str] = None
    label: Optional[str] = None

    def to_request(self) -> RoomRequest:
        target_area = self.target_area
        if target_area is None:
            target_area = DEFAULT_TARGET_AREAS.get(self.category, 0.0)
        return RoomRequest(
            category=self.category,
            target_area=target_area,
            priority=self.priority,
            id=self.id,
            label=self.label,
        )


class RoomIn(BaseModel):
    id: str
    category: str
    label: Optional[str] = None
    x: float
    y: float
    width: float
    height: float
    template_id: Optional[str] = None


# ---------- Walls ----------
class WallIn(BaseModel):
    id: str
    start: PointIn
    end: PointIn
    thickness: Optional[float] = None
    is_external: bool = False
    adjacent_rooms: list[str] = []


# ---------- Layout ----------
class GenerateLayoutRequest(BaseModel):
    footprint: FootprintIn
    rooms: list[RoomRequestIn]
    iterations: Optional[int] = Field(None, ge=0)
    seed: Optional[int] = None
    vastu_mode: Optional[str] = None


class ScoreRequest(BaseModel):
    footprint: FootprintIn
    rooms: list[RoomIn]


class AcceptCandidateRequest(BaseModel):
    footprint: FootprintIn
    candidate: dict


class MoveWallRequest(BaseModel):
    walls: list[WallIn]
    wall_id: str
    offset: PointIn


class ValidateWallsRequest(BaseModel):
    walls: list[WallIn]


class TopologyOut(BaseModel):
    is_valid: bool
    errors: list[str] = []


class EditRoomRequest(BaseModel):
    snapshot: dict
    room_id: str
    x: float
    y: float
    width: float
    height: float


class EditRoomResponse(BaseModel):
    valid: bool
    message: str
    score: int
    snapshot: dict


# ---------- Templates ----------
class TemplateSummary(BaseModel):
    id: str
    name: str
    facing: str
    bedrooms: int
    floors: int
    description: str
    base_envelope: dict


class AdaptRequest(BaseModel):
    footprint: FootprintIn
    vastu_mode: Optional[str] = None
    nudge: bool = False


class ResizeRequest(BaseModel):
    footprint: FootprintIn
    room_id: str
    width: float
    height: float


class ResizeResponse(BaseModel):
    valid: bool
    reason: Optional[str] = None
    room: Optional[dict] = None
    rooms: list[dict] = []


# ---------- Projects ----------
class ProjectCreate(BaseModel):
    name: Optional[str] = None
    snapshot: dict


class ProjectOut(BaseModel):
    id: str
    name: str
    created_at: datetime
    vastu_mode: str
    template_id: Optional[str] = None
    compliance_score: Optional[float] = None
    snapshot: dict


# ---------- AI Design ----------
class AIGenerateRequest(BaseModel):
    footprint: FootprintIn
    rooms: list[RoomRequestIn]
