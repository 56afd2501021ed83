"""
Template catalog routes: browse reference plans, adapt them onto a plot
and resize their rooms within the template's bounds.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from config import DEFAULT_VASTU_MODE
from schemas import AdaptRequest, ResizeRequest, ResizeResponse, TemplateSummary
from services.vastu_engine.adapter import (
    adapt_template,
    nudge_rooms_to_intent,
    resize_in_layout,
    validate_fit,
)
from services.vastu_engine.compliance import (
    layout_report,
    suggest_alternate_templates,
    validate_template_layout,
)
from services.vastu_engine.errors import LayoutInputError
from services.vastu_engine.pipeline import state_from_adapted
from services.vastu_engine.snapshot import serialize
from services.vastu_engine.templates import get_template, list_templates, templates_by_bedrooms

router = APIRouter(prefix="/api/templates", tags=["templates"])


def _template_or_404(template_id: str):
    template = get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")
    return template


@router.get("", response_model=list[TemplateSummary])
async def templates_list(bedrooms: Optional[int] = Query(None, ge=1)):
    """All templates, optionally only those with the given bedroom count."""
    templates = list_templates() if bedrooms is None else templates_by_bedrooms(bedrooms)
    return [TemplateSummary(**t.summary()) for t in templates]


@router.get("/{template_id}")
async def template_detail(template_id: str):
    return _template_or_404(template_id).to_dict()


@router.post("/{template_id}/adapt")
async def template_adapt(template_id: str, data: AdaptRequest):
    """
    Scale and centre a template on the plot.  The fit advisory never
    blocks adaptation; it is returned alongside the layout.
    """
    template = _template_or_404(template_id)
    footprint = data.footprint.to_footprint()
    vastu_mode = data.vastu_mode or DEFAULT_VASTU_MODE

    try:
        adapted = adapt_template(template, footprint)
        fit = validate_fit(template, footprint)
        rooms = adapted.rooms
        if data.nudge:
            rooms = nudge_rooms_to_intent(rooms, template, adapted.zones)
        state = state_from_adapted(adapted, footprint, vastu_mode, rooms=rooms)
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    validation = validate_template_layout(rooms, template)
    alternates = suggest_alternate_templates(template, list_templates(), validation)

    payload = adapted.to_dict()
    payload["rooms"] = [r.to_dict() for r in rooms]
    payload.update({
        "fit": fit.to_dict(),
        "compliance": layout_report(rooms).to_dict(),
        "validation": validation,
        "alternates": [t.summary() for t in alternates],
        "snapshot": serialize(state),
    })
    return payload


@router.post("/{template_id}/resize", response_model=ResizeResponse)
async def template_resize(template_id: str, data: ResizeRequest):
    """
    Resize one room of the template as adapted onto the plot.  Sizes are
    checked against the room template's min/max bounds.
    """
    template = _template_or_404(template_id)
    try:
        adapted = adapt_template(template, data.footprint.to_footprint())
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if not any(r.id == data.room_id for r in adapted.rooms):
        raise HTTPException(status_code=404, detail=f"Room {data.room_id} not found")

    rooms, result = resize_in_layout(
        adapted.rooms, template, data.room_id, data.width, data.height, adapted.zones
    )
    return ResizeResponse(
        valid=result.valid,
        reason=result.reason,
        room=result.room.to_dict() if result.room else None,
        rooms=[r.to_dict() for r in rooms],
    )
