"""
AI Design routes: Grok-generated candidate layouts.

The candidate is re-validated and re-scored locally before it is
returned; without an API key the local pipeline answers instead.
"""

from fastapi import APIRouter, HTTPException

from schemas import AIGenerateRequest
from services.ai_generator import generate_candidate
from services.vastu_engine.errors import LayoutInputError

router = APIRouter(prefix="/api/ai-design", tags=["ai-design"])


@router.post("/generate")
async def ai_generate(data: AIGenerateRequest):
    """
    Ask the AI collaborator for a layout.  ``provider`` tells whether the
    layout came from the model (``grok``) or the local pipeline
    (``fallback``); the model's self-reported score is only ever returned
    as ``reported_score``.
    """
    try:
        return await generate_candidate(
            data.footprint.to_footprint(),
            [r.to_request() for r in data.rooms],
        )
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
