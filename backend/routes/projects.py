"""Project routes: save and load layout snapshots."""

import json

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from schemas import ProjectCreate, ProjectOut
from services.projects import create_project, get_project_by_id, project_to_state
from services.vastu_engine.errors import LayoutInputError
from services.vastu_engine.snapshot import deserialize, serialize

router = APIRouter(prefix="/api", tags=["projects"])


def _project_out(row, snapshot: dict) -> ProjectOut:
    return ProjectOut(
        id=row.id,
        name=row.name,
        created_at=row.created_at,
        vastu_mode=row.vastu_mode,
        template_id=row.template_id,
        compliance_score=row.compliance_score,
        snapshot=snapshot,
    )


@router.post("/projects", response_model=ProjectOut)
async def save_project(data: ProjectCreate, db: AsyncSession = Depends(get_db)):
    """
    Store a layout snapshot.  The snapshot is rebuilt first, so what gets
    saved carries re-derived zones and scores rather than the client's.
    """
    try:
        state = deserialize(data.snapshot)
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    row = await create_project(db, state, data.name)
    return _project_out(row, json.loads(row.snapshot))


@router.get("/projects/{project_id}", response_model=ProjectOut)
async def load_project(project_id: str, db: AsyncSession = Depends(get_db)):
    """Load a project; zones and scores are re-derived on the way out."""
    row = await get_project_by_id(db, project_id)
    if not row:
        raise HTTPException(status_code=404, detail="Project not found")

    try:
        state = project_to_state(row)
    except LayoutInputError as e:
        raise HTTPException(status_code=422, detail=f"Stored snapshot is invalid: {e}")
    return _project_out(row, serialize(state))
