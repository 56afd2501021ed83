import json
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Project
from services.vastu_engine.pipeline import LayoutState
from services.vastu_engine.snapshot import deserialize, serialize

logger = logging.getLogger(__name__)


async def create_project(db: AsyncSession, state: LayoutState, name: Optional[str] = None) -> Project:
    """Serialize *state* and store it as a new project row."""
    snapshot = serialize(state)
    row = Project(
        name=name or "Untitled plan",
        vastu_mode=snapshot["vastu_mode"],
        template_id=snapshot["template_id"],
        compliance_score=snapshot["compliance_score"],
        snapshot=json.dumps(snapshot),
    )
    db.add(row)
    await db.flush()
    await db.commit()
    await db.refresh(row)
    logger.info(f"Saved project {row.id} ({len(state.rooms)} rooms, score {row.compliance_score})")
    return row


async def get_project_by_id(db: AsyncSession, project_id: str) -> Optional[Project]:
    """Retrieve a single project by its primary key."""
    result = await db.execute(select(Project).where(Project.id == project_id))
    return result.scalars().first()


def project_to_state(row: Project) -> LayoutState:
    """Rebuild the layout state stored in *row*; zones and scores are re-derived."""
    return deserialize(json.loads(row.snapshot))
