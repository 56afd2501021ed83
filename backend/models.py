"""SQLAlchemy ORM models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, String, Text

from database import Base


def generate_uuid():
    return str(uuid.uuid4())


class Project(Base):
    """A saved layout snapshot."""

    __tablename__ = "projects"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False, default="Untitled plan")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    vastu_mode = Column(String, nullable=False, default="soft")
    template_id = Column(String, nullable=True)
    compliance_score = Column(Float, nullable=True)
    snapshot = Column(Text, nullable=False)  # JSON string of the serialized layout
