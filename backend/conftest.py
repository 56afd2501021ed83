"""Shared pytest setup: isolated database and no AI provider."""

import os
import tempfile

import pytest

# Must run before config is imported anywhere
_TMP_DIR = tempfile.mkdtemp(prefix="vastu-planner-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["GROK_API_KEY"] = ""
os.environ.pop("VASTU_RULES_PATH", None)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def plan_requests():
    """Five rooms that each fit exactly into a preferred zone of a 15x15 plot."""
    from services.vastu_engine.placement import RoomRequest

    return [
        RoomRequest("living_room", 12.0),
        RoomRequest("kitchen", 8.0),
        RoomRequest("bedroom", 10.0),
        RoomRequest("toilet", 4.0),
        RoomRequest("puja", 3.0),
    ]
