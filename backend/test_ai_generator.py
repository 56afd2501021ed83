"""AI candidate generation with a stubbed provider client."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from services import ai_generator
from services.vastu_engine.errors import LayoutInputError
from services.vastu_engine.geometry import Footprint
from services.vastu_engine.placement import RoomRequest

CANDIDATE = {
    "score": 90,
    "rooms": [
        {"id": "room-0", "category": "living_room", "x": 5, "y": 0, "width": 5, "height": 4},
        {"id": "room-1", "category": "puja", "x": 11, "y": 1, "width": 2, "height": 2},
    ],
}


class FakeClient:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))])


@pytest.fixture
def room_requests():
    return [RoomRequest("living_room", 20), RoomRequest("puja", 4)]


def _run(monkeypatch, client, requests):
    monkeypatch.setattr(ai_generator, "_get_client", lambda: client)
    return asyncio.run(ai_generator.generate_candidate(Footprint(15, 15), requests))


def test_candidate_is_rescored_locally(monkeypatch, room_requests):
    client = FakeClient(reply=f"Here you go:\n```json\n{json.dumps(CANDIDATE)}\n```")
    result = _run(monkeypatch, client, room_requests)

    assert result["provider"] == "grok"
    assert result["reported_score"] == 90
    assert result["compliance"]["total_score"] == 100
    assert [r["zone"] for r in result["rooms"]] == ["N", "NE"]
    assert result["footprint"]["width"] == 15
    assert any("reported score 90.0" in w for w in result["warnings"])

    messages = client.calls[0]["messages"]
    assert "- puja: preferred NE" in messages[0]["content"]
    assert "15.0 m wide" in messages[1]["content"]


def test_provider_error_falls_back(monkeypatch, room_requests):
    result = _run(monkeypatch, FakeClient(error=RuntimeError("rate limited")), room_requests)
    assert result["provider"] == "fallback"
    assert result["error"] == "rate limited"
    assert result["reported_score"] is None
    assert len(result["rooms"]) == 2


def test_reply_without_json_falls_back(monkeypatch, room_requests):
    result = _run(monkeypatch, FakeClient(reply="Sorry, I can't draw plans."), room_requests)
    assert result["provider"] == "fallback"
    assert result["error"] == "No layout JSON in AI reply"


def test_rejected_candidate_falls_back(monkeypatch, room_requests):
    bad = {"rooms": [{"id": "g", "category": "garage", "x": 0, "y": 0, "width": 3, "height": 3}]}
    result = _run(monkeypatch, FakeClient(reply=json.dumps(bad)), room_requests)
    assert result["provider"] == "fallback"
    assert result["error"].startswith("Candidate rejected")


def test_no_client_uses_local_pipeline(monkeypatch, room_requests):
    result = _run(monkeypatch, None, room_requests)
    assert result["provider"] == "fallback"
    assert "error" not in result


def test_bad_requests_raise_before_calling_provider(monkeypatch):
    client = FakeClient(reply="{}")
    with pytest.raises(LayoutInputError):
        _run(monkeypatch, client, [])
    assert client.calls == []


@pytest.mark.parametrize(
    "text,expected",
    [
        ('```json\n{"a": 1}\n```', {"a": 1}),
        ('prefix {"a": {"b": 2}} suffix', {"a": {"b": 2}}),
        ("```json\n{broken\n```", None),
        ("no json here", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_json(text, expected):
    assert ai_generator._extract_json_from_response(text) == expected
