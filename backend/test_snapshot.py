"""Project snapshots: save and reload with re-derived zones and scores."""

import json

import pytest

from services.vastu_engine.errors import LayoutInputError
from services.vastu_engine.geometry import Footprint
from services.vastu_engine.pipeline import generate_layout, layout_from_template, state_from_result
from services.vastu_engine.snapshot import SNAPSHOT_VERSION, deserialize, serialize
from services.vastu_engine.templates import get_template


@pytest.fixture
def state(plan_requests):
    return state_from_result(generate_layout(Footprint(15, 15), plan_requests), "strict")


def test_serialize_shape(state):
    snap = serialize(state)
    assert snap["version"] == SNAPSHOT_VERSION
    assert snap["footprint"] == {"width": 15.0, "height": 15.0, "orientation": 0.0}
    assert snap["vastu_mode"] == "strict"
    assert snap["compliance_score"] == 100.0
    assert snap["template_id"] is None
    assert len(snap["rooms"]) == 5
    # plain data only
    assert json.loads(json.dumps(snap)) == snap


def test_round_trip(state):
    restored = deserialize(json.loads(json.dumps(serialize(state))))
    assert restored.rooms == state.rooms
    assert restored.walls == state.walls
    assert restored.doors == state.doors
    assert restored.zones == state.zones
    assert restored.vastu_mode == "strict"
    assert serialize(restored) == serialize(state)


def test_stored_zone_and_score_are_ignored(state):
    snap = serialize(state)
    snap["rooms"][0]["zone"] = "SW"
    snap["rooms"][0]["score"] = 0
    snap["compliance_score"] = 3
    restored = deserialize(snap)
    assert restored.rooms[0].zone == state.rooms[0].zone
    assert restored.rooms[0].score == 100
    assert restored.compliance().total_score == pytest.approx(100)


def test_template_snapshot_uses_envelope_zones():
    state = layout_from_template(get_template("2bhk-east"), Footprint(20, 20), "soft")
    snap = serialize(state)
    snap["walls"] = []
    snap["doors"] = []

    restored = deserialize(snap)
    assert restored.template_id == "2bhk-east"
    assert restored.zones[0].x == pytest.approx(13)
    # missing structure is taken from the template
    assert restored.walls == state.walls
    assert restored.doors == state.doors
    assert [r.zone for r in restored.rooms] == [r.zone for r in state.rooms]


def test_unknown_template_falls_back_to_plot_zones():
    state = layout_from_template(get_template("2bhk-east"), Footprint(20, 20))
    snap = serialize(state)
    snap["template_id"] = "retired-plan"
    restored = deserialize(snap)
    assert restored.template_id is None
    ne = restored.zones[0]
    assert (ne.x, ne.w) == pytest.approx((40 / 3, 20 / 3))


def test_missing_walls_are_synthesized(state):
    snap = serialize(state)
    del snap["walls"]
    del snap["doors"]
    restored = deserialize(snap)
    assert len(restored.walls) == 4 * len(restored.rooms)
    assert len(restored.doors) == len(restored.rooms)


@pytest.mark.parametrize(
    "mutate",
    [
        lambda s: s.pop("footprint"),
        lambda s: s["footprint"].update(width=0),
        lambda s: s["footprint"].update(height="tall"),
        lambda s: s.update(vastu_mode="relaxed"),
        lambda s: s.update(rooms="none"),
        lambda s: s["rooms"][0].pop("width"),
        lambda s: s["rooms"][0].update(category="garage"),
        lambda s: s["walls"][0].update(thickness=-1),
        lambda s: s["doors"][0].update(position=1.5),
    ],
)
def test_malformed_snapshots(state, mutate):
    snap = serialize(state)
    mutate(snap)
    with pytest.raises(LayoutInputError):
        deserialize(snap)


def test_not_a_snapshot():
    with pytest.raises(LayoutInputError):
        deserialize(["rooms"])
