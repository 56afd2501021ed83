"""Greedy zone placement of room requests."""

import math

import pytest

from services.layout_constants import VASTU_RULES
from services.vastu_engine.errors import LayoutInputError
from services.vastu_engine.geometry import Footprint, detect_overlaps
from services.vastu_engine.placement import (
    PLACED_EXACT,
    PLACED_FORCED,
    PLACED_SHRUNK,
    RoomRequest,
    desired_size,
    greedy_place_rooms,
    validate_requests,
    zone_try_order,
)


def test_desired_size_keeps_area_and_aspect():
    w, h = desired_size(14.0)
    assert w * h == pytest.approx(14.0)
    assert w / h == pytest.approx(1.4)


def test_zone_try_order():
    order = zone_try_order("kitchen", VASTU_RULES)
    assert order[:4] == ["SE", "NW", "E", "S"]
    assert sorted(order) == sorted(["NE", "N", "NW", "E", "C", "W", "SE", "S", "SW"])
    # no rule: plain grid order
    assert zone_try_order("passage", VASTU_RULES)[0] == "NE"


def test_validate_requests_assigns_index_ids():
    checked = validate_requests([RoomRequest("kitchen", 8), RoomRequest("puja", 3, id="p")])
    assert [r.id for r in checked] == ["room-0", "p"]
    assert checked[0].target_area == 8.0


@pytest.mark.parametrize(
    "requests",
    [
        [],
        [RoomRequest("garage", 10)],
        [RoomRequest("kitchen", 0)],
        [RoomRequest("kitchen", -3)],
        [RoomRequest("kitchen", float("nan"))],
        [RoomRequest("kitchen", 8, id="a"), RoomRequest("puja", 3, id="a")],
    ],
)
def test_validate_requests_rejects(requests):
    with pytest.raises(LayoutInputError):
        validate_requests(requests)


def test_single_room_fits_exactly_in_preferred_zone():
    result = greedy_place_rooms(Footprint(10, 10), [RoomRequest("puja", 5)])
    room = result.rooms[0]
    assert room.zone == "NE"
    assert room.score == 100
    assert (room.rect.x, room.rect.y) == pytest.approx((20 / 3, 0))
    assert (room.rect.width, room.rect.height) == pytest.approx((math.sqrt(7), math.sqrt(5 / 1.4)))
    assert result.records[0].method == PLACED_EXACT
    assert result.warnings == []


def test_shrinks_into_largest_free_rect():
    # 4.1 x 2.9 does not fit a 3.33 zone; every zone holds half the area
    result = greedy_place_rooms(Footprint(10, 10), [RoomRequest("kitchen", 12)])
    room = result.rooms[0]
    record = result.records[0]
    assert record.method == PLACED_SHRUNK
    assert record.zone == "NE"
    assert room.rect.width == pytest.approx(10 / 3)
    assert room.rect.height == pytest.approx(math.sqrt((100 / 9) / 1.4))
    assert room.zone == "NE"
    assert room.score == 0


def test_forced_rooms_are_centred_and_reported():
    requests = [RoomRequest("living_room", 25), RoomRequest("living_room", 25)]
    result = greedy_place_rooms(Footprint(3, 3), requests)

    assert result.forced == ["room-0", "room-1"]
    for room in result.rooms:
        assert room.rect.width == pytest.approx(0.9)
        assert room.rect.center.x == pytest.approx(1.5)
        assert room.rect.center.y == pytest.approx(1.5)
        assert room.zone == "C"
    assert any("overlap" in w for w in result.warnings)
    assert sum("forced" in w for w in result.warnings) == 2


def test_priority_and_area_ordering():
    requests = [
        RoomRequest("bedroom", 6),
        RoomRequest("living_room", 12),
        RoomRequest("puja", 2, priority=1),
    ]
    result = greedy_place_rooms(Footprint(15, 15), requests)
    assert [r.id for r in result.rooms] == ["room-2", "room-1", "room-0"]


def test_equal_keys_keep_input_order():
    requests = [RoomRequest("bedroom", 6, id="b1"), RoomRequest("bedroom", 6, id="b2")]
    result = greedy_place_rooms(Footprint(15, 15), requests)
    assert [r.id for r in result.rooms] == ["b1", "b2"]
    # second bedroom reuses the split remainder of the same zone
    assert result.rooms[0].zone == result.rooms[1].zone == "W"


def test_plan_rooms_all_land_in_preferred_zones(plan_requests):
    result = greedy_place_rooms(Footprint(15, 15), plan_requests)
    zones = {r.category: r.zone for r in result.rooms}
    assert zones == {
        "living_room": "N",
        "bedroom": "W",
        "kitchen": "SE",
        "toilet": "NW",
        "puja": "NE",
    }
    assert all(r.score == 100 for r in result.rooms)
    assert detect_overlaps([r.rect for r in result.rooms]) == []
    for room in result.rooms:
        assert 0 <= room.rect.x and room.rect.right <= 15 + 1e-9
        assert 0 <= room.rect.y and room.rect.bottom <= 15 + 1e-9


def test_bad_footprint():
    with pytest.raises(LayoutInputError):
        greedy_place_rooms(Footprint(-1, 10), [RoomRequest("puja", 3)])
