"""Wall topology: connectivity, coupled moves and loop validation."""

import copy
import math

import pytest

from services.vastu_engine.geometry import Point
from services.vastu_engine.walls import (
    Wall,
    WallGraph,
    connected_walls,
    distance_point_to_segment,
    is_axis_aligned,
    move_wall,
    snap_to_wall,
    validate_topology,
    wall_angle,
    wall_length,
    wall_midpoint,
    walls_connected,
)


def square(size=10.0):
    return [
        Wall("n", Point(0, 0), Point(size, 0), 0.23, True),
        Wall("e", Point(size, 0), Point(size, size), 0.23, True),
        Wall("s", Point(size, size), Point(0, size), 0.23, True),
        Wall("w", Point(0, size), Point(0, 0), 0.23, True),
    ]


def test_distance_point_to_segment():
    a, b = Point(0, 0), Point(10, 0)
    assert distance_point_to_segment(Point(5, 3), a, b) == pytest.approx(3)
    assert distance_point_to_segment(Point(-3, 4), a, b) == pytest.approx(5)
    assert distance_point_to_segment(Point(13, 4), a, b) == pytest.approx(5)
    # degenerate segment is a point
    assert distance_point_to_segment(Point(3, 4), a, a) == pytest.approx(5)


def test_wall_measures():
    wall = Wall("d", Point(0, 0), Point(3, 4), 0.115)
    assert wall_length(wall) == pytest.approx(5)
    assert wall_midpoint(wall) == Point(1.5, 2)
    assert wall_angle(Wall("v", Point(0, 0), Point(0, 2), 0.1)) == pytest.approx(math.pi / 2)
    assert not is_axis_aligned(wall)
    assert is_axis_aligned(Wall("h", Point(0, 0), Point(10, 0.1), 0.1))
    assert is_axis_aligned(Wall("v", Point(5, 0), Point(5, -8), 0.1))


def test_snap_to_wall():
    wall = Wall("n", Point(0, 0), Point(10, 0), 0.23)
    assert snap_to_wall(Point(4, 2), wall) == Point(4, 0)
    assert snap_to_wall(Point(-5, 2), wall) == Point(0, 0)
    assert snap_to_wall(Point(4, 2), Wall("p", Point(1, 1), Point(1, 1), 0.1)) == Point(1, 1)


def test_connectivity_tolerance():
    a = Wall("a", Point(0, 0), Point(5, 0), 0.1)
    near = Wall("b", Point(5.005, 0.005), Point(5, 5), 0.1)
    far = Wall("c", Point(5.02, 0), Point(5, 5), 0.1)
    assert walls_connected(a, near)
    assert not walls_connected(a, far)


def test_wall_graph_matches_pairwise():
    walls = square() + [Wall("x", Point(20, 20), Point(25, 20), 0.1)]
    graph = WallGraph(walls)
    for w in walls:
        expected = {o.id for o in walls if o.id != w.id and walls_connected(w, o)}
        assert set(graph.neighbours(w.id)) == expected
    assert [w.id for w in connected_walls(walls[1], walls)] == ["n", "s"]


def test_move_unknown_wall_returns_input_unchanged():
    walls = square()
    original = copy.deepcopy(walls)
    result = move_wall("w-missing", Point(1, 0), walls)
    assert result.success is False
    assert result.reason == "Wall w-missing not found"
    assert result.walls is walls
    assert walls == original


def test_move_wall_drags_coupled_endpoints():
    walls = square() + [Wall("x", Point(20, 20), Point(25, 20), 0.1)]
    result = move_wall("e", Point(1, 0), walls)
    assert result.success
    moved = {w.id: w for w in result.walls}

    assert moved["e"].start == Point(11, 0) and moved["e"].end == Point(11, 10)
    # only the shared endpoint of each neighbour moves
    assert moved["n"].start == Point(0, 0) and moved["n"].end == Point(11, 0)
    assert moved["s"].start == Point(11, 10) and moved["s"].end == Point(0, 10)
    # untouched walls are the same objects
    assert moved["w"] is walls[3]
    assert moved["x"] is walls[4]
    assert set(result.moved_ids) == {"n", "e", "s"}

    assert walls_connected(moved["e"], moved["n"])
    assert walls_connected(moved["e"], moved["s"])
    assert validate_topology(result.walls).is_valid


def test_move_wall_accepts_wall_object():
    walls = square()
    result = move_wall(walls[0], Point(0, -2), walls)
    moved = {w.id: w for w in result.walls}
    assert moved["n"].start == Point(0, -2)
    assert moved["w"].end == Point(0, -2)
    assert moved["e"].start == Point(10, -2)


def test_validate_topology_closed_loop():
    assert validate_topology(square()).is_valid
    # internal walls are not checked
    walls = square() + [Wall("i", Point(5, 0), Point(5, 3), 0.115, False)]
    assert validate_topology(walls).is_valid


def test_validate_topology_open_loop():
    walls = [w for w in square() if w.id != "s"]
    report = validate_topology(walls)
    assert not report.is_valid
    assert sorted(report.errors) == [
        "External wall e is not properly connected",
        "External wall w is not properly connected",
    ]
