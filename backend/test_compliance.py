"""Vastu compliance scoring."""

import pytest

from services.layout_constants import (
    DEFAULT_VASTU_RULES,
    ROOM_CATEGORIES,
    VASTU_RULES,
    ZONE_IDS,
    load_vastu_rules,
)
from services.vastu_engine.compliance import (
    adjacency_violations,
    compliance_status,
    layout_report,
    score_band,
    score_report,
    score_room,
    suggest_alternate_templates,
    validate_room,
    validate_template_layout,
)
from services.vastu_engine.geometry import Footprint, Rect
from services.vastu_engine.rooms import make_room
from services.vastu_engine.adapter import adapt_template
from services.vastu_engine.templates import get_template, list_templates
from services.vastu_engine.zones import compute_zones, find_zone

ZONES = compute_zones(9, 9)


def room_in(category, zone_id, room_id=None):
    """2x2 room centred in the given zone of a 9x9 plot."""
    z = find_zone(ZONES, zone_id)
    return make_room(room_id or f"{category}-{zone_id}", category, Rect(z.x + 0.5, z.y + 0.5, 2, 2), ZONES)


def test_score_table_values():
    for category in ROOM_CATEGORIES:
        for zone in ZONE_IDS:
            score, violation = score_room(category, zone)
            rule = VASTU_RULES.get(category)
            if rule is None:
                assert (score, violation) == (50, None)
                continue
            assert score in (0, 30, 60, 100)
            if zone in rule["forbidden"]:
                assert (score, violation) == (0, "forbidden")
            else:
                assert violation is None


def test_score_priority():
    assert score_room("kitchen", "SE") == (100, None)
    assert score_room("kitchen", "E") == (60, None)
    assert score_room("kitchen", "W") == (30, None)
    assert score_room("puja", "SW") == (0, "forbidden")
    assert score_room("passage", "NE") == (50, None)


def test_score_room_custom_rules():
    rules = {"kitchen": {"preferred": ["NE"], "allowed": [], "forbidden": ["NE"]}}
    # forbidden wins over preferred
    assert score_room("kitchen", "NE", rules) == (0, "forbidden")
    assert score_room("bedroom", "SE", rules) == (50, None)


def test_kitchen_in_north_east_is_forbidden():
    kitchen = room_in("kitchen", "NE")
    assert kitchen.zone == "NE"
    assert kitchen.score == 0
    assert kitchen.violation == "forbidden"


def test_score_report_mean_and_violations():
    rooms = [room_in("kitchen", "SE"), room_in("living_room", "N"), room_in("toilet", "C")]
    report = score_report(rooms)
    assert report.total_score == pytest.approx(200 / 3)
    assert [hv.room_id for hv in report.hard_violations] == ["toilet-C"]
    assert not report.is_clean
    assert [rs.score for rs in report.room_scores] == [100, 100, 0]


def test_score_report_empty_is_perfect():
    report = score_report([])
    assert report.total_score == 100
    assert report.is_clean
    assert report.to_dict()["status"] == "excellent"


def test_worship_room_touching_wet_room():
    puja = make_room("p", "puja", Rect(0, 0, 2, 2), ZONES)
    toilet = make_room("t", "toilet", Rect(2, 0, 2, 2), ZONES)
    far_toilet = make_room("t2", "toilet", Rect(2.5, 0, 0.4, 2), ZONES)

    found = adjacency_violations([puja, toilet])
    assert len(found) == 1
    assert found[0].room_id == "p" and found[0].kind == "adjacency"

    assert adjacency_violations([puja, far_toilet]) == []

    # only the full layout report carries adjacency
    assert all(hv.kind == "forbidden" for hv in score_report([puja, toilet]).hard_violations)
    assert any(hv.kind == "adjacency" for hv in layout_report([puja, toilet]).hard_violations)


def test_validate_room_modes():
    kitchen = room_in("kitchen", "NE")
    strict = validate_room(kitchen, "strict")
    assert strict["is_valid"] is False and strict["score"] == 0

    soft = validate_room(kitchen, "soft")
    assert soft["is_valid"] is True
    assert soft["message"].startswith("Warning")

    off = validate_room(kitchen, "off")
    assert off == {"is_valid": True, "message": "Vastu validation disabled", "score": 100}

    good = validate_room(room_in("kitchen", "SE"), "strict")
    assert good["is_valid"] and good["score"] == 100


def test_status_and_bands():
    assert compliance_status(85) == "excellent"
    assert compliance_status(84.9) == "good"
    assert compliance_status(50) == "fair"
    assert compliance_status(49) == "poor"
    assert [score_band(s) for s in (100, 80, 79, 60, 30, 29, 0)] == [
        "good", "good", "fair", "fair", "weak", "violation", "violation",
    ]


def test_template_validation_and_alternates():
    template = get_template("2bhk-east")
    adapted = adapt_template(template, Footprint(20, 20))

    validation = validate_template_layout(adapted.rooms, template)
    assert validation["score"] == pytest.approx(68.75)
    assert validation["compliance"] == "fair"
    assert all(v["severity"] == "warning" for v in validation["violations"])
    assert {v["room_id"] for v in validation["violations"]} == {"r-master", "r-bath1", "r-puja"}
    master = next(v for v in validation["violations"] if v["room_id"] == "r-master")
    assert master["recommended_zones"] == ["NE", "N"]

    alternates = suggest_alternate_templates(template, list_templates(), validation)
    assert [t.id for t in alternates] == ["2bhk-north"]


def test_load_vastu_rules_override(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text('{"room_rules": {"passage": {"preferred": ["C"]}}}')
    rules = load_vastu_rules(str(path))
    assert rules["passage"] == {"preferred": ["C"], "allowed": [], "forbidden": []}
    assert rules["kitchen"] == DEFAULT_VASTU_RULES["kitchen"]
    assert score_room("passage", "C", rules) == (100, None)


def test_load_vastu_rules_unreadable_falls_back(tmp_path):
    rules = load_vastu_rules(str(tmp_path / "missing.json"))
    assert set(rules) == set(DEFAULT_VASTU_RULES)


@pytest.mark.parametrize("payload", ['{"room_rules": {"kitchen": []}}', "[1, 2]", '{"room_rules": {"kitchen": {"preferred": "SE"}}}'])
def test_load_vastu_rules_malformed_falls_back(tmp_path, payload):
    path = tmp_path / "rules.json"
    path.write_text(payload)
    rules = load_vastu_rules(str(path))
    assert rules == {cat: {k: list(v) for k, v in e.items()} for cat, e in DEFAULT_VASTU_RULES.items()}
