"""
Vastu compliance scoring.

``score_room`` is the single arbiter of legality: the optimizer veto, the
pipeline report and the edit policy all go through it.  Scoring itself is
mode-agnostic; ``validate_room`` is the helper callers use to interpret a
``strict`` / ``soft`` / ``off`` vastu mode.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from services.layout_constants import (
    ADJACENCY_VETO_GAP,
    ROOM_LABELS,
    SCORE_ALLOWED,
    SCORE_FORBIDDEN,
    SCORE_NEUTRAL,
    SCORE_NO_RULE,
    SCORE_PREFERRED,
    VASTU_RULES,
    VIOLATION_ADJACENCY,
    VIOLATION_FORBIDDEN,
    WET_CATEGORIES,
    WORSHIP_CATEGORIES,
)

from .geometry import rect_gap

VASTU_MODES = ("strict", "soft", "off")


@dataclass(frozen=True)
class RoomScore:
    id: str
    category: str
    zone: str
    score: int
    violation: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "zone": self.zone,
            "score": self.score,
            "violation": self.violation,
        }


@dataclass(frozen=True)
class HardViolation:
    room_id: str
    reason: str
    kind: str = VIOLATION_FORBIDDEN

    def to_dict(self) -> dict:
        return {"room_id": self.room_id, "reason": self.reason, "kind": self.kind}


@dataclass(frozen=True)
class ComplianceReport:
    total_score: float
    room_scores: List[RoomScore] = field(default_factory=list)
    hard_violations: List[HardViolation] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.hard_violations

    def to_dict(self) -> dict:
        return {
            "total_score": round(self.total_score, 2),
            "room_scores": [rs.to_dict() for rs in self.room_scores],
            "hard_violations": [hv.to_dict() for hv in self.hard_violations],
            "status": compliance_status(self.total_score),
        }


def room_label(category: str) -> str:
    return ROOM_LABELS.get(category, category.replace("_", " ").title())


def score_room(
    category: str,
    zone: str,
    rules: Optional[Dict[str, Dict[str, List[str]]]] = None,
) -> Tuple[int, Optional[str]]:
    """
    Score one ``(category, zone)`` pair.

    Priority is forbidden > preferred > allowed > neutral.  A category
    without a rule entry is neutral (50) and can never violate.
    """
    rules = VASTU_RULES if rules is None else rules
    rule = rules.get(category)
    if not rule:
        return SCORE_NO_RULE, None
    if zone in rule.get("forbidden", ()):
        return SCORE_FORBIDDEN, VIOLATION_FORBIDDEN
    if zone in rule.get("preferred", ()):
        return SCORE_PREFERRED, None
    if zone in rule.get("allowed", ()):
        return SCORE_ALLOWED, None
    return SCORE_NEUTRAL, None


def score_report(rooms: Sequence, rules: Optional[Dict] = None) -> ComplianceReport:
    """
    Aggregate report: unweighted mean score (100 for an empty set) and every
    room sitting in a forbidden zone.
    """
    room_scores = []
    for room in rooms:
        score, violation = score_room(room.category, room.zone, rules)
        room_scores.append(RoomScore(room.id, room.category, room.zone, score, violation))

    hard = [
        HardViolation(rs.id, f"{room_label(rs.category)} is forbidden in {rs.zone} zone")
        for rs in room_scores
        if rs.violation == VIOLATION_FORBIDDEN
    ]
    total = sum(rs.score for rs in room_scores) / len(room_scores) if room_scores else 100.0
    return ComplianceReport(total_score=total, room_scores=room_scores, hard_violations=hard)


def adjacency_violations(rooms: Sequence, max_gap: float = ADJACENCY_VETO_GAP) -> List[HardViolation]:
    """Worship rooms lying within *max_gap* of a wet room."""
    worship = [r for r in rooms if r.category in WORSHIP_CATEGORIES]
    wet = [r for r in rooms if r.category in WET_CATEGORIES]
    found = []
    for p in worship:
        for t in wet:
            if rect_gap(p.rect, t.rect) < max_gap:
                found.append(
                    HardViolation(
                        p.id,
                        f"{room_label(p.category)} touches {room_label(t.category)} ({t.id})",
                        kind=VIOLATION_ADJACENCY,
                    )
                )
    return found


def layout_report(rooms: Sequence, rules: Optional[Dict] = None) -> ComplianceReport:
    """``score_report`` plus worship/wet-room adjacency hard violations."""
    report = score_report(rooms, rules)
    extra = adjacency_violations(rooms)
    if not extra:
        return report
    return ComplianceReport(
        total_score=report.total_score,
        room_scores=report.room_scores,
        hard_violations=report.hard_violations + extra,
    )


def validate_room(room, vastu_mode: str, rules: Optional[Dict] = None) -> Dict:
    """
    Interpret a room's score under a vastu mode.

    ``off`` accepts everything, ``soft`` downgrades forbidden placements to
    a warning and ``strict`` rejects them.
    """
    if vastu_mode == "off":
        return {"is_valid": True, "message": "Vastu validation disabled", "score": 100}

    score, violation = score_room(room.category, room.zone, rules)
    label = room_label(room.category)

    if violation == VIOLATION_FORBIDDEN:
        if vastu_mode == "strict":
            return {
                "is_valid": False,
                "message": f"{label} cannot be placed in {room.zone} zone (forbidden)",
                "score": 0,
            }
        return {
            "is_valid": True,
            "message": f"Warning: {label} in {room.zone} zone is not recommended",
            "score": score,
        }

    return {
        "is_valid": True,
        "message": "Good placement" if score >= SCORE_ALLOWED else "Acceptable placement",
        "score": score,
    }


def compliance_status(score: float) -> str:
    if score >= 85:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"


def score_band(score: float) -> str:
    """Colouring band for a presentation layer."""
    if score >= 80:
        return "good"
    if score >= 60:
        return "fair"
    if score >= 30:
        return "weak"
    return "violation"


# ---------------------------------------------------------------------------
# Template-level validation
# ---------------------------------------------------------------------------

def validate_template_layout(rooms: Sequence, template, rules: Optional[Dict] = None) -> Dict:
    """
    Per-room severities for a template-driven layout.

    Forbidden placements are ``critical``; anything scoring below the
    allowed band is a ``warning``.  Recommended zones come from the room
    template's zone intent.
    """
    intents = {rt.id: rt.zone_intent for rt in template.rooms}
    violations = []
    scored = []

    for room in rooms:
        if room.template_id not in intents:
            continue
        score, violation = score_room(room.category, room.zone, rules)
        scored.append(score)
        if violation == VIOLATION_FORBIDDEN:
            severity, message = "critical", f"{room.label} is in a forbidden zone ({room.zone})"
        elif score < SCORE_ALLOWED:
            severity, message = "warning", f"{room.label} placement could be improved (current: {room.zone})"
        else:
            continue
        violations.append({
            "room_id": room.id,
            "room_label": room.label,
            "severity": severity,
            "message": message,
            "current_zone": room.zone,
            "recommended_zones": list(intents[room.template_id]),
        })

    avg = sum(scored) / len(scored) if scored else 100.0
    suggestions = []
    critical = sum(1 for v in violations if v["severity"] == "critical")
    warnings = len(violations) - critical
    if critical:
        suggestions.append(
            f"You have {critical} critical Vastu violation(s). "
            "Consider using a different template or plot orientation."
        )
    if warnings:
        suggestions.append(
            f"{warnings} room(s) could be better placed. "
            "Try adjusting plot orientation or selecting an alternate template."
        )
    if not violations:
        suggestions.append("Your layout has excellent Vastu compliance!")

    return {
        "score": avg,
        "compliance": compliance_status(avg),
        "violations": violations,
        "suggestions": suggestions,
    }


def suggest_alternate_templates(current, all_templates: Sequence, validation: Dict) -> List:
    """Same bedroom count, different facing, when compliance is fair or poor."""
    if validation["compliance"] in ("excellent", "good"):
        return []
    return [
        t for t in all_templates
        if t.id != current.id and t.bedrooms == current.bedrooms and t.facing != current.facing
    ]
