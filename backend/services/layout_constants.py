"""
Centralized Layout Constants: Single source of truth for the Vastu engine.

Exposes consistent constants for:
  - Room categories (labels, default target areas, placement priorities)
  - The Vastu rule table (preferred / allowed / forbidden zones per category)
  - Compliance score values
  - Wall thicknesses, door widths and geometric tolerances (meters)

Every module under services/vastu_engine imports from here instead of
defining its own constants.  The rule table can be extended or overridden
per category from a JSON file named by ``VASTU_RULES_PATH``.
"""

import json
import logging
from typing import Dict, List, Optional

from config import VASTU_RULES_PATH

logger = logging.getLogger(__name__)

# ===========================================================================
# ZONES
# ===========================================================================

# Fixed output order of the 3x3 compass grid
ZONE_IDS = ("NE", "N", "NW", "E", "C", "W", "SE", "S", "SW")

ZONE_LABELS = {
    "NE": "North-East",
    "N": "North",
    "NW": "North-West",
    "E": "East",
    "C": "Center",
    "W": "West",
    "SE": "South-East",
    "S": "South",
    "SW": "South-West",
}

# Compass bearing from the plot centre (degrees clockwise from north)
ZONE_DIRECTIONS = {
    "N": 0, "NE": 45, "E": 90, "SE": 135,
    "S": 180, "SW": 225, "W": 270, "NW": 315,
    "C": 0,
}

# ===========================================================================
# ROOM CATEGORIES
# ===========================================================================

ROOM_CATEGORIES = (
    "living_room",
    "kitchen",
    "master_bedroom",
    "bedroom",
    "toilet",
    "puja",
    "staircase",
    "dining",
    "study",
    "entrance",
    "utility",
    "balcony",
    "passage",
)

ROOM_LABELS = {
    "living_room": "Living Room",
    "kitchen": "Kitchen",
    "master_bedroom": "Master Bedroom",
    "bedroom": "Bedroom",
    "toilet": "Toilet",
    "puja": "Puja Room",
    "staircase": "Staircase",
    "dining": "Dining Room",
    "study": "Study Room",
    "entrance": "Entrance",
    "utility": "Utility",
    "balcony": "Balcony",
    "passage": "Passage",
}

# Default target areas (sq m) offered when a request omits one
DEFAULT_TARGET_AREAS = {
    "living_room": 25.0,
    "kitchen": 12.0,
    "master_bedroom": 20.0,
    "bedroom": 14.0,
    "toilet": 6.0,
    "puja": 5.0,
    "staircase": 8.0,
    "dining": 12.0,
    "study": 10.0,
    "entrance": 4.0,
    "utility": 5.0,
    "balcony": 6.0,
    "passage": 6.0,
}

# Placement priority: lower is placed first
DEFAULT_PRIORITY = 5

# Worship / wet-room pair that must never touch
WORSHIP_CATEGORIES = ("puja",)
WET_CATEGORIES = ("toilet",)

# ===========================================================================
# VASTU RULE TABLE
# ===========================================================================

DEFAULT_VASTU_RULES: Dict[str, Dict[str, List[str]]] = {
    "living_room":    {"preferred": ["N", "E", "NE"], "allowed": ["NW", "C", "W"], "forbidden": []},
    "kitchen":        {"preferred": ["SE"], "allowed": ["NW", "E", "S"], "forbidden": ["NE", "N", "SW"]},
    "master_bedroom": {"preferred": ["SW"], "allowed": ["S", "W", "NW"], "forbidden": ["SE"]},
    "bedroom":        {"preferred": ["W", "NW", "S"], "allowed": ["N", "E", "SW"], "forbidden": ["SE"]},
    "toilet":         {"preferred": ["NW", "W"], "allowed": ["S", "SE"], "forbidden": ["NE", "C"]},
    "puja":           {"preferred": ["NE"], "allowed": ["N", "E"], "forbidden": ["S", "SW"]},
    "staircase":      {"preferred": ["SW", "S", "W"], "allowed": ["NW", "SE"], "forbidden": ["NE", "N", "C"]},
    "dining":         {"preferred": ["W", "S"], "allowed": ["C", "E", "NW"], "forbidden": []},
    "study":          {"preferred": ["NE", "E", "N"], "allowed": ["W", "NW"], "forbidden": []},
    "entrance":       {"preferred": ["N", "E", "NE"], "allowed": ["NW", "W"], "forbidden": ["SW"]},
    "utility":        {"preferred": ["NW", "SE"], "allowed": ["W", "S"], "forbidden": ["NE"]},
    "balcony":        {"preferred": ["N", "E", "NE"], "allowed": ["NW"], "forbidden": ["SW"]},
    # passage has no rule: always neutral
}

# Compliance scores
SCORE_PREFERRED = 100
SCORE_ALLOWED = 60
SCORE_NEUTRAL = 30
SCORE_FORBIDDEN = 0
SCORE_NO_RULE = 50
VIOLATION_FORBIDDEN = "forbidden"
VIOLATION_ADJACENCY = "adjacency"


def _valid_rule(entry) -> bool:
    """A rule entry is an object whose zone lists are lists of strings."""
    if not isinstance(entry, dict):
        return False
    for key in ("preferred", "allowed", "forbidden"):
        zones = entry.get(key, [])
        if not isinstance(zones, list) or not all(isinstance(z, str) for z in zones):
            return False
    return True


def load_vastu_rules(path: Optional[str] = None) -> Dict[str, Dict[str, List[str]]]:
    """
    Return the rule table, optionally overridden per category from JSON.

    The file holds ``{"room_rules": {category: {preferred, allowed, forbidden}}}``.
    An unreadable or malformed file is logged and the built-in table is used.
    """
    rules = {cat: {k: list(v) for k, v in entry.items()} for cat, entry in DEFAULT_VASTU_RULES.items()}
    if not path:
        return rules

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not load Vastu rules from {path}: {e}. Using built-in defaults.")
        return rules

    room_rules = data.get("room_rules", {}) if isinstance(data, dict) else None
    if not isinstance(room_rules, dict) or not all(_valid_rule(e) for e in room_rules.values()):
        logger.warning(f"Malformed Vastu rules in {path}. Using built-in defaults.")
        return rules

    for category, entry in room_rules.items():
        rules[category] = {
            "preferred": list(entry.get("preferred", [])),
            "allowed": list(entry.get("allowed", [])),
            "forbidden": list(entry.get("forbidden", [])),
        }
    logger.info(f"Loaded Vastu rule overrides from {path}")
    return rules


VASTU_RULES = load_vastu_rules(VASTU_RULES_PATH)

# ===========================================================================
# STRUCTURAL CONSTANTS (meters)
# ===========================================================================

WALL_EXTERNAL_M = 0.23    # 9 inch load-bearing
WALL_INTERNAL_M = 0.115   # 4.5 inch partition

DOOR_WIDTH_DEFAULT = 0.9
DOOR_WIDTH_WIDE = 1.2     # living spaces
DOOR_SWING_ANGLE = 90

# ===========================================================================
# TOLERANCES
# ===========================================================================

CONNECT_TOLERANCE = 0.01         # shared wall endpoint (1 cm)
EXTERNAL_EDGE_TOLERANCE = 0.05   # edge on the global bounding box
DOOR_WALL_TOLERANCE = 0.1        # wall endpoint near a room boundary
ADJACENCY_VETO_GAP = 0.1         # puja / toilet separation
MIN_FREE_RECT = 0.01             # guillotine sliver pruning
AXIS_ALIGNED_DEGREES = 2.0

# ===========================================================================
# PACKING / FITTING
# ===========================================================================

TARGET_ASPECT = 1.4
TEMPLATE_MARGIN = 0.9     # fraction of the plot a template may occupy
FIT_SCALE_MIN = 0.5
FIT_SCALE_MAX = 2.0
