"""
AI-assisted layout generator (Grok via the OpenAI SDK).

Asks the configured model for an alternative candidate layout for the same
footprint and room requests.  The model's answer is never trusted: every
candidate goes through ``accept_candidate`` and is re-scored locally.
Without an API key, or on any provider or parsing failure, the local
pipeline produces the layout instead and the result says so.
"""

import json
import logging
import re
from typing import List, Optional

from config import GROK_API_KEY, GROK_BASE_URL, GROK_MODEL, OPTIMIZER_ITERATIONS, OPTIMIZER_SEED
from services.layout_constants import VASTU_RULES
from services.vastu_engine.errors import LayoutInputError
from services.vastu_engine.geometry import Footprint, validate_footprint
from services.vastu_engine.pipeline import accept_candidate, generate_layout
from services.vastu_engine.placement import RoomRequest, validate_requests

logger = logging.getLogger(__name__)

# Lazy-initialized OpenAI client (for xAI Grok)
_client = None


def _get_client():
    """Lazy initialization of the async client; None without an API key."""
    global _client
    if _client is None and GROK_API_KEY:
        from openai import AsyncOpenAI
        _client = AsyncOpenAI(api_key=GROK_API_KEY, base_url=GROK_BASE_URL)
    return _client


LAYOUT_SYSTEM_PROMPT = """You are a residential architect who plans Indian homes \
according to Vastu Shastra.

Coordinates are meters.  The plot's north-west corner is (0, 0); x grows east \
and y grows south.  The plot is split into a 3x3 grid of compass zones \
(NE, N, NW, E, C, W, SE, S, SW).  A room belongs to the zone containing its centre.

## VASTU RULES (preferred / allowed / forbidden zones)
{rules}

## OUTPUT
Reply with ONE ```json block and nothing else:
```json
{{
  "score": 0-100,
  "rooms": [{{"id": "...", "category": "...", "label": "...", "x": 0, "y": 0, "width": 0, "height": 0}}],
  "walls": [{{"id": "...", "start": {{"x": 0, "y": 0}}, "end": {{"x": 0, "y": 0}}, "thickness": 0.23, "is_external": true}}],
  "doors": [{{"id": "...", "wall_id": "...", "position": 0.5, "width": 0.9}}]
}}
```
Rooms must lie inside the plot and must not overlap.  Use only the given categories.
"""


def _rules_table() -> str:
    lines = []
    for category, rule in VASTU_RULES.items():
        lines.append(
            f"- {category}: preferred {', '.join(rule.get('preferred', [])) or '-'}; "
            f"allowed {', '.join(rule.get('allowed', [])) or '-'}; "
            f"forbidden {', '.join(rule.get('forbidden', [])) or '-'}"
        )
    return "\n".join(lines)


def _request_message(footprint: Footprint, requests: List[RoomRequest]) -> str:
    rooms = [
        {"id": r.id, "category": r.category, "target_area": r.target_area}
        for r in requests
    ]
    return (
        f"Plot: {footprint.width} m wide (east-west) x {footprint.height} m deep (north-south), "
        f"orientation {footprint.orientation} degrees.\n"
        f"Rooms:\n```json\n{json.dumps(rooms, indent=2)}\n```"
    )


def _extract_json_from_response(text: str) -> Optional[dict]:
    """Extract the candidate JSON object from a model reply."""
    if not text:
        return None

    json_match = re.search(r'```json\s*(.*?)\s*```', text, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group(1))
        except json.JSONDecodeError:
            pass

    json_match = re.search(r'\{.*\}', text, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group())
        except json.JSONDecodeError:
            pass

    return None


def _fallback_generate(
    footprint: Footprint,
    requests: List[RoomRequest],
    error: Optional[str] = None,
) -> dict:
    """Local pipeline layout shaped like an accepted candidate."""
    result = generate_layout(footprint, requests, iterations=OPTIMIZER_ITERATIONS, seed=OPTIMIZER_SEED)
    payload = result.to_dict()
    payload.update({
        "topology": None,
        "reported_score": None,
        "provider": "fallback",
    })
    if error:
        payload["error"] = error
    return payload


async def generate_candidate(footprint: Footprint, requests: List[RoomRequest]) -> dict:
    """
    Ask the model for a candidate layout and validate it locally.

    Args:
        footprint: Target plot.
        requests: Rooms the layout must contain.

    Returns:
        Dict with rooms, walls, doors, zones, compliance, topology,
        reported_score and provider (``grok`` or ``fallback``).  Provider
        failures never raise; they fall back with an ``error`` string.

    Raises:
        LayoutInputError: only for a malformed footprint or request list,
        which the local fallback would reject as well.
    """
    footprint = validate_footprint(footprint)
    requests = validate_requests(requests)

    client = _get_client()
    if client is None:
        return _fallback_generate(footprint, requests)

    try:
        response = await client.chat.completions.create(
            model=GROK_MODEL,
            messages=[
                {"role": "system", "content": LAYOUT_SYSTEM_PROMPT.format(rules=_rules_table())},
                {"role": "user", "content": _request_message(footprint, requests)},
            ],
            temperature=0.4,
            max_tokens=4096,
        )
        reply = response.choices[0].message.content
    except Exception as e:
        logger.warning(f"AI layout request failed: {e}. Using local pipeline.")
        return _fallback_generate(footprint, requests, error=str(e))

    candidate = _extract_json_from_response(reply)
    if candidate is None:
        logger.warning("AI reply contained no layout JSON. Using local pipeline.")
        return _fallback_generate(footprint, requests, error="No layout JSON in AI reply")

    try:
        accepted = accept_candidate(candidate, footprint)
    except LayoutInputError as e:
        logger.warning(f"AI candidate rejected: {e}. Using local pipeline.")
        return _fallback_generate(footprint, requests, error=f"Candidate rejected: {e}")

    payload = accepted.to_dict()
    payload["footprint"] = footprint.to_dict()
    payload["provider"] = "grok"
    return payload
