"""
Parsing and repair of the raw AI trip-plan response.

The model is asked for four top-level sections.  Each section is checked
independently and replaced by a fallback when it is missing or malformed,
so one bad section never discards the others.

Usage:
    from services.ai_response_parser import parse_ai_response

    plan = parse_ai_response(raw_text, expected_days=5)
"""

import json
import logging
from typing import Any, Dict, Optional, Union

from models.trip_plan import PACKING_CATEGORIES, AIPlanData, BestTimeToVisit, TripHighlights
from utils.errors import AIServiceError

logger = logging.getLogger(__name__)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```), if any."""
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned

    if cleaned.startswith("```json"):
        start = len("```json")
    else:
        start = cleaned.find("\n") + 1 if "\n" in cleaned else 3
    end = cleaned.rfind("```")
    if end > start:
        return cleaned[start:end].strip()
    return cleaned[start:].strip()


def repair_ai_payload(data: Dict[str, Any], expected_days: int, request_id: Optional[str] = None) -> Dict[str, Any]:
    """Return a copy of ``data`` with every section present and well-typed.

    Well-formed input comes back equal to itself.
    """
    repaired = dict(data)
    log_extra = {"request_id": request_id}

    highlights = repaired.get("tripHighlights")
    if not isinstance(highlights, dict) or not highlights.get("title") or not highlights.get("description"):
        logger.warning("tripHighlights missing or incomplete, using fallback", extra=log_extra)
        repaired["tripHighlights"] = TripHighlights().to_dict()

    itinerary = repaired.get("itinerary")
    if not isinstance(itinerary, list):
        logger.warning("itinerary missing or invalid, using empty list", extra=log_extra)
        repaired["itinerary"] = []
    elif len(itinerary) < expected_days:
        logger.warning(
            "itinerary has only %d days, expected %d days",
            len(itinerary),
            expected_days,
            extra=log_extra,
        )

    if not isinstance(repaired.get("bestTimeToVisit"), dict):
        logger.warning("bestTimeToVisit missing, using fallback", extra=log_extra)
        repaired["bestTimeToVisit"] = BestTimeToVisit().to_dict()

    packing = repaired.get("packingSuggestions")
    if not isinstance(packing, dict):
        logger.warning("packingSuggestions missing, using fallback", extra=log_extra)
        packing = {}
    repaired["packingSuggestions"] = {
        **packing,
        **{
            name: packing[name] if isinstance(packing.get(name), list) else []
            for name in PACKING_CATEGORIES
        },
    }

    logger.info(
        "AI response validation summary",
        extra={
            "request_id": request_id,
            "itinerary_days": len(repaired["itinerary"]),
            "expected_days": expected_days,
        },
    )
    return repaired


def parse_ai_response(
    raw: Union[str, Dict[str, Any]],
    expected_days: int,
    request_id: Optional[str] = None,
) -> AIPlanData:
    """Decode, repair and type the AI output.

    Raises:
        AIServiceError: the text is not JSON, or the JSON is not an object.
    """
    data: Any = raw
    if isinstance(raw, str):
        cleaned = strip_code_fences(raw)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            logger.error(
                "AI response is not valid JSON",
                extra={"request_id": request_id, "preview": cleaned[:500]},
            )
            raise AIServiceError("Could not parse AI response as JSON", original_error=exc) from exc

    if not isinstance(data, dict):
        logger.error(
            "Invalid AI response structure",
            extra={"request_id": request_id, "type": type(data).__name__},
        )
        raise AIServiceError("Invalid AI response format")

    return AIPlanData.from_dict(repair_ai_payload(data, expected_days, request_id))
