"""Inbound request validation. Nothing here touches the network."""

import re
from typing import Any, Dict, List

from offmarket.models import SearchRequest

ALLOWED_RADIUS_MILES = (5, 10, 15, 25, 50, 75, 100)

# "City, ST": one comma, a non-empty city and a two-letter region code.
_CITY_REGION = re.compile(r"^[^,]+,\s*[A-Za-z]{2}$")


class SearchValidationError(ValueError):
    """Raised when a search request is malformed; carries the offending field."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


def is_city_region(location: str) -> bool:
    return bool(_CITY_REGION.match(location.strip()))


def _parse_industries(raw: Any) -> List[str]:
    if not isinstance(raw, (list, tuple)):
        raise SearchValidationError("industries", "Select at least one industry")
    industries: List[str] = []
    seen = set()
    for value in raw:
        if not isinstance(value, str):
            continue
        label = value.strip()
        if label and label.lower() not in seen:
            seen.add(label.lower())
            industries.append(label)
    if not industries:
        raise SearchValidationError("industries", "Select at least one industry")
    return industries


def _parse_radius(raw: Any) -> int:
    if isinstance(raw, bool):
        raise SearchValidationError("radius_miles", "Invalid radius")
    try:
        radius = float(raw)
    except (TypeError, ValueError):
        raise SearchValidationError("radius_miles", "Invalid radius") from None
    if radius not in ALLOWED_RADIUS_MILES:
        allowed = ", ".join(str(value) for value in ALLOWED_RADIUS_MILES)
        raise SearchValidationError("radius_miles", f"Invalid radius; choose one of {allowed}")
    return int(radius)


def parse_search_request(payload: Dict[str, Any]) -> SearchRequest:
    """Validate a JSON body into a SearchRequest, raising on the first bad field."""
    if not isinstance(payload, dict):
        raise SearchValidationError("body", "Request body must be a JSON object")

    industries = _parse_industries(payload.get("industries"))

    location_raw = payload.get("location")
    location = location_raw.strip() if isinstance(location_raw, str) else ""
    if not location or not is_city_region(location):
        raise SearchValidationError("location", "Location must be 'City, ST' (e.g. 'Austin, TX')")

    radius_miles = _parse_radius(payload.get("radius_miles"))

    return SearchRequest(industries=industries, location=location, radius_miles=radius_miles)
