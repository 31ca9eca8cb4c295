"""Client utilities for the Google Geocoding and Places APIs."""

import logging
import threading
from typing import Any, Dict, Optional

import requests

from offmarket.models import Coordinate

logger = logging.getLogger(__name__)
# One requests.Session per thread; search and detail lookups run in parallel.
_LOCAL = threading.local()
_BASE_URL = "https://maps.googleapis.com/maps/api"

DETAIL_FIELDS = (
    "place_id",
    "name",
    "formatted_address",
    "formatted_phone_number",
    "website",
    "geometry/location",
    "rating",
    "user_ratings_total",
)


def _session() -> requests.Session:
    session = getattr(_LOCAL, "session", None)
    if session is None:
        session = _LOCAL.session = requests.Session()
    return session


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


class GeocodeError(GooglePlacesError):
    """Raised when a location string cannot be resolved to a coordinate."""


def geocode(address: str, api_key: str) -> Coordinate:
    params = {"address": address, "key": api_key}
    response = _session().get(f"{_BASE_URL}/geocode/json", params=params, timeout=10)
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    status = payload.get("status") or response.status_code
    results = payload.get("results") or []
    location = results[0].get("geometry", {}).get("location") if results else None
    if not response.ok or status != "OK" or not location:
        logger.error("geocode failed: status=%s, error_message=%s", status, payload.get("error_message"))
        raise GeocodeError(f"Geocode failed: {status}")
    return Coordinate(lat=float(location["lat"]), lng=float(location["lng"]))


def nearby_search(
    location: Coordinate,
    radius_meters: int,
    keyword: str,
    api_key: str,
    pagetoken: Optional[str] = None,
) -> Dict[str, Any]:
    params = {
        "location": location.as_param(),
        "radius": str(radius_meters),
        "keyword": keyword,
        "key": api_key,
    }
    if pagetoken:
        params["pagetoken"] = pagetoken
    response = _session().get(f"{_BASE_URL}/place/nearbysearch/json", params=params, timeout=10)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in {"OK", "ZERO_RESULTS"}:
        logger.error("nearby_search failed: status=%s, error_message=%s", status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload


def place_details(place_id: str, api_key: str) -> Optional[Dict[str, Any]]:
    """Return the detail record, or None when the provider has nothing usable."""
    params = {"place_id": place_id, "key": api_key, "fields": ",".join(DETAIL_FIELDS)}
    response = _session().get(f"{_BASE_URL}/place/details/json", params=params, timeout=10)
    if not response.ok:
        logger.warning("place_details http error for %s: %s", place_id, response.status_code)
        return None
    payload = response.json()
    status = payload.get("status")
    if status != "OK":
        logger.warning("place_details unavailable for %s: status=%s", place_id, status)
        return None
    return payload.get("result") or None
