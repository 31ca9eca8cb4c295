"""Utilities for transforming Google Places responses into pipeline records and database rows."""

import logging
from typing import Any, Dict, Optional

from offmarket.etl.merge import dedupe_key
from offmarket.models import Candidate, Coordinate, RawCandidate, ReviewedCandidate

logger = logging.getLogger(__name__)

SOURCE_TYPE = "off_market"
EXTERNAL_SOURCE = "google_places"


def _coordinate(result: Dict[str, Any]) -> Optional[Coordinate]:
    location = (result.get("geometry") or {}).get("location") or {}
    lat, lng = location.get("lat"), location.get("lng")
    if lat is None or lng is None:
        return None
    return Coordinate(lat=float(lat), lng=float(lng))


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def to_raw_candidate(result: Dict[str, Any]) -> RawCandidate:
    return RawCandidate(
        external_id=_strip_or_none(result.get("place_id")),
        name=_strip_or_none(result.get("name")),
        rough_location=_coordinate(result),
        coarse_address=_strip_or_none(result.get("vicinity") or result.get("formatted_address")),
        rating=result.get("rating"),
        rating_count=result.get("user_ratings_total"),
        raw=result,
    )


def to_candidate(raw: RawCandidate, details: Optional[Dict[str, Any]]) -> Candidate:
    """Merge a detail record over the coarse search fields; detail values win."""
    details = details or {}

    name = _strip_or_none(details.get("name")) or raw.name
    address = _strip_or_none(details.get("formatted_address")) or raw.coarse_address
    rating = details.get("rating")
    rating_count = details.get("user_ratings_total")

    return Candidate(
        external_id=raw.external_id,
        dedupe_key=dedupe_key(raw.external_id, name, address),
        name=name,
        address=address,
        phone=_strip_or_none(details.get("formatted_phone_number")),
        website=_strip_or_none(details.get("website")),
        coordinate=_coordinate(details) or raw.rough_location,
        rating=rating if rating is not None else raw.rating,
        rating_count=rating_count if rating_count is not None else raw.rating_count,
    )


def to_listing_row(workspace_id: str, reviewed: ReviewedCandidate, inputs: Dict[str, Any]) -> Dict[str, Any]:
    candidate = reviewed.candidate
    verdict = reviewed.verdict
    coordinate = candidate.coordinate

    return {
        "workspace_id": workspace_id,
        "source_type": SOURCE_TYPE,
        "external_source": EXTERNAL_SOURCE,
        "external_id": candidate.dedupe_key,
        "place_id": candidate.external_id,
        "dedupe_key": candidate.dedupe_key,
        "company_name": candidate.name,
        "address": candidate.address,
        "phone": candidate.phone,
        "website": candidate.website,
        "lat": coordinate.lat if coordinate else None,
        "lng": coordinate.lng if coordinate else None,
        "rating": candidate.rating,
        "ratings_total": candidate.rating_count,
        "tier": verdict.tier,
        "tier_reason": {
            "reasons": list(verdict.reasons),
            "red_flags": list(verdict.red_flags),
            "inputs": inputs,
        },
        # Never auto-save; only the user flips this.
        "is_saved": False,
    }
