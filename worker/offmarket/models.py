"""Core data models shared by the off-market discovery pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class SearchRequest:
    """Validated inbound search; build it with ``parse_search_request``."""

    industries: List[str]
    location: str
    radius_miles: int

    def inputs(self) -> Dict[str, Any]:
        return {
            "industries": list(self.industries),
            "location": self.location,
            "radius_miles": self.radius_miles,
        }


@dataclass(slots=True)
class Coordinate:
    lat: float
    lng: float

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(slots=True)
class RawCandidate:
    """One result from one page of one keyword's nearby search."""

    external_id: Optional[str]
    name: Optional[str]
    rough_location: Optional[Coordinate] = None
    coarse_address: Optional[str] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    raw: Optional[Dict[str, Any]] = field(default=None, repr=False)


@dataclass(slots=True)
class Candidate:
    """Business record after the per-place detail lookup."""

    external_id: Optional[str]
    dedupe_key: str
    name: Optional[str]
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    coordinate: Optional[Coordinate] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None


@dataclass(slots=True)
class ReviewVerdict:
    keep: bool
    tier: str
    reasons: List[str] = field(default_factory=list)
    red_flags: List[str] = field(default_factory=list)


@dataclass(slots=True)
class ReviewedCandidate:
    candidate: Candidate
    verdict: ReviewVerdict


@dataclass(slots=True)
class FunnelCounts:
    """Per-stage counts returned as ``debug`` so starved searches can be diagnosed."""

    keywords_used: int = 0
    merged_results: int = 0
    deduped_results: int = 0
    detailed: int = 0
    survivors: int = 0
    prefiltered: int = 0
    ai_reviewed: int = 0
    kept: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(slots=True)
class SearchOutcome:
    count: int
    companies: List[Dict[str, Any]]
    debug: FunnelCounts
    note: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": True,
            "count": self.count,
            "companies": self.companies,
            "debug": self.debug.to_dict(),
        }
        if self.note:
            payload["note"] = self.note
        return payload
