"""Cheap filters applied before any candidate is sent for review."""

import logging
from typing import List, Optional, Sequence

from offmarket.models import Candidate

logger = logging.getLogger(__name__)

# Names signalling a chain, franchise or investor-owned business rather than
# an owner-operated SMB. Matched as lowercase substrings of the company name.
BLACKLIST_TERMS = (
    "franchise",
    "franchising",
    "corporate",
    "headquarters",
    "hq",
    "holdings",
    "private equity",
    "venture",
    "vc",
    "fund",
    "investments",
    "group",
)

DEFAULT_MIN_REVIEWS = 5
DEFAULT_MIN_RATING = 3.0
DEFAULT_SURVIVOR_CAP = 60


def hard_filter_reason(candidate: Candidate, blacklist: Sequence[str] = BLACKLIST_TERMS) -> Optional[str]:
    """Return why a candidate fails the hard filter, or None when it passes."""
    if not candidate.website:
        return "No website"

    name = (candidate.name or "").lower()
    for term in blacklist:
        if term in name:
            return f"Keyword: {term}"
    return None


def apply_hard_filter(candidates: Sequence[Candidate]) -> List[Candidate]:
    survivors: List[Candidate] = []
    for candidate in candidates:
        reason = hard_filter_reason(candidate)
        if reason:
            logger.debug("Hard filter rejected %s: %s", candidate.name, reason)
            continue
        survivors.append(candidate)
    return survivors


def passes_prefilter(
    candidate: Candidate,
    min_reviews: int = DEFAULT_MIN_REVIEWS,
    min_rating: float = DEFAULT_MIN_RATING,
) -> bool:
    """Keep sparse listings; otherwise require either review volume or a passable rating."""
    if candidate.rating is None and candidate.rating_count is None:
        return True

    try:
        if candidate.rating_count is not None and int(candidate.rating_count) >= min_reviews:
            return True
        if candidate.rating is not None and float(candidate.rating) >= min_rating:
            return True
    except (TypeError, ValueError):
        logger.debug("Unable to parse rating signal for %s", candidate.name)
        return True
    return False


def apply_prefilter(candidates: Sequence[Candidate], survivor_cap: int = DEFAULT_SURVIVOR_CAP) -> List[Candidate]:
    kept = [candidate for candidate in candidates if passes_prefilter(candidate)]
    return kept[:survivor_cap]
