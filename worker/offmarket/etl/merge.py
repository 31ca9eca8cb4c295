"""Merge per-keyword search results into one list of unique places."""

import logging
from typing import Iterable, List, Optional, Set

from offmarket.models import RawCandidate

logger = logging.getLogger(__name__)


def dedupe_key(external_id: Optional[str], name: Optional[str], address: Optional[str]) -> str:
    if external_id:
        return external_id
    return f"{name or 'unknown'}|{address or 'unknown'}"


def merge_candidates(pages: Iterable[Iterable[RawCandidate]]) -> List[RawCandidate]:
    """Flatten keyword result lists, keeping the first occurrence of each place id.

    Results without a place id are dropped since they can neither be
    deduplicated nor upserted later. The seen-set lives for this call only.
    """
    seen: Set[str] = set()
    unique: List[RawCandidate] = []
    for page in pages:
        for candidate in page:
            if not candidate.external_id:
                logger.debug("Skipping result without place_id: %s", candidate.name)
                continue
            if candidate.external_id in seen:
                continue
            seen.add(candidate.external_id)
            unique.append(candidate)
    return unique
