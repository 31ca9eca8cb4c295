"""Per-place detail lookups for the deduplicated candidates."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from offmarket.etl.transform import to_candidate
from offmarket.models import Candidate, RawCandidate
from offmarket.vendors import google_places

logger = logging.getLogger(__name__)

DEFAULT_DETAIL_CAP = 80

DetailFetcher = Callable[[str, str], Optional[Dict[str, Any]]]


def _safe_details(fetch: DetailFetcher, raw: RawCandidate, api_key: str) -> Optional[Dict[str, Any]]:
    if not raw.external_id:
        return None
    try:
        return fetch(raw.external_id, api_key)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to fetch details for %s: %s", raw.external_id, exc)
        return None


def enrich_candidates(
    raw_candidates: Sequence[RawCandidate],
    api_key: str,
    *,
    cap: int = DEFAULT_DETAIL_CAP,
    max_workers: int = 8,
    fetch_details: Optional[DetailFetcher] = None,
) -> List[Candidate]:
    """Resolve details for at most ``cap`` candidates, keeping coarse fields when a lookup fails."""
    fetch = fetch_details or google_places.place_details
    batch = list(raw_candidates[:cap])
    if not batch:
        return []

    workers = max(1, min(max_workers, len(batch)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        details = list(executor.map(lambda raw: _safe_details(fetch, raw, api_key), batch))

    enriched: List[Candidate] = []
    seen: Set[str] = set()
    for raw, detail in zip(batch, details):
        candidate = to_candidate(raw, detail)
        if candidate.dedupe_key in seen:
            logger.debug("Dropping duplicate candidate %s", candidate.dedupe_key)
            continue
        seen.add(candidate.dedupe_key)
        enriched.append(candidate)
    return enriched
