"""Paginated nearby search and the per-keyword fan-out."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence

from offmarket.etl.transform import to_raw_candidate
from offmarket.models import Coordinate, RawCandidate
from offmarket.vendors import google_places

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.344
DEFAULT_MAX_PAGES = 3
# A next_page_token is not valid until a short while after it is issued.
DEFAULT_SETTLE_SECONDS = 2.0


def miles_to_meters(miles: float) -> int:
    return int(round(miles * METERS_PER_MILE))


class PaginatedSearch:
    """Fetches every page of one keyword's nearby search, up to ``max_pages``."""

    def __init__(
        self,
        api_key: str,
        *,
        max_pages: int = DEFAULT_MAX_PAGES,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        search_fn=google_places.nearby_search,
    ) -> None:
        self.api_key = api_key
        self.max_pages = max_pages
        self.settle_seconds = settle_seconds
        self._sleep = sleep
        self._search = search_fn

    def fetch_all(self, keyword: str, location: Coordinate, radius_meters: int) -> List[RawCandidate]:
        collected: List[RawCandidate] = []
        page_token = None
        processed_pages = 0

        while processed_pages < self.max_pages:
            if page_token:
                self._sleep(self.settle_seconds)
            try:
                response = self._search(location, radius_meters, keyword, self.api_key, pagetoken=page_token)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Nearby search failed for keyword=%s on page %d: %s", keyword, processed_pages + 1, exc
                )
                break

            results = response.get("results") or []
            collected.extend(to_raw_candidate(result) for result in results)
            processed_pages += 1

            page_token = response.get("next_page_token")
            if not results or not page_token:
                break

        logger.info("keyword=%s pages=%d results=%d", keyword, processed_pages, len(collected))
        return collected


def search_keywords(
    keywords: Sequence[str],
    location: Coordinate,
    radius_meters: int,
    searcher: PaginatedSearch,
    max_workers: int = 8,
) -> List[List[RawCandidate]]:
    """Run one paginated search per keyword in parallel; results stay in keyword order."""
    if not keywords:
        return []
    workers = max(1, min(max_workers, len(keywords)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda kw: searcher.fetch_all(kw, location, radius_meters), keywords))
