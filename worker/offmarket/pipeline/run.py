"""End-to-end off-market discovery for one search request."""

import logging
import time
from functools import partial
from typing import Callable, Optional

from offmarket.core.config import Settings, get_settings, require_pipeline_credentials
from offmarket.core.homepage import fetch_homepage_text
from offmarket.etl.filters import apply_hard_filter, apply_prefilter
from offmarket.etl.keywords import expand_keywords
from offmarket.etl.merge import merge_candidates
from offmarket.models import FunnelCounts, SearchOutcome, SearchRequest
from offmarket.pipeline.enrich import DetailFetcher, enrich_candidates
from offmarket.pipeline.persist import ListingWriter, persist_accepted
from offmarket.pipeline.review import ReviewEngine
from offmarket.pipeline.search import PaginatedSearch, miles_to_meters, search_keywords
from offmarket.vendors import google_places
from offmarket.vendors.openai_reviewer import OpenAIReviewer

logger = logging.getLogger(__name__)

EMPTY_RESULT_NOTE = "No companies passed filters (hard + AI)."


def run_search(
    request: SearchRequest,
    workspace_id: str,
    settings: Optional[Settings] = None,
    *,
    reviewer=None,
    fetch_text: Optional[Callable[[str], str]] = None,
    writer: Optional[ListingWriter] = None,
    sleep: Callable[[float], None] = time.sleep,
    geocode_fn=None,
    search_fn=None,
    details_fn: Optional[DetailFetcher] = None,
) -> SearchOutcome:
    """Geocode, search, merge, enrich, filter, review and persist.

    Raises ConfigError before any provider call when credentials are missing,
    GeocodeError when the location cannot be resolved, and
    MalformedVerdictError / psycopg2 errors as terminal failures. Per-keyword,
    per-detail and per-review transport failures only degrade the result.
    """
    settings = settings or get_settings()
    require_pipeline_credentials(settings)
    api_key = settings.google_api_key
    debug = FunnelCounts()

    keywords = expand_keywords(request.industries, settings.keyword_cap, settings.variant_cap)
    debug.keywords_used = len(keywords)
    logger.info("Searching %s within %d mi using keywords=%s", request.location, request.radius_miles, keywords)

    location = (geocode_fn or google_places.geocode)(request.location, api_key)
    radius_meters = miles_to_meters(request.radius_miles)

    searcher = PaginatedSearch(
        api_key,
        max_pages=settings.max_pages,
        settle_seconds=settings.page_settle_seconds,
        sleep=sleep,
        search_fn=search_fn or google_places.nearby_search,
    )
    per_keyword = search_keywords(keywords, location, radius_meters, searcher, settings.search_max_workers)
    debug.merged_results = sum(len(results) for results in per_keyword)

    unique = merge_candidates(per_keyword)
    debug.deduped_results = len(unique)

    detailed = enrich_candidates(
        unique,
        api_key,
        cap=settings.detail_cap,
        max_workers=settings.search_max_workers,
        fetch_details=details_fn,
    )
    debug.detailed = len(detailed)

    survivors = apply_hard_filter(detailed)
    debug.survivors = len(survivors)

    prefiltered = apply_prefilter(survivors, settings.survivor_cap)
    debug.prefiltered = len(prefiltered)

    engine = ReviewEngine(
        reviewer or OpenAIReviewer.from_settings(settings),
        fetch_text or partial(fetch_homepage_text, char_budget=settings.homepage_char_budget),
        target_max=settings.target_max,
        review_budget=settings.review_budget,
    )
    outcome = engine.run(prefiltered, request)
    debug.ai_reviewed = outcome.reviewed_count
    debug.kept = len(outcome.accepted)

    logger.info("Funnel for workspace=%s: %s", workspace_id, debug.to_dict())

    if not outcome.accepted:
        return SearchOutcome(count=0, companies=[], debug=debug, note=EMPTY_RESULT_NOTE)

    saved = persist_accepted(workspace_id, outcome.accepted, request, writer=writer)
    return SearchOutcome(count=len(saved), companies=saved, debug=debug)
