"""Budgeted, sequential review of filtered candidates.

The engine is a single loop whose two stop conditions are checked before any
spend on each iteration: enough accepted candidates, or the review budget used
up. Reviews are never issued in parallel, so the budget holds as a hard limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from offmarket.core.homepage import NO_HOMEPAGE_TEXT
from offmarket.models import Candidate, ReviewedCandidate, ReviewVerdict, SearchRequest
from offmarket.vendors.openai_reviewer import MalformedVerdictError, ReviewServiceError

logger = logging.getLogger(__name__)

VALID_TIERS = ("A", "B", "C")
DEFAULT_TARGET_MAX = 15
DEFAULT_REVIEW_BUDGET = 30


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def parse_verdict(payload: Dict[str, Any]) -> ReviewVerdict:
    """Validate a review payload. keep and tier are never coerced."""
    if not isinstance(payload, dict):
        raise MalformedVerdictError("Bad AI response: expected a JSON object")
    keep = payload.get("keep")
    if not isinstance(keep, bool):
        raise MalformedVerdictError("Bad AI response: keep missing")
    tier = payload.get("tier")
    if tier not in VALID_TIERS:
        raise MalformedVerdictError("Bad AI response: tier invalid")
    return ReviewVerdict(
        keep=keep,
        tier=tier,
        reasons=_string_list(payload.get("reasons")),
        red_flags=_string_list(payload.get("red_flags")),
    )


@dataclass
class ReviewOutcome:
    accepted: List[ReviewedCandidate] = field(default_factory=list)
    reviewed_count: int = 0


class ReviewEngine:
    def __init__(
        self,
        reviewer,
        fetch_text: Callable[[str], str],
        *,
        target_max: int = DEFAULT_TARGET_MAX,
        review_budget: int = DEFAULT_REVIEW_BUDGET,
    ) -> None:
        self.reviewer = reviewer
        self.fetch_text = fetch_text
        self.target_max = target_max
        self.review_budget = review_budget

    def should_stop(self, outcome: ReviewOutcome) -> bool:
        return len(outcome.accepted) >= self.target_max or outcome.reviewed_count >= self.review_budget

    def _homepage_text(self, website: str) -> str:
        try:
            text = self.fetch_text(website)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Homepage fetch failed for %s: %s", website, exc)
            text = ""
        return text or NO_HOMEPAGE_TEXT

    def run(self, candidates: Sequence[Candidate], context: SearchRequest) -> ReviewOutcome:
        outcome = ReviewOutcome()

        for candidate in candidates:
            if self.should_stop(outcome):
                break
            if not candidate.website:
                continue

            homepage_text = self._homepage_text(candidate.website)
            try:
                payload: Optional[Dict[str, Any]] = self.reviewer.review(context, candidate, homepage_text)
            except ReviewServiceError as exc:
                logger.warning("Review call failed for %s: %s", candidate.name, exc)
                payload = None
            finally:
                outcome.reviewed_count += 1

            if payload is None:
                continue

            verdict = parse_verdict(payload)
            if verdict.keep:
                outcome.accepted.append(ReviewedCandidate(candidate=candidate, verdict=verdict))
            else:
                logger.debug("Reviewer rejected %s (tier=%s)", candidate.name, verdict.tier)

        logger.info(
            "Review finished: reviewed=%d accepted=%d budget=%d target=%d",
            outcome.reviewed_count,
            len(outcome.accepted),
            self.review_budget,
            self.target_max,
        )
        return outcome
