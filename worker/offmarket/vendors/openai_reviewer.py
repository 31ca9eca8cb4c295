"""Keep/reject review of a single candidate through the OpenAI chat API."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError

from offmarket.core.config import Settings, get_settings
from offmarket.models import Candidate, SearchRequest

logger = logging.getLogger(__name__)

REVIEW_TEMPERATURE = 0.2
REVIEW_TIMEOUT_SECONDS = 60

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```$")

REVIEW_PROMPT = """
You are helping a search fund / ETA buyer find owner-operated small businesses.

Decide whether to KEEP this company as an off-market candidate.

Search criteria:
- Industries: {industries}
- Geography: {location} within {radius_miles} miles
- Must be plausibly owner-operated SMB (not a chain, not franchise-heavy, not PE/VC/holding-company branded)
- Prefer local service businesses with real operations
- If unsure, reject (keep=false) to reduce noise

Company:
- Name: {name}
- Website: {website}
- Address: {address}
- Phone: {phone}
- Google rating: {rating}
- Ratings count: {rating_count}

Homepage text (may be partial):
{homepage_text}

Return ONLY valid JSON in this exact schema:
{{
  "keep": boolean,
  "tier": "A" | "B" | "C",
  "reasons": string[],
  "red_flags": string[]
}}
""".strip()


class ReviewServiceError(RuntimeError):
    """Raised when the review call itself fails (network, auth, rate limit)."""


class MalformedVerdictError(ValueError):
    """Raised when the review service answers with something that is not a valid verdict."""


def _blank(value: Any) -> str:
    return "" if value is None else str(value)


def build_prompt(context: SearchRequest, candidate: Candidate, homepage_text: str) -> str:
    return REVIEW_PROMPT.format(
        industries=", ".join(context.industries),
        location=context.location,
        radius_miles=context.radius_miles,
        name=candidate.name or "Unknown",
        website=_blank(candidate.website),
        address=_blank(candidate.address),
        phone=_blank(candidate.phone),
        rating=_blank(candidate.rating),
        rating_count=_blank(candidate.rating_count),
        homepage_text=homepage_text,
    )


def parse_json_object(text: str) -> Dict[str, Any]:
    """Strip code fences and parse a JSON object; anything else is malformed."""
    cleaned = _FENCE_END.sub("", _FENCE_START.sub("", (text or "").strip())).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedVerdictError(f"Bad AI response: not JSON ({exc.msg})") from exc
    if not isinstance(data, dict):
        raise MalformedVerdictError("Bad AI response: expected a JSON object")
    return data


class OpenAIReviewer:
    """Submits one candidate at a time; callers control how many calls are made."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        base_url: Optional[str] = None,
        temperature: float = REVIEW_TEMPERATURE,
        client: Optional[Any] = None,
    ) -> None:
        if not api_key and client is None:
            raise ReviewServiceError("OPENAI_API_KEY not configured")
        self.model = model
        self.temperature = temperature
        self._client = client or OpenAI(api_key=api_key, base_url=base_url)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "OpenAIReviewer":
        settings = settings or get_settings()
        return cls(
            settings.openai_api_key,
            settings.openai_model,
            base_url=settings.openai_base_url,
        )

    def review(self, context: SearchRequest, candidate: Candidate, homepage_text: str) -> Dict[str, Any]:
        prompt = build_prompt(context, candidate, homepage_text)
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
                timeout=REVIEW_TIMEOUT_SECONDS,
            )
        except OpenAIError as exc:
            raise ReviewServiceError(str(exc)) from exc

        content = response.choices[0].message.content if response.choices else ""
        return parse_json_object(content or "")
