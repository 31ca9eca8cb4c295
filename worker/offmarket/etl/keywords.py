"""Industry label to search keyword expansion."""

import re
from typing import Dict, Iterable, List

# Expand an industry into several keywords so nearby search returns more.
INDUSTRY_SYNONYMS: Dict[str, List[str]] = {
    "hvac": ["hvac", "heating", "air conditioning", "mechanical contractor"],
    "electrical": ["electrical", "electrician", "electrical contractor"],
    "plumbing": ["plumbing", "plumber", "plumbing contractor"],
    "roofing": ["roofing", "roofer", "roof repair"],
    "landscaping": ["landscaping", "lawn care", "landscape services"],
    "cleaning": ["cleaning", "janitorial", "commercial cleaning"],
    "commercial cleaning": ["commercial cleaning", "janitorial", "cleaning service"],
    "janitorial": ["janitorial", "commercial cleaning", "cleaning service"],
    "pest control": ["pest control", "exterminator", "termite"],
    "auto repair": ["auto repair", "auto service", "mechanic"],
    "home health": ["home health", "home care", "caregiver services"],
}

DEFAULT_KEYWORD_CAP = 8
DEFAULT_VARIANT_CAP = 12

_BUSINESS_TYPE_WORD = re.compile(r"\b(services?|contractors?|company|companies)\b", re.IGNORECASE)
_CLEANING_DOMAIN = re.compile(r"cleaning|janitorial", re.IGNORECASE)


def expand_industry(industry: str) -> List[str]:
    key = industry.strip().lower()
    return list(INDUSTRY_SYNONYMS.get(key, [industry.strip()]))


def modifier_variant(keyword: str) -> str:
    kw = keyword.strip()
    return f"{kw} service" if _CLEANING_DOMAIN.search(kw) else f"{kw} contractor"


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    unique: List[str] = []
    for value in values:
        key = value.strip().lower()
        if key and key not in seen:
            seen.add(key)
            unique.append(value.strip())
    return unique


def expand_keywords(
    industries: Iterable[str],
    keyword_cap: int = DEFAULT_KEYWORD_CAP,
    variant_cap: int = DEFAULT_VARIANT_CAP,
) -> List[str]:
    """Return the bounded list of keyword variants searched for a request.

    Base keywords come first so the cap trims modifier variants before any
    synonym. Each base keyword gets at most one modifier variant.
    """
    base = _unique(kw for industry in industries for kw in expand_industry(industry))[:keyword_cap]
    modifiers = [modifier_variant(kw) for kw in base if not _BUSINESS_TYPE_WORD.search(kw)]
    ceiling = max(variant_cap, len(base))
    return _unique(base + modifiers)[:ceiling]
