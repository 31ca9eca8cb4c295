"""Homepage text extraction for candidate review.

Only the landing page is fetched. There is no crawling of contact or about
pages, and no robots or JS rendering: the reviewer needs a short sample of
what the business says about itself, nothing more.
"""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import urlparse, urlunparse

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

USER_AGENT = "OffMarketDiscoveryBot/1.0 (+https://offmarket-discovery.local/bot)"
REQUEST_TIMEOUT = 10
DEFAULT_CHAR_BUDGET = 6000
NO_HOMEPAGE_TEXT = "(no homepage text available)"

_WHITESPACE = re.compile(r"\s+")


def sanitize_website(raw_url: Optional[str]) -> Optional[str]:
    """Normalise raw website strings into absolute URLs, defaulting to https."""

    if not raw_url:
        return None

    url = raw_url.strip()
    if not url:
        return None

    parsed = urlparse(url, scheme="https")
    if not parsed.netloc:
        parsed = urlparse(f"https://{url}")

    if not parsed.netloc:
        return None

    normalized_path = parsed.path or "/"
    if not normalized_path.startswith("/"):
        normalized_path = f"/{normalized_path}"

    return urlunparse(parsed._replace(path=normalized_path, fragment=""))


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return _WHITESPACE.sub(" ", soup.get_text(" ")).strip()


def _build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }
    )
    return session


def fetch_homepage_text(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    char_budget: int = DEFAULT_CHAR_BUDGET,
    timeout: int = REQUEST_TIMEOUT,
) -> str:
    """Return the visible homepage text truncated to ``char_budget``, or "" on any failure."""

    target = sanitize_website(url)
    if not target:
        return ""

    owns_session = session is None
    http = session or _build_session()
    try:
        response = http.get(target, timeout=timeout, allow_redirects=True)
        if not response.ok:
            logger.info("Homepage %s returned status %s", target, response.status_code)
            return ""
        content_type = response.headers.get("Content-Type", "").lower()
        if content_type and "html" not in content_type:
            logger.debug("Skipping non-HTML content at %s (content-type=%s)", target, content_type)
            return ""
        return html_to_text(response.text)[:char_budget]
    except requests.RequestException as exc:
        logger.warning("Failed to fetch %s: %s", target, exc)
        return ""
    finally:
        if owns_session:
            http.close()
