"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    openai_api_key: str
    database_url: str
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    worker_port: int = 9000
    max_pages: int = 3
    page_settle_seconds: float = 2.0
    keyword_cap: int = 8
    variant_cap: int = 12
    detail_cap: int = 80
    survivor_cap: int = 60
    review_budget: int = 30
    target_max: int = 15
    homepage_char_budget: int = 6000
    search_max_workers: int = 8


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_MAPS_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
    openai_api_key = os.getenv("OPENAI_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")
    openai_base_url = os.getenv("OPENAI_BASE_URL") or None
    supabase_url = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL", "")
    supabase_service_role_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

    if not database_url:
        logger.warning("DATABASE_URL is not set; database operations will fail.")
    if not google_api_key:
        logger.warning("GOOGLE_MAPS_API_KEY is not configured; Google Places requests will fail.")
    if not openai_api_key:
        logger.warning("OPENAI_API_KEY is not configured; candidate reviews will fail.")
    if not supabase_url:
        logger.warning("SUPABASE_URL is not configured; bearer tokens cannot be resolved.")

    return Settings(
        google_api_key=google_api_key,
        openai_api_key=openai_api_key,
        database_url=database_url,
        openai_base_url=openai_base_url,
        openai_model=os.getenv("OPENAI_REVIEW_MODEL", "gpt-4o-mini"),
        supabase_url=supabase_url.rstrip("/"),
        supabase_service_role_key=supabase_service_role_key,
        worker_port=_int_env("WORKER_PORT", 9000),
        max_pages=_int_env("WORKER_MAX_PAGES", 3),
        page_settle_seconds=float(os.getenv("PAGE_SETTLE_SECONDS", "2.0")),
        keyword_cap=_int_env("KEYWORD_CAP", 8),
        variant_cap=_int_env("VARIANT_CAP", 12),
        detail_cap=_int_env("DETAIL_CAP", 80),
        survivor_cap=_int_env("SURVIVOR_CAP", 60),
        review_budget=_int_env("REVIEW_BUDGET", 30),
        target_max=_int_env("REVIEW_TARGET_MAX", 15),
        homepage_char_budget=_int_env("HOMEPAGE_CHAR_BUDGET", 6000),
        search_max_workers=_int_env("SEARCH_MAX_WORKERS", 8),
    )


def require_pipeline_credentials(settings: Settings) -> None:
    """Fail fast before any provider call when a billable key is missing."""
    if not settings.google_api_key:
        raise ConfigError("Missing GOOGLE_MAPS_API_KEY")
    if not settings.openai_api_key:
        raise ConfigError("Missing OPENAI_API_KEY")


def require_auth_credentials(settings: Settings) -> None:
    """The HTTP surface cannot tie a bearer token to a workspace without Supabase."""
    if not settings.supabase_url:
        raise ConfigError("Missing SUPABASE_URL")
    if not settings.supabase_service_role_key:
        raise ConfigError("Missing SUPABASE_SERVICE_ROLE_KEY")
