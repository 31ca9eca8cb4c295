"""Database helpers for the worker."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

import psycopg2
from psycopg2 import extras, pool

from offmarket.core.config import get_settings

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None

LISTING_COLUMNS = (
    "workspace_id",
    "source_type",
    "external_source",
    "external_id",
    "place_id",
    "dedupe_key",
    "company_name",
    "address",
    "phone",
    "website",
    "lat",
    "lng",
    "rating",
    "ratings_total",
    "tier",
    "tier_reason",
    "is_saved",
)

# Refreshed when the same business is rediscovered. is_saved is absent on
# purpose: once a row exists only the user changes it.
_REFRESHED_COLUMNS = (
    "source_type",
    "place_id",
    "dedupe_key",
    "company_name",
    "address",
    "phone",
    "website",
    "lat",
    "lng",
    "rating",
    "ratings_total",
    "tier",
    "tier_reason",
)

RETURNED_COLUMNS = (
    "id",
    "company_name",
    "address",
    "phone",
    "website",
    "tier",
    "is_saved",
    "created_at",
    "place_id",
)

_UPSERT_LISTINGS = (
    "INSERT INTO companies ({columns}, updated_at) VALUES %s "
    "ON CONFLICT (workspace_id, external_source, external_id) DO UPDATE SET {updates}, updated_at = NOW() "
    "RETURNING {returning};"
).format(
    columns=", ".join(LISTING_COLUMNS),
    updates=", ".join(f"{column} = EXCLUDED.{column}" for column in _REFRESHED_COLUMNS),
    returning=", ".join(RETURNED_COLUMNS),
)
_UPSERT_TEMPLATE = "(" + ", ".join(f"%({column})s" for column in LISTING_COLUMNS) + ", NOW())"

_SELECT_PROFILE_WORKSPACE = "SELECT workspace_id FROM profiles WHERE id = %s"


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


def _prepare_params(row: Dict[str, Any]) -> Dict[str, Any]:
    params = {column: row.get(column) for column in LISTING_COLUMNS}
    if params["workspace_id"] is not None:
        params["workspace_id"] = str(params["workspace_id"])
    params["tier_reason"] = extras.Json(row.get("tier_reason") or {})
    params["is_saved"] = bool(row.get("is_saved", False))
    return params


def upsert_listings(rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Insert or refresh listings in one statement keyed by workspace + external source + external id."""
    if not rows:
        return []

    params = [_prepare_params(row) for row in rows]
    for entry in params:
        if not entry["workspace_id"] or not entry["external_source"] or not entry["external_id"]:
            raise ValueError("workspace_id, external_source and external_id are required for upsert")

    with get_connection() as conn:
        try:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                saved = extras.execute_values(
                    cur,
                    _UPSERT_LISTINGS,
                    params,
                    template=_UPSERT_TEMPLATE,
                    fetch=True,
                )
            conn.commit()
        except psycopg2.Error:
            conn.rollback()
            raise
    logger.info("Upserted %d listings", len(params))
    return [dict(record) for record in saved or []]


def fetch_profile_workspace(user_id: str) -> Optional[str]:
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_SELECT_PROFILE_WORKSPACE, (user_id,))
            record = cur.fetchone()
    if not record or not record[0]:
        return None
    return str(record[0])
