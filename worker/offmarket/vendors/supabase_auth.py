"""Resolve a bearer token to the caller's user id and workspace."""

import logging
from functools import lru_cache
from typing import Callable, Optional, Tuple

from supabase import AuthApiError, Client, create_client

from offmarket.core.config import Settings, get_settings, require_auth_credentials
from offmarket.core.db import fetch_profile_workspace

logger = logging.getLogger(__name__)


class AuthError(RuntimeError):
    """Raised when the caller cannot be tied to a workspace."""

    def __init__(self, message: str, status: int = 401) -> None:
        super().__init__(message)
        self.status = status


@lru_cache(maxsize=4)
def get_client(url: str, service_role_key: str) -> Client:
    return create_client(url, service_role_key)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    header = (authorization or "").strip()
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    return token or None


def fetch_user_id(token: str, settings: Settings) -> Optional[str]:
    """Return the user id for ``token``, or None when Supabase rejects it.

    Missing credentials raise ConfigError; transport failures propagate.
    """
    require_auth_credentials(settings)
    client = get_client(settings.supabase_url, settings.supabase_service_role_key)
    try:
        response = client.auth.get_user(token)
    except AuthApiError as exc:
        logger.info("Auth lookup rejected token: %s", exc)
        return None

    user = getattr(response, "user", None)
    return getattr(user, "id", None) or None


def resolve_workspace(
    authorization: Optional[str],
    settings: Optional[Settings] = None,
    *,
    workspace_lookup: Callable[[str], Optional[str]] = fetch_profile_workspace,
) -> Tuple[str, str]:
    """Return ``(user_id, workspace_id)`` or raise AuthError (401 unauthenticated, 403 no workspace)."""
    settings = settings or get_settings()

    token = bearer_token(authorization)
    if not token:
        raise AuthError("Unauthorized", status=401)

    user_id = fetch_user_id(token, settings)
    if not user_id:
        raise AuthError("Unauthorized", status=401)

    workspace_id = workspace_lookup(user_id)
    if not workspace_id:
        raise AuthError("No workspace for user", status=403)

    return user_id, workspace_id
