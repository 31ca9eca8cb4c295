"""HTTP entrypoint for off-market discovery searches (Cloud Run friendly)."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from flask import Flask, jsonify, request

from offmarket.core.config import (
    ConfigError,
    get_settings,
    require_auth_credentials,
    require_pipeline_credentials,
)
from offmarket.pipeline.run import run_search
from offmarket.pipeline.validation import SearchValidationError, parse_search_request
from offmarket.vendors.supabase_auth import AuthError, resolve_workspace

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@app.after_request
def add_cors_headers(response):
    for header, value in CORS_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


def _error(message: str, status: int, **extra: Any) -> Any:
    return jsonify({"success": False, "error": message, **extra}), status


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, never the database."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "worker_port_config": getattr(settings, "worker_port", None),
                "google_configured": bool(settings.google_api_key),
                "openai_configured": bool(settings.openai_api_key),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.route("/off-market/search", methods=["OPTIONS"])
def search_preflight() -> Any:
    return "", 200


@app.post("/off-market/search")
def off_market_search() -> Any:
    """
    Run one synchronous discovery search for the caller's workspace.
    Required JSON fields: industries (list), location ("City, ST"), radius_miles
    """
    settings = get_settings()
    try:
        require_pipeline_credentials(settings)
        require_auth_credentials(settings)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return _error(str(exc), 500)

    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    try:
        search_request = parse_search_request(payload)
    except SearchValidationError as exc:
        return _error(str(exc), 400, field=exc.field)

    try:
        user_id, workspace_id = resolve_workspace(request.headers.get("Authorization"), settings)
    except AuthError as exc:
        return _error("Unauthorized" if exc.status == 401 else str(exc), exc.status)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Workspace lookup failed: %s", exc)
        return _error(str(exc) or "Workspace lookup failed", 500)

    logger.info(
        "Search requested by user=%s workspace=%s: %s", user_id, workspace_id, search_request.inputs()
    )

    try:
        outcome = run_search(search_request, workspace_id, settings)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Off-market search failed: %s", exc)
        return _error(str(exc) or "Unknown error", 500)

    return jsonify(outcome.to_payload()), 200


def main() -> None:
    """Bind to PORT when the platform injects one, else WORKER_PORT."""
    env_port = os.getenv("PORT")
    logger.info("[BOOT] ENV PORT=%s", env_port)

    port = int(env_port or get_settings().worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)

    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
