"""CLI job to run one off-market discovery search and persist the results."""

import argparse
import dataclasses
import json
import logging
from typing import List, Optional

from offmarket.core.config import ConfigError, get_settings
from offmarket.pipeline.run import run_search
from offmarket.pipeline.validation import ALLOWED_RADIUS_MILES, SearchValidationError, parse_search_request

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run an off-market company discovery search")
    parser.add_argument(
        "--industry",
        dest="industries",
        action="append",
        required=True,
        help="Industry to search (repeatable)",
    )
    parser.add_argument("--location", required=True, help="Search centre as 'City, ST'")
    parser.add_argument(
        "--radius",
        dest="radius_miles",
        type=int,
        default=10,
        help=f"Radius in miles, one of {', '.join(str(v) for v in ALLOWED_RADIUS_MILES)}",
    )
    parser.add_argument("--workspace-id", dest="workspace_id", required=True, help="Workspace owning the results")
    parser.add_argument(
        "--review-budget",
        dest="review_budget",
        type=int,
        default=settings.review_budget,
        help="Maximum number of candidate reviews",
    )
    parser.add_argument(
        "--target-max",
        dest="target_max",
        type=int,
        default=settings.target_max,
        help="Stop reviewing once this many candidates are kept",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        search_request = parse_search_request(
            {"industries": args.industries, "location": args.location, "radius_miles": args.radius_miles}
        )
    except SearchValidationError as exc:
        logger.error("Invalid %s: %s", exc.field, exc)
        raise SystemExit(2) from exc

    settings = dataclasses.replace(
        get_settings(),
        review_budget=args.review_budget,
        target_max=args.target_max,
    )

    try:
        outcome = run_search(search_request, args.workspace_id, settings)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc

    print(json.dumps(outcome.to_payload(), indent=2, default=str))


if __name__ == "__main__":
    main()
