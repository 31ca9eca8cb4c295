"""Write accepted candidates as off-market listings."""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from offmarket.core.db import upsert_listings
from offmarket.etl.transform import to_listing_row
from offmarket.models import ReviewedCandidate, SearchRequest

logger = logging.getLogger(__name__)

ListingWriter = Callable[[Sequence[Dict[str, Any]]], List[Dict[str, Any]]]


def persist_accepted(
    workspace_id: str,
    accepted: Sequence[ReviewedCandidate],
    context: SearchRequest,
    writer: Optional[ListingWriter] = None,
) -> List[Dict[str, Any]]:
    if not accepted:
        logger.info("No accepted candidates; skipping write for workspace=%s", workspace_id)
        return []
    inputs = context.inputs()
    rows = [to_listing_row(workspace_id, reviewed, inputs) for reviewed in accepted]
    return (writer or upsert_listings)(rows)
