"""
Handle ``messages.update`` batches that may announce deletions.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from antidelete.recovery import RecoveryPipeline

logger = logging.getLogger(__name__)


async def handle(pipeline: RecoveryPipeline, updates: List[Dict[str, Any]]) -> None:
    """
    Hand every update to the pipeline; recovery runs in background tasks.
    """

    for update in updates:
        if not isinstance(update, dict):
            logger.warning("Ignoring malformed update: %r", update)
            continue

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Received update: %s", json.dumps(update, default=str)[:500])

        try:
            pipeline.handle_update(update)
        except Exception:
            # One bad update must not stop the rest of the batch.
            logger.exception("Failed to process update %s", update.get("key"))
