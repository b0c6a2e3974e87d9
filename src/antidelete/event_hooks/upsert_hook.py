import logging
from typing import Any, Dict

from antidelete.recovery import RecoveryPipeline

logger = logging.getLogger(__name__)


async def handle(pipeline: RecoveryPipeline, data: Dict[str, Any]) -> None:
    """Cache incoming messages from a ``messages.upsert`` batch."""

    # History syncs and appends replay old messages; only live traffic is cached.
    if data.get("type") != "notify":
        return

    for envelope in data.get("messages") or []:
        try:
            pipeline.ingest(envelope)
        except Exception:
            key = (envelope or {}).get("key") if isinstance(envelope, dict) else None
            logger.exception("Failed to cache message %s", key)
