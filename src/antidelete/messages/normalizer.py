"""
Inbound envelope normalization.

Baileys delivers each message as ``{"key": {...}, "message": {...},
"messageTimestamp": ...}`` where ``message`` is a mapping whose first key names
the content kind. Disappearing and view-once messages nest the real body one
level down; :func:`unwrap` peels that layer so the cache always stores the
innermost body. :func:`normalize` turns an envelope into a
:class:`~antidelete.messages.model.CachedMessage`, or ``None`` when there is
nothing worth caching (key-distribution housekeeping, empty bodies, and the
``protocolMessage`` control envelopes that carry deletions).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Tuple

from .model import PROTOCOL_KIND, CachedMessage, MessageIdentity

logger = logging.getLogger(__name__)

WRAPPER_KINDS = ("ephemeralMessage", "viewOnceMessage", "viewOnceMessageV2")


def unwrap(message: Dict[str, Any] | None) -> Tuple[Dict[str, Any] | None, str | None]:
    """Return ``(inner_body, wrapper_name)`` for ``message``."""

    if not message:
        return None, None
    for wrapper in WRAPPER_KINDS:
        inner = (message.get(wrapper) or {}).get("message")
        if inner:
            return inner, wrapper
    return message, None


def content_kind(body: Dict[str, Any] | None) -> str | None:
    """Return the discriminating key of ``body`` (its first key)."""

    if not body:
        return None
    return next(iter(body), None)


def _source_timestamp(envelope: Dict[str, Any]) -> int:
    raw = envelope.get("messageTimestamp")
    # Long values may arrive as {"low": ..., "high": ...} or as strings.
    if isinstance(raw, dict):
        raw = raw.get("low")
    try:
        seconds = int(raw)
    except (TypeError, ValueError):
        return int(time.time() * 1000)
    return seconds * 1000 if seconds else int(time.time() * 1000)


def normalize(
    envelope: Dict[str, Any],
    *,
    clock: Callable[[], float] = time.monotonic,
) -> CachedMessage | None:
    """Build a cache entry from ``envelope`` or return ``None`` to skip it."""

    if not envelope or not envelope.get("message"):
        return None

    key = envelope.get("key") or {}
    identity = MessageIdentity(
        str(key.get("remoteJid") or "unknown"),
        str(key.get("id") or int(time.time() * 1000)),
    )

    body, wrapper = unwrap(envelope["message"])
    kind = content_kind(body)
    if not kind:
        logger.debug("Skipping %s: no content kind", identity)
        return None

    if kind == PROTOCOL_KIND:
        logger.debug("Skipping %s: protocol control message", identity)
        return None

    return CachedMessage(
        identity=identity,
        raw_envelope=envelope,
        content_kind=kind,
        content=body,
        received_at=clock(),
        source_timestamp=_source_timestamp(envelope),
        wrapper=wrapper,
    )


__all__ = ["WRAPPER_KINDS", "unwrap", "content_kind", "normalize"]
