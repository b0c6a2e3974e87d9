"""
ProtocolRevokeDetector
======================
Matches updates whose embedded body is a ``protocolMessage`` of type REVOKE::

    {"key": {...}, "update": {"message": {"protocolMessage": {
        "type": 0, "key": {"remoteJid": "...", "id": "..."}}}}}

The target identity is the protocol message's own ``key``, not the update's.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict

from antidelete.messages.model import DeletionSignal, MessageIdentity

from . import register

logger = logging.getLogger(__name__)

REVOKE_TYPES = (0, "REVOKE")


@register
class ProtocolRevokeDetector:
    signal_kind = "protocol_revoke"
    priority = 10

    @staticmethod
    def detect(update: Dict[str, Any]) -> DeletionSignal | None:
        body = update.get("update") or {}
        proto = (body.get("message") or {}).get("protocolMessage")
        if not proto or proto.get("type") not in REVOKE_TYPES:
            return None

        target = MessageIdentity.from_key(proto.get("key"))
        if target is None:
            logger.info("Revoke protocolMessage without a usable target key; ignoring")
            return None
        return DeletionSignal(target, "protocol_revoke", time.time())
