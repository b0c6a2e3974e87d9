"""
StubTypeDetector
================
Matches the terse encoding where the update itself carries
``messageStubType == 1`` (REVOKE) and its ``key`` names the deleted message.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict

from antidelete.messages.model import DeletionSignal, MessageIdentity

from . import register

logger = logging.getLogger(__name__)

REVOKE_STUB_TYPE = 1


@register
class StubTypeDetector:
    signal_kind = "stub_type"
    priority = 20

    @staticmethod
    def detect(update: Dict[str, Any]) -> DeletionSignal | None:
        body = update.get("update") or {}
        if body.get("messageStubType") != REVOKE_STUB_TYPE:
            return None

        target = MessageIdentity.from_key(update.get("key"))
        if target is None:
            logger.info("Revoke stub update without a usable key; ignoring")
            return None
        return DeletionSignal(target, "stub_type", time.time())
