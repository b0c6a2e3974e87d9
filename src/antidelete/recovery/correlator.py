"""Match deletion notices against the message cache."""

from __future__ import annotations

import logging
from typing import Any, Dict, Sequence, Tuple

from antidelete.memory.cache import MessageCache
from antidelete.messages.model import CachedMessage, DeletionSignal

from . import signals
from .signals import SignalDetector

logger = logging.getLogger(__name__)


class DeletionCorrelator:
    """Turn update events into ``(signal, cached message)`` pairs.

    Detection walks the detector list in priority order and stops at the first
    match. Resolution is a single :meth:`MessageCache.pop`, so whichever
    encoding announced the deletion, the entry is consumed exactly once.
    """

    def __init__(
        self,
        cache: MessageCache,
        detectors: Sequence[SignalDetector] | None = None,
    ) -> None:
        self._cache = cache
        self._detectors = list(detectors) if detectors is not None else signals.ordered()

    def detect(self, update: Dict[str, Any]) -> DeletionSignal | None:
        for detector in self._detectors:
            signal = detector.detect(update)
            if signal is not None:
                return signal
        return None

    def correlate(
        self, update: Dict[str, Any]
    ) -> Tuple[DeletionSignal, CachedMessage] | None:
        """Return the matched signal and the consumed cache entry, if any."""

        signal = self.detect(update)
        if signal is None:
            return None

        logger.info("Detected deletion via %s for %s", signal.signal_kind, signal.target)
        # Out-of-order signals (content not cached yet) are dropped, not queued.
        cached = self._cache.pop(signal.target)
        if cached is None:
            logger.info("No cached copy found for %s", signal.target)
            return None
        return signal, cached


__all__ = ["DeletionCorrelator"]
