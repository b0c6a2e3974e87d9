"""
Bounded in-memory message cache.

:class:`MessageCache` keeps the most recently seen content messages keyed by
:class:`~antidelete.messages.model.MessageIdentity`. Entries live in an
``OrderedDict`` ordered by ``received_at`` so eviction of the oldest entry is
O(1). The cache is memory-only: it starts empty on every process start, so
deletions of messages seen before a restart are unrecoverable.

All operations take a re-entrant lock. Under the default single event loop the
lock is never contended; it makes the cache safe to share with a worker pool,
where :meth:`MessageCache.pop` is the one critical section that turns a
deletion into at-most-once recovery.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from antidelete.messages.model import CachedMessage, MessageIdentity

from .utils import _body_preview

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 5000


class MessageCache:
    """Insertion-ordered identity -> message map with a hard capacity."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self._capacity = capacity
        self._entries: OrderedDict[MessageIdentity, CachedMessage] = OrderedDict()
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._capacity

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    def put(self, message: CachedMessage) -> MessageIdentity | None:
        """Insert or overwrite ``message``, returning any evicted identity."""

        identity = message.identity
        evicted: MessageIdentity | None = None
        with self._lock:
            # Overwrites move to the back so ordering keeps tracking received_at.
            self._entries.pop(identity, None)
            self._entries[identity] = message
            if len(self._entries) > self._capacity:
                evicted, _ = self._entries.popitem(last=False)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Cached message %s (%s) | %s",
                identity,
                message.content_kind,
                _body_preview(message.content),
            )
        if evicted is not None:
            logger.debug("Evicted %s (capacity %d)", evicted, self._capacity)
        return evicted

    def remove(self, identity: MessageIdentity) -> CachedMessage | None:
        """Remove ``identity`` if present and return its entry."""

        with self._lock:
            return self._entries.pop(identity, None)

    def pop(self, identity: MessageIdentity) -> CachedMessage | None:
        """Look up and remove ``identity`` in one step.

        A second call for the same identity returns ``None``, which is what
        makes replayed deletion signals harmless.
        """

        return self.remove(identity)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def get(self, identity: MessageIdentity) -> CachedMessage | None:
        """Return the cached entry for ``identity`` without removing it."""

        with self._lock:
            return self._entries.get(identity)

    def identities(self) -> list[MessageIdentity]:
        """Return cached identities ordered oldest -> newest."""

        with self._lock:
            return list(self._entries)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["MessageCache", "DEFAULT_CAPACITY"]
