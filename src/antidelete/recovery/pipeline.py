"""
Recovery pipeline
=================

Wires the cache, correlator, resolver, store and delivery sink together.

- :meth:`RecoveryPipeline.ingest` normalizes a content event and writes it to
  the cache before returning, so an update handled afterwards always sees it.
- :meth:`RecoveryPipeline.handle_update` correlates synchronously (the cache
  entry is popped right away) and schedules the slow part as a background task:
  media download, then two independent side effects, a store write and the
  owner notification. Each side effect has its own error boundary and timeout;
  neither waits on nor rolls back the other.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, Set

from antidelete.memory.cache import MessageCache
from antidelete.messages.model import CachedMessage, DeletionSignal
from antidelete.messages.normalizer import normalize

from .composer import compose
from .contracts import DeliverySink, RecordStore
from .correlator import DeletionCorrelator
from .resolver import RecoveryResolver, Resolution

logger = logging.getLogger(__name__)


class RecoveryPipeline:
    """Single-loop coordinator for content ingestion and deletion recovery."""

    def __init__(
        self,
        cache: MessageCache,
        correlator: DeletionCorrelator,
        resolver: RecoveryResolver,
        store: RecordStore,
        sink: DeliverySink,
        *,
        owner_jid: str | None = None,
        task_timeout: float | None = None,
    ) -> None:
        self.cache = cache
        self.correlator = correlator
        self.resolver = resolver
        self.store = store
        self.sink = sink
        self.owner_jid = owner_jid
        self.task_timeout = task_timeout
        self._tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------ #
    # Event entry points
    # ------------------------------------------------------------------ #

    def ingest(self, envelope: Dict[str, Any]) -> CachedMessage | None:
        """Cache ``envelope`` if it carries recoverable content."""

        cached = normalize(envelope)
        if cached is None:
            return None
        self.cache.put(cached)
        logger.info("Cached message: %s, type: %s", cached.identity, cached.content_kind)
        return cached

    def handle_update(self, update: Dict[str, Any]) -> asyncio.Task | None:
        """Start recovery for ``update`` if it deletes a cached message."""

        match = self.correlator.correlate(update)
        if match is None:
            return None
        signal, cached = match
        return self._spawn(self.recover(signal, cached), f"recover:{signal.target}")

    # ------------------------------------------------------------------ #
    # Recovery
    # ------------------------------------------------------------------ #

    async def recover(self, signal: DeletionSignal, cached: CachedMessage) -> Resolution:
        """Resolve ``cached`` and fan out the store write and the notification."""

        resolution = await self.resolver.resolve(cached)
        self._spawn(self._persist(resolution), f"persist:{signal.target}")
        self._spawn(self._deliver(resolution, cached), f"deliver:{signal.target}")
        return resolution

    async def _persist(self, resolution: Resolution) -> None:
        try:
            row_id = await asyncio.wait_for(
                self.store.append(resolution.record), self.task_timeout
            )
        except Exception:
            logger.exception("Insert error for deleted record from %s", resolution.record.chat)
            return
        logger.info("Inserted deleted record %s for %s", row_id, resolution.record.chat)

    async def _deliver(self, resolution: Resolution, cached: CachedMessage) -> None:
        if not self.owner_jid:
            logger.warning("OWNER_JID not configured - skipping forward")
            return

        try:
            await asyncio.wait_for(self._send_all(resolution, cached), self.task_timeout)
        except Exception:
            logger.exception("Error sending recovered message %s", cached.identity)
            return
        logger.info("Forwarded %s to %s", cached.identity, self.owner_jid)

    async def _send_all(self, resolution: Resolution, cached: CachedMessage) -> None:
        for outbound in compose(resolution, cached):
            await self.sink.send_message(self.owner_jid, outbound.to_payload())

    # ------------------------------------------------------------------ #
    # Task bookkeeping
    # ------------------------------------------------------------------ #

    def _spawn(self, coro: Awaitable[Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Task %s failed: %s", task.get_name(), exc, exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every scheduled recovery task (and its children) is done."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


__all__ = ["RecoveryPipeline"]
