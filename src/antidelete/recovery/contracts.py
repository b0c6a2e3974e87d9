"""
Collaborator contracts for the recovery pipeline.

The pipeline only needs a handful of methods from the transport, the media
store and the record store. Each is described by a small
:class:`typing.Protocol` so the bridge client, the SQLite repository and test
fakes all satisfy the same static contract.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol

from antidelete.messages.model import RecoveredRecord


class MediaFetcher(Protocol):
    async def download_media(self, envelope: Dict[str, Any]) -> bytes: ...


class DeliverySink(Protocol):
    async def send_message(self, jid: str, payload: Dict[str, Any]) -> None: ...


class RecordStore(Protocol):
    async def append(self, record: RecoveredRecord) -> int: ...


class MediaWriter(Protocol):
    def save(self, data: bytes, sender: str, ext: str) -> str: ...


__all__ = ["MediaFetcher", "DeliverySink", "RecordStore", "MediaWriter"]
