"""WhatsApp bridge client and bot bootstrap.

The WhatsApp session itself runs in a Baileys bridge process. This module talks
to it over HTTP:

- ``GET  /events``          WebSocket; one JSON frame per transport event
                            ``{"event": "messages.upsert", "data": {...}}``
- ``POST /media/download``  raw message envelope in, media bytes out
- ``POST /messages/send``   ``{"jid": ..., "content": {...}}``; binary fields
                            are sent as ``{"base64": "..."}``
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import Any, AsyncIterator, Dict

import aiohttp

from antidelete.config import cache as cache_cfg
from antidelete.config import core, recovery, storage
from antidelete.event_hooks import connection_hook, update_hook, upsert_hook
from antidelete.memory.cache import MessageCache
from antidelete.recovery import DeletionCorrelator, RecoveryPipeline, RecoveryResolver
from antidelete.storage import MediaStore, open_repository

logger = logging.getLogger(__name__)


class BridgeError(RuntimeError):
    """Raised when the bridge answers with a non-success status."""

    def __init__(self, status: int, url: str, detail: str = "") -> None:
        super().__init__(f"Bridge request to {url} failed with {status}: {detail}")
        self.status = status
        self.url = url


def _encode_content(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        k: {"base64": base64.b64encode(v).decode()} if isinstance(v, (bytes, bytearray)) else v
        for k, v in payload.items()
    }


class BridgeClient:
    """Async client for the WhatsApp bridge."""

    def __init__(self, base_url: str, timeout: float = 30) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": "antidelete/0.1"},
            )
        return self._session

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def events(self) -> AsyncIterator[Dict[str, Any]]:
        """Yield transport events in arrival order until the stream closes."""

        session = await self._get_session()
        async with session.ws_connect(self._url("/events"), heartbeat=30) as ws:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    try:
                        yield json.loads(msg.data)
                    except json.JSONDecodeError:
                        logger.warning("Dropping malformed event frame: %.200s", msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.error("Event stream error: %s", ws.exception())
                    break

    async def download_media(self, envelope: Dict[str, Any]) -> bytes:
        url = self._url("/media/download")
        session = await self._get_session()
        async with session.post(url, json={"message": envelope}) as resp:
            if resp.status != 200:
                raise BridgeError(resp.status, url, await resp.text())
            return await resp.read()

    async def send_message(self, jid: str, payload: Dict[str, Any]) -> None:
        url = self._url("/messages/send")
        session = await self._get_session()
        body = {"jid": jid, "content": _encode_content(payload)}
        async with session.post(url, json=body) as resp:
            if resp.status >= 300:
                raise BridgeError(resp.status, url, await resp.text())

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()


# --- Bootstrap --------------------------------------------------------------


def build_pipeline(client: BridgeClient) -> RecoveryPipeline:
    """Assemble the recovery pipeline from configuration."""

    message_cache = MessageCache(cache_cfg.CACHE_LENGTH)
    resolver = RecoveryResolver(
        client, MediaStore(storage.MEDIA_DIR), timeout=recovery.TASK_TIMEOUT
    )
    return RecoveryPipeline(
        message_cache,
        DeletionCorrelator(message_cache),
        resolver,
        open_repository(storage.DB_PATH),
        client,
        owner_jid=core.OWNER_JID,
        task_timeout=recovery.TASK_TIMEOUT,
    )


async def dispatch(client: BridgeClient, pipeline: RecoveryPipeline, event: Dict[str, Any]) -> None:
    """Route one transport event to its hook."""

    name = event.get("event")
    data = event.get("data")
    if name == "messages.upsert":
        await upsert_hook.handle(pipeline, data or {})
    elif name == "messages.update":
        await update_hook.handle(pipeline, data or [])
    elif name == "connection.update":
        await connection_hook.handle(client, data or {})
    else:
        logger.debug("Ignoring event %s", name)


async def serve(client: BridgeClient, pipeline: RecoveryPipeline) -> None:
    """Consume events serially until the bridge closes the stream."""

    logger.info("Bot started; waiting for events from %s", client.base_url)
    try:
        async for event in client.events():
            await dispatch(client, pipeline, event)
    finally:
        await pipeline.drain()
        await client.close()
    logger.info("Event stream closed")


def run() -> None:
    """Start the bot using configuration from the environment."""

    try:
        core.require()
    except ValueError as exc:
        logger.error("%s. Cannot run client.", exc)
        return

    async def _main() -> None:
        client = BridgeClient(core.BRIDGE_URL, timeout=core.BRIDGE_TIMEOUT)
        await serve(client, build_pipeline(client))

    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    except aiohttp.ClientError as exc:
        logger.error("Bridge connection failed: %s", exc)
