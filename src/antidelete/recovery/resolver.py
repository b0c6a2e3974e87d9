"""
Recovery resolver
=================
1. Input        : a :class:`CachedMessage` popped from the cache.
2. Kind         : :func:`effective_kind` fixes the two known mis-tags
   a. ``messageContextInfo`` + ``ptvMessage`` (video notes) -> ``videoMessage``
   b. ``senderKeyDistributionMessage`` next to a media field -> that media kind
3. Text         : :func:`extract_text` reads the fixed text/caption table.
4. Media        : for media kinds, download bytes through the fetcher, pick an
   extension with :func:`media_extension` and write them to the media store.
5. Output       : :class:`Resolution` with the persisted record, the content
   variant and the in-memory bytes for immediate forwarding.

NOTE: media failures never abort recovery; the record keeps ``media_path=None``
and the composer sends a degraded notification instead.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
import mimetypes
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Dict, Optional, Tuple

from antidelete.messages.model import (
    CONTACT_KINDS,
    LOCATION_KINDS,
    MEDIA_KINDS,
    TEXT_KINDS,
    CachedMessage,
    ContactContent,
    LocationContent,
    MediaContent,
    RecoveredContent,
    RecoveredRecord,
    TextContent,
    UnknownContent,
)

from .contracts import MediaFetcher, MediaWriter

logger = logging.getLogger(__name__)

CONTEXT_INFO_KIND = "messageContextInfo"
VIDEO_NOTE_FIELD = "ptvMessage"
HOUSEKEEPING_KIND = "senderKeyDistributionMessage"

# kind -> (field inside the kind's payload | None when the payload is the text)
TEXT_FIELDS: Dict[str, Optional[str]] = {
    "conversation": None,
    "extendedTextMessage": "text",
    "imageMessage": "caption",
    "videoMessage": "caption",
    "documentMessage": "caption",
}

DEFAULT_EXTENSIONS: Dict[str, str] = {
    "imageMessage": "jpg",
    "videoMessage": "mp4",
    "audioMessage": "ogg",
    "stickerMessage": "webp",
    "documentMessage": "bin",
}

_PHONE_PATTERNS = (
    re.compile(r"TEL[;:][\s\S]*?([+0-9][0-9\s\-().]{7,})", re.IGNORECASE),
    re.compile(r"TEL[;:][\s\S]*?([0-9\s\-().]{7,})"),
    re.compile(r"TEL[;:][\s\S]*?([+][0-9]{1,3}[0-9\s\-().]{7,})"),
    re.compile(r"TEL[^:]*:([^\r\n]*)"),
)


@dataclass(slots=True)
class Resolution:
    """Everything the persistence and delivery steps need for one deletion."""

    record: RecoveredRecord
    content: RecoveredContent
    media_bytes: Optional[bytes] = None

    @property
    def media_recovered(self) -> bool:
        return self.media_bytes is not None


# ------------------------------------------------------------------ #
# Pure helpers
# ------------------------------------------------------------------ #


def effective_kind(kind: str, body: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """Return the kind to recover as, and the body to read it from."""

    if kind == CONTEXT_INFO_KIND:
        video_note = (body.get(CONTEXT_INFO_KIND) or {}).get(VIDEO_NOTE_FIELD)
        if video_note:
            logger.info("Detected video note (ptvMessage)")
            # Copy so the cached envelope stays untouched.
            return "videoMessage", {**body, "videoMessage": video_note}

    if kind == HOUSEKEEPING_KIND:
        for media_kind in MEDIA_KINDS:
            if body.get(media_kind):
                logger.info("Detected status update with %s", media_kind)
                return media_kind, body

    return kind, body


def extract_text(kind: str, body: Dict[str, Any]) -> str | None:
    """Return the text or caption carried by ``body`` for ``kind``."""

    if kind not in TEXT_FIELDS:
        return None
    field = TEXT_FIELDS[kind]
    value = body.get(kind)
    if field is not None:
        value = (value or {}).get(field) if isinstance(value, dict) else None
    if not isinstance(value, str) or not value:
        return None
    return value


def media_extension(kind: str, media: Dict[str, Any] | None) -> str:
    """Pick a file extension from the MIME type, the kind, or a document name."""

    media = media or {}
    ext = DEFAULT_EXTENSIONS.get(kind, "bin")

    mimetype = media.get("mimetype")
    if mimetype:
        guessed = mimetypes.guess_extension(mimetype.split(";")[0].strip())
        ext = guessed.lstrip(".") if guessed else "bin"

    if kind == "documentMessage" and media.get("fileName"):
        ext = PurePath(str(media["fileName"])).suffix.lstrip(".") or ext

    return ext


def is_status_chat(jid: str | None) -> bool:
    jid = str(jid or "")
    return "status" in jid or jid.endswith("@broadcast")


def parse_contact(contact: Dict[str, Any] | None) -> ContactContent:
    """Read display name and phone number out of a ``contactMessage``."""

    contact = contact or {}
    display_name = contact.get("displayName") or "Unknown"
    vcard = contact.get("vcard") or ""

    phone = "Not available"
    for pattern in _PHONE_PATTERNS:
        match = pattern.search(vcard)
        if match and match.group(1):
            phone = re.sub(r"[^\d+]", "", match.group(1).strip())
            if len(phone) > 3:
                break

    return ContactContent("contactMessage", display_name=display_name, phone=phone)


def parse_location(kind: str, location: Dict[str, Any] | None) -> LocationContent:
    location = location or {}
    return LocationContent(
        kind,
        latitude=location.get("degreesLatitude") or 0,
        longitude=location.get("degreesLongitude") or 0,
        accuracy=location.get("accuracyInMeters") or 0,
        speed=location.get("speedInMps") or 0,
        live=kind == "liveLocationMessage",
    )


def build_content(kind: str, body: Dict[str, Any], text: str | None) -> RecoveredContent:
    """Map ``kind`` onto its closed content variant."""

    if kind in TEXT_KINDS:
        return TextContent(kind, text=text)
    if kind in MEDIA_KINDS:
        media = body.get(kind) or {}
        return MediaContent(
            kind,
            mimetype=media.get("mimetype"),
            file_name=media.get("fileName"),
            caption=text,
        )
    if kind in CONTACT_KINDS:
        return parse_contact(body.get(kind))
    if kind in LOCATION_KINDS:
        return parse_location(kind, body.get(kind))
    return UnknownContent(kind, body=body)


# ------------------------------------------------------------------ #
# Resolver
# ------------------------------------------------------------------ #


class RecoveryResolver:
    """Reconstruct a deleted message, downloading its media when needed."""

    def __init__(
        self,
        fetcher: MediaFetcher,
        media_store: MediaWriter,
        *,
        timeout: float | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._media_store = media_store
        self._timeout = timeout

    async def resolve(self, cached: CachedMessage) -> Resolution:
        kind, body = effective_kind(cached.content_kind, cached.content)
        logger.info("Recovered message %s of type %s", cached.identity, kind)

        text = extract_text(kind, body)
        sender = cached.sender
        media_path: str | None = None
        media_bytes: bytes | None = None

        if kind in MEDIA_KINDS:
            media_bytes = await self._download(cached)
            if media_bytes:
                ext = media_extension(kind, body.get(kind))
                media_path = await self._save(media_bytes, sender, ext)

        record = RecoveredRecord(
            timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            sender=sender,
            chat=cached.chat,
            content_kind=kind,
            text_content=text,
            media_path=media_path,
            is_status=is_status_chat(cached.chat),
        )
        return Resolution(record, build_content(kind, body, text), media_bytes)

    async def _download(self, cached: CachedMessage) -> bytes | None:
        try:
            data = await asyncio.wait_for(
                self._fetcher.download_media(cached.raw_envelope), self._timeout
            )
        except Exception as exc:
            logger.error("Failed to download media for %s: %s", cached.identity, exc)
            return None
        if not data:
            logger.error("Media download for %s returned no data", cached.identity)
            return None
        return data

    async def _save(self, data: bytes, sender: str, ext: str) -> str | None:
        try:
            path = await asyncio.to_thread(self._media_store.save, data, sender, ext)
        except OSError:
            # Bytes stay in memory for forwarding even if the disk copy failed.
            logger.exception("Failed to write recovered media for %s", sender)
            return None
        logger.info("Media saved to: %s", path)
        return path


__all__ = [
    "Resolution",
    "RecoveryResolver",
    "effective_kind",
    "extract_text",
    "media_extension",
    "is_status_chat",
    "parse_contact",
    "parse_location",
    "build_content",
]
