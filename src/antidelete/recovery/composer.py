"""
Notification composer.

Turns a :class:`~antidelete.recovery.resolver.Resolution` into the chat
messages forwarded to the owner. Every notification starts with a header and a
metadata block (time, sender, chat, type); the body depends on the content
variant:

- text kinds      -> one text message
- media kinds     -> the media with the notification as caption; audio and
                     stickers cannot carry captions so the metadata follows as
                     a separate text; a text fallback when bytes are missing
- contact/location-> one text message with the parsed details
- anything else   -> a JSON preview of the body, capped at
                     :data:`PREVIEW_LIMIT` characters
"""

from __future__ import annotations

import datetime
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from antidelete.messages.model import (
    CachedMessage,
    ContactContent,
    LocationContent,
    MediaContent,
    TextContent,
    UnknownContent,
)

from .resolver import Resolution

PREVIEW_LIMIT = 1000

HEADER_MESSAGE = "🚨 *DELETED MESSAGE* 🚨"
HEADER_STATUS = "🚨 *DELETED STATUS UPDATE* 🚨"
MEDIA_MISSING = "❌ *Media file could not be recovered*"
NO_TEXT = "[Deleted message: no text available]"

OutboundKind = Literal["text", "image", "video", "audio", "sticker", "document"]

_MEDIA_OUTBOUND: Dict[str, OutboundKind] = {
    "imageMessage": "image",
    "videoMessage": "video",
    "audioMessage": "audio",
    "stickerMessage": "sticker",
    "documentMessage": "document",
}


def _drop_nones(d: Dict[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of ``d`` without keys mapped to ``None``."""
    return {k: v for k, v in d.items() if v is not None}


@dataclass(slots=True)
class OutboundMessage:
    """One message for the delivery sink."""

    kind: OutboundKind
    text: Optional[str] = None
    data: Optional[bytes] = None
    caption: Optional[str] = None
    mimetype: Optional[str] = None
    file_name: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Return the send body in the bridge's (Baileys) content shape."""
        if self.kind == "text":
            return {"text": self.text or ""}
        if self.kind == "audio":
            return _drop_nones({"audio": self.data, "mimetype": self.mimetype, "ptt": False})
        if self.kind == "sticker":
            return {"sticker": self.data}
        if self.kind == "document":
            return _drop_nones(
                {
                    "document": self.data,
                    "fileName": self.file_name,
                    "mimetype": self.mimetype,
                    "caption": self.caption,
                }
            )
        return _drop_nones({self.kind: self.data, "caption": self.caption})


# ------------------------------------------------------------------ #
# Presentation helpers
# ------------------------------------------------------------------ #


def format_timestamp(ms: int | float) -> str:
    """Render epoch milliseconds like ``Oct 8, 2026, 07:55:01 AM`` (local time)."""
    dt = datetime.datetime.fromtimestamp(ms / 1000)
    return f"{dt:%b} {dt.day}, {dt:%Y, %I:%M:%S %p}"


def sender_label(jid: str | None) -> str:
    if not jid:
        return "Unknown"
    return jid.split("@")[0] or "Unknown"


def chat_label(jid: str | None) -> str:
    if not jid:
        return "Unknown Chat"
    if "status" in jid:
        return "Status Broadcast"
    if "broadcast" in jid:
        return "Broadcast"
    if "g.us" in jid:
        return "Group: " + jid.split("@")[0]
    return "Private: " + jid.split("@")[0]


def format_contact(contact: ContactContent) -> str:
    return f"👤 *Name:* {contact.display_name}\n📞 *Phone:* {contact.phone}"


def format_location(location: LocationContent) -> str:
    title = "📍 *Live Location*" if location.live else "📍 *Location*"
    return (
        f"{title}\n"
        f"• *Latitude:* {location.latitude}\n"
        f"• *Longitude:* {location.longitude}\n"
        f"• *Accuracy:* {location.accuracy}m\n"
        f"• *Speed:* {location.speed}m/s\n"
        f"• [Open in Google Maps]({location.maps_url})"
    )


def preview(body: Dict[str, Any] | None) -> str:
    serialized = json.dumps(body or {}, ensure_ascii=False, separators=(",", ":"), default=str)
    return serialized[:PREVIEW_LIMIT]


# ------------------------------------------------------------------ #
# Composition
# ------------------------------------------------------------------ #


def compose(resolution: Resolution, cached: CachedMessage) -> List[OutboundMessage]:
    """Build the notification messages for one recovered deletion."""

    record = resolution.record
    content = resolution.content

    header = HEADER_STATUS if record.is_status else HEADER_MESSAGE
    metadata = (
        f"⏰ *Time:* {format_timestamp(cached.source_timestamp)}\n"
        f"👤 *From:* {sender_label(record.sender)}\n"
        f"💬 *Chat:* {chat_label(record.chat)}\n"
        f"📦 *Type:* {record.content_kind}"
    )
    intro = f"{header}\n\n{metadata}"

    if isinstance(content, TextContent):
        return [OutboundMessage("text", text=f"{intro}\n\n📝 *Content:*\n{content.text or NO_TEXT}")]

    if isinstance(content, MediaContent):
        return _compose_media(content, resolution.media_bytes, intro)

    if isinstance(content, ContactContent):
        return [OutboundMessage("text", text=f"{intro}\n\n{format_contact(content)}")]

    if isinstance(content, LocationContent):
        return [OutboundMessage("text", text=f"{intro}\n\n{format_location(content)}")]

    body = content.body if isinstance(content, UnknownContent) else {}
    return [OutboundMessage("text", text=f"{intro}\n\n📋 *Preview:*\n{preview(body)}")]


def _compose_media(
    content: MediaContent, data: bytes | None, intro: str
) -> List[OutboundMessage]:
    if not data:
        return [OutboundMessage("text", text=f"{intro}\n\n{MEDIA_MISSING}")]

    caption = intro
    if content.caption:
        caption += f"\n\n📝 *Caption:* {content.caption}"

    kind = _MEDIA_OUTBOUND[content.kind]
    if kind == "audio":
        return [
            OutboundMessage("audio", data=data, mimetype=content.mimetype or "audio/ogg; codecs=opus"),
            OutboundMessage("text", text=intro),
        ]
    if kind == "sticker":
        return [OutboundMessage("sticker", data=data), OutboundMessage("text", text=intro)]
    if kind == "document":
        return [
            OutboundMessage(
                "document",
                data=data,
                caption=caption,
                mimetype=content.mimetype or "application/octet-stream",
                file_name=content.file_name
                or f"document_{int(datetime.datetime.now().timestamp() * 1000)}",
            )
        ]
    return [OutboundMessage(kind, data=data, caption=caption, mimetype=content.mimetype)]


__all__ = [
    "PREVIEW_LIMIT",
    "OutboundMessage",
    "compose",
    "format_timestamp",
    "sender_label",
    "chat_label",
    "format_contact",
    "format_location",
    "preview",
]
