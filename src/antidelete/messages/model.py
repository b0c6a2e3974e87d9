"""Dataclass models for cached and recovered messages.

A cached entry is keyed by :class:`MessageIdentity` (``remoteJid`` + message
``id``) and keeps the raw envelope untouched so media can be downloaded later.
When a deletion is correlated, the cached body resolves into exactly one
:class:`RecoveredContent` variant::

    TextContent      conversation / extendedTextMessage
    MediaContent     image / video / audio / sticker / document
    ContactContent   contactMessage
    LocationContent  liveLocationMessage / locationMessage
    UnknownContent   anything else (kept for a JSON preview)

:class:`RecoveredRecord` is the row persisted for every processed deletion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Union


TEXT_KINDS = ("conversation", "extendedTextMessage")
MEDIA_KINDS = (
    "imageMessage",
    "videoMessage",
    "audioMessage",
    "stickerMessage",
    "documentMessage",
)
CONTACT_KINDS = ("contactMessage",)
LOCATION_KINDS = ("liveLocationMessage", "locationMessage")

# Control envelopes that announce deletions; never cached as content.
PROTOCOL_KIND = "protocolMessage"

SignalKind = Literal["protocol_revoke", "stub_type"]


@dataclass(frozen=True, slots=True)
class MessageIdentity:
    """Composite key naming one message in the observed stream."""

    conversation_id: str
    message_id: str

    @classmethod
    def from_key(cls, key: Dict[str, Any] | None) -> Optional["MessageIdentity"]:
        """Build an identity from a Baileys ``key`` mapping, or ``None``."""
        if not key:
            return None
        remote_jid = key.get("remoteJid")
        msg_id = key.get("id")
        if not remote_jid or not msg_id:
            return None
        return cls(str(remote_jid), str(msg_id))

    def __str__(self) -> str:
        return f"{self.conversation_id}|{self.message_id}"


@dataclass(frozen=True, slots=True)
class CachedMessage:
    """Normalized snapshot of one inbound content message."""

    identity: MessageIdentity
    raw_envelope: Dict[str, Any] = field(repr=False)
    content_kind: str
    content: Dict[str, Any] = field(repr=False)
    received_at: float
    source_timestamp: int
    wrapper: Optional[str] = None

    @property
    def sender(self) -> str:
        key = self.raw_envelope.get("key") or {}
        return str(key.get("participant") or key.get("remoteJid") or self.identity.conversation_id)

    @property
    def chat(self) -> str:
        return self.identity.conversation_id


@dataclass(frozen=True, slots=True)
class DeletionSignal:
    """A normalized "this message was revoked" notification."""

    target: MessageIdentity
    signal_kind: SignalKind
    observed_at: float


@dataclass(frozen=True, slots=True)
class RecoveredRecord:
    """Durable artifact written once per processed deletion."""

    timestamp: str
    sender: str
    chat: str
    content_kind: str
    text_content: Optional[str] = None
    media_path: Optional[str] = None
    is_status: bool = False

    def to_row(self) -> tuple[Any, ...]:
        return (
            self.timestamp,
            self.sender,
            self.chat,
            self.content_kind,
            self.text_content,
            self.media_path,
            1 if self.is_status else 0,
        )


# ------------------------------------------------------------------ #
# Recovered content variants
# ------------------------------------------------------------------ #


@dataclass(slots=True)
class TextContent:
    kind: str
    text: Optional[str] = None
    variant: Literal["text"] = "text"


@dataclass(slots=True)
class MediaContent:
    kind: str
    mimetype: Optional[str] = None
    file_name: Optional[str] = None
    caption: Optional[str] = None
    variant: Literal["media"] = "media"


@dataclass(slots=True)
class ContactContent:
    kind: str
    display_name: str = "Unknown"
    phone: str = "Not available"
    variant: Literal["contact"] = "contact"


@dataclass(slots=True)
class LocationContent:
    kind: str
    latitude: float = 0
    longitude: float = 0
    accuracy: float = 0
    speed: float = 0
    live: bool = True
    variant: Literal["location"] = "location"

    @property
    def maps_url(self) -> str:
        return f"https://maps.google.com/?q={self.latitude},{self.longitude}"


@dataclass(slots=True)
class UnknownContent:
    """Fallback for kinds outside the fixed tables; keeps the body for previews."""

    kind: str
    body: Dict[str, Any] = field(default_factory=dict)
    variant: Literal["unknown"] = "unknown"


RecoveredContent = Union[
    TextContent, MediaContent, ContactContent, LocationContent, UnknownContent
]


__all__ = [
    "TEXT_KINDS",
    "MEDIA_KINDS",
    "CONTACT_KINDS",
    "LOCATION_KINDS",
    "PROTOCOL_KIND",
    "MessageIdentity",
    "CachedMessage",
    "DeletionSignal",
    "RecoveredRecord",
    "TextContent",
    "MediaContent",
    "ContactContent",
    "LocationContent",
    "UnknownContent",
    "RecoveredContent",
]
