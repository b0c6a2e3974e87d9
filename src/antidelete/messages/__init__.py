"""Message models and inbound envelope normalization."""

from .model import CachedMessage, DeletionSignal, MessageIdentity, RecoveredRecord
from .normalizer import normalize, unwrap

__all__ = [
    "CachedMessage",
    "DeletionSignal",
    "MessageIdentity",
    "RecoveredRecord",
    "normalize",
    "unwrap",
]
