"""
Auto-discovery & registry for deletion-signal detectors.

WhatsApp announces a revoked message in more than one encoding. Each encoding
gets its own detector module in ``recovery/signals/`` that defines::

    from . import register

    @register
    class MyDetector:
        signal_kind = "my_encoding"
        priority = 30        # lower runs first
        @staticmethod
        def detect(update: dict) -> DeletionSignal | None: ...

and is picked up automatically at import-time. Detectors are pure: they only
read the update and never touch the cache. :func:`ordered` returns them in
priority order and the correlator takes the first match, so adding an
encoding never changes how a matched signal is resolved.
"""

from __future__ import annotations

from importlib import import_module
from pathlib import Path
from pkgutil import iter_modules
from typing import Any, ClassVar, Dict, List, Protocol

from antidelete.messages.model import DeletionSignal

# ------------------------------------------------------------------ #
# 1.  Registry contract + decorator
# ------------------------------------------------------------------ #


class SignalDetector(Protocol):
    signal_kind: ClassVar[str]  # unique key, e.g. "stub_type"
    priority: ClassVar[int]

    @staticmethod
    def detect(update: Dict[str, Any]) -> DeletionSignal | None:
        """Return a signal when ``update`` announces a deletion."""


_REGISTRY: Dict[str, SignalDetector] = {}


def register(cls: SignalDetector):
    """
    Decorator that stores the detector in the global registry.

    :param cls: Detector class to register.
    :returns: The class unchanged.
    """
    _REGISTRY[cls.signal_kind] = cls
    return cls


def get(signal_kind: str) -> SignalDetector | None:
    """Return detector class for ``signal_kind`` or ``None``."""
    return _REGISTRY.get(signal_kind)


def ordered() -> List[SignalDetector]:
    """Return registered detectors sorted by ``priority``."""
    return sorted(_REGISTRY.values(), key=lambda d: d.priority)


# ------------------------------------------------------------------ #
# 2.  Auto-import every sibling module (plug-n-play)
# ------------------------------------------------------------------ #

_pkg_path = Path(__file__).resolve().parent
for _, modname, _ in iter_modules([str(_pkg_path)]):
    if modname != "__init__":
        import_module(f"{__name__}.{modname}")
