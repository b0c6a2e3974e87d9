"""
Short-term message cache package.

Modules
=======

``store``
    Defines :class:`~antidelete.memory.cache.store.MessageCache`, the bounded,
    insertion-ordered mapping from message identity to cached snapshot. The
    ingestion path writes to it; the deletion correlator pops from it.
``utils``
    Internal logging helpers used by :mod:`store` to summarize cached bodies.
"""

from .store import MessageCache

__all__ = ["MessageCache"]
