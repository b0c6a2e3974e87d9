"""
Durable storage for recovered messages
======================================

Import from here::

    from antidelete.storage import open_repository, MediaStore
"""

from __future__ import annotations

import asyncio
from typing import Optional

from . import db as _db
from .media import MediaStore
from .repositories import RecoveredRepo


def open_repository(path: Optional[str] = None) -> RecoveredRepo:
    """Connect to (and migrate) the recovery database at ``path``."""
    conn = _db.connect(path)
    _db.migrate(conn)
    return RecoveredRepo(conn, asyncio.Lock())


__all__ = ["open_repository", "MediaStore", "RecoveredRepo"]
