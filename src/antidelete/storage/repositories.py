"""
Repositories (SQL-only)
=======================
- Append-only access to the ``deleted`` table.
"""

from __future__ import annotations

import asyncio
import sqlite3
from typing import Sequence

from antidelete.messages.model import RecoveredRecord


class RecoveredRepo:
    def __init__(self, conn: sqlite3.Connection, lock: asyncio.Lock):
        self.conn = conn
        self._lock = lock

    async def append(self, record: RecoveredRecord) -> int:
        """Insert ``record`` and return its row id."""
        sql = """
            INSERT INTO deleted (
              timestamp, sender, chat, type, text_content, media_path, is_status
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """

        def _run() -> int:
            with self.conn:
                cur = self.conn.execute(sql, record.to_row())
            return int(cur.lastrowid)

        async with self._lock:
            return await asyncio.to_thread(_run)

    async def recent(self, limit: int = 20) -> Sequence[sqlite3.Row]:
        sql = """
            SELECT id, timestamp, sender, chat, type, text_content, media_path, is_status
            FROM deleted
            ORDER BY id DESC LIMIT ?
        """

        def _query():
            return self.conn.execute(sql, (limit,)).fetchall()

        async with self._lock:
            return await asyncio.to_thread(_query)

    async def count(self) -> int:
        def _query() -> int:
            return int(self.conn.execute("SELECT COUNT(*) FROM deleted").fetchone()[0])

        async with self._lock:
            return await asyncio.to_thread(_query)
