"""
SQLite key-value store implementation
"""

import asyncio
import logging
import time
from datetime import timedelta
from typing import List, Optional

import aiosqlite

from .session_store import Clock, SessionStore


logger = logging.getLogger(__name__)


class SQLiteStore(SessionStore):
    """SQLite-based key-value store"""

    def __init__(self, db_path: str = "guardian.db", clock: Clock = time.time):
        self.db_path = db_path
        self.clock = clock
        self.db = None
        self.lock = asyncio.Lock()
        self._cleanup_task: Optional[asyncio.Task] = None

    async def initialize(self):
        """Initialize database connection and tables"""
        self.db = await aiosqlite.connect(self.db_path)
        await self._create_table()

        # Start cleanup task
        self._cleanup_task = asyncio.create_task(self._cleanup_expired())

    async def _create_table(self):
        """Create entries table"""
        await self.db.execute("""
            CREATE TABLE IF NOT EXISTS guardian_entries (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                expires_at REAL
            )
        """)
        await self.db.commit()

    def _expires_at(self, expiration: Optional[timedelta]) -> Optional[float]:
        if not expiration:
            return None
        return self.clock() + expiration.total_seconds()

    async def get(self, key: str) -> Optional[str]:
        """Get value by key"""
        cursor = await self.db.execute(
            "SELECT value, expires_at FROM guardian_entries WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()

        if not row:
            return None

        value, expires_at = row

        # Check expiration
        if expires_at and self.clock() > expires_at:
            await self._delete(key)
            return None

        return value

    async def set(self, key: str, value: str, expiration: Optional[timedelta] = None) -> bool:
        """Set key-value with optional expiration"""
        await self.db.execute(
            "INSERT OR REPLACE INTO guardian_entries (key, value, expires_at) VALUES (?, ?, ?)",
            (key, value, self._expires_at(expiration))
        )
        await self.db.commit()
        return True

    async def incr(self, key: str, expiration: Optional[timedelta] = None) -> int:
        """Increment counter and return new value"""
        async with self.lock:
            cursor = await self.db.execute(
                "SELECT value, expires_at FROM guardian_entries WHERE key = ?", (key,)
            )
            row = await cursor.fetchone()

            current_value = 0
            expires_at = self._expires_at(expiration)
            if row and not (row[1] and self.clock() > row[1]):
                try:
                    current_value = int(row[0])
                except ValueError:
                    current_value = 0
                expires_at = row[1]

            current_value += 1

            await self.db.execute(
                "INSERT OR REPLACE INTO guardian_entries (key, value, expires_at) VALUES (?, ?, ?)",
                (key, str(current_value), expires_at)
            )
            await self.db.commit()

            return current_value

    async def keys(self, pattern: str) -> List[str]:
        """Get keys matching pattern"""
        pattern = pattern.replace("*", "%")
        cursor = await self.db.execute(
            "SELECT key FROM guardian_entries WHERE key LIKE ? AND (expires_at IS NULL OR expires_at >= ?)",
            (pattern, self.clock())
        )
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def _delete(self, key: str):
        """Delete a key"""
        await self.db.execute("DELETE FROM guardian_entries WHERE key = ?", (key,))
        await self.db.commit()

    async def purge_expired(self):
        """Delete every expired row"""
        await self.db.execute(
            "DELETE FROM guardian_entries WHERE expires_at IS NOT NULL AND expires_at < ?",
            (self.clock(),)
        )
        await self.db.commit()

    async def _cleanup_expired(self):
        """Cleanup expired keys periodically"""
        while True:
            try:
                await asyncio.sleep(600)  # Run every 10 minutes
                await self.purge_expired()
            except asyncio.CancelledError:
                break
            except aiosqlite.Error as e:
                logger.warning(f"Expired entry cleanup failed: {e}")

    async def close(self):
        """Close database connection"""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            self._cleanup_task = None
        if self.db:
            await self.db.close()
            self.db = None
