"""
Key-value storage interfaces and implementations

Every piece of cross-request state (rate counters, visitor profiles, cached
detection results) lives behind this interface. Values are strings; callers
encode structured data as JSON.
"""

import asyncio
import json
import threading
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional


Clock = Callable[[], float]


class SessionStore(ABC):
    """Abstract key-value store with TTL support"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get value by key"""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, expiration: Optional[timedelta] = None) -> bool:
        """Set key-value with optional expiration"""
        pass

    @abstractmethod
    async def incr(self, key: str, expiration: Optional[timedelta] = None) -> int:
        """Increment counter and return new value.

        The expiration only applies when the counter is created, so a window
        is never extended by the requests counted inside it.
        """
        pass

    @abstractmethod
    async def keys(self, pattern: str) -> List[str]:
        """Get keys matching pattern"""
        pass

    async def get_json(self, key: str, default: Any = None) -> Any:
        """Get a JSON encoded value, falling back to default"""
        raw = await self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return default

    async def set_json(self, key: str, value: Any, expiration: Optional[timedelta] = None) -> bool:
        """Store a value as JSON"""
        return await self.set(key, json.dumps(value), expiration)


class MemoryStore(SessionStore):
    """In-memory key-value store"""

    def __init__(self, clock: Clock = time.time):
        self.data: Dict[str, str] = {}
        self.expiry: Dict[str, float] = {}
        self.clock = clock
        self.lock = threading.RLock()
        self._cleanup_task: Optional[asyncio.Task] = None

    async def initialize(self):
        """Start the periodic cleanup task"""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_expired())

    def _expired(self, key: str) -> bool:
        return key in self.expiry and self.clock() > self.expiry[key]

    def _evict(self, key: str):
        self.data.pop(key, None)
        self.expiry.pop(key, None)

    async def get(self, key: str) -> Optional[str]:
        """Get value by key"""
        with self.lock:
            if self._expired(key):
                self._evict(key)
                return None

            return self.data.get(key)

    async def set(self, key: str, value: str, expiration: Optional[timedelta] = None) -> bool:
        """Set key-value with optional expiration"""
        with self.lock:
            self.data[key] = value
            if expiration:
                self.expiry[key] = self.clock() + expiration.total_seconds()
            else:
                self.expiry.pop(key, None)
            return True

    async def incr(self, key: str, expiration: Optional[timedelta] = None) -> int:
        """Increment counter and return new value"""
        with self.lock:
            if self._expired(key):
                self._evict(key)

            created = key not in self.data
            current_value = int(self.data.get(key, "0"))
            current_value += 1
            self.data[key] = str(current_value)
            if created and expiration:
                self.expiry[key] = self.clock() + expiration.total_seconds()
            return current_value

    async def keys(self, pattern: str) -> List[str]:
        """Get keys matching pattern (simple contains match)"""
        with self.lock:
            pattern = pattern.replace("*", "")
            return [key for key in self.data.keys() if pattern in key and not self._expired(key)]

    def purge_expired(self) -> int:
        """Drop every expired key, returning how many were removed"""
        with self.lock:
            expired_keys = [key for key in self.expiry if self._expired(key)]
            for key in expired_keys:
                self._evict(key)
            return len(expired_keys)

    async def _cleanup_expired(self):
        """Cleanup expired keys periodically"""
        while True:
            try:
                await asyncio.sleep(600)  # Run every 10 minutes
                self.purge_expired()
            except asyncio.CancelledError:
                break

    async def close(self):
        """Stop the cleanup task"""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            self._cleanup_task = None
