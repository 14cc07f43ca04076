"""
Guardian Server module - Main server class
"""

import logging

from config import Config
from models import ServerStats
from guardian_modules.guardian import Guardian
from guardian_modules.session_store import MemoryStore, SessionStore
from guardian_modules.sqlite_store import SQLiteStore


logger = logging.getLogger(__name__)


class GuardianServer:
    """Owns the store and the Guardian instance for the HTTP layer"""

    def __init__(self, config: Config):
        self.config = config
        self.stats = ServerStats()
        self.store: SessionStore = None
        self.guardian: Guardian = None

    @classmethod
    async def create(cls, config: Config, store: SessionStore = None):
        """Async factory method to create GuardianServer"""
        server = cls(config)
        server.store = store or await cls._create_store(config)
        server.guardian = Guardian(config, server.store)
        return server

    @staticmethod
    async def _create_store(config: Config) -> SessionStore:
        if config.store.backend == "sqlite":
            store = SQLiteStore(config.store.sqlite_path)
        else:
            if config.store.backend != "memory":
                logger.warning(f"Unknown store backend '{config.store.backend}', using memory")
            store = MemoryStore()
        await store.initialize()
        return store

    async def close(self):
        if self.store is not None:
            await self.store.close()
