"""
Storage Module - Black Box Interface

Purpose: Abstract all data persistence
Interface: connect() -> KeyValueStore, disconnect()
Hidden: Redis specifics, connection handling, key scanning

Can be replaced with any storage backend that offers get/put/delete and
list-by-prefix without affecting other modules.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from .interfaces import KeyValueStore
from .memory import InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("redis", "memory")


class StorageModule:
    """Black box storage abstraction."""

    def __init__(
        self,
        backend: str = "redis",
        connection_url: str = "redis://localhost:6379/0",
        password: Optional[str] = None,
    ):
        """
        Initialize storage.

        Args:
            backend: "redis" or "memory"
            connection_url: Redis URL (ignored for the memory backend)
            password: Optional Redis password, passed separately from the URL
        """
        if backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unsupported storage backend '{backend}'. "
                f"Expected one of: {', '.join(SUPPORTED_BACKENDS)}"
            )
        self.backend = backend
        self.url = connection_url
        self.password = password
        self._client = None
        self._store: Optional[KeyValueStore] = None

    async def connect(self) -> KeyValueStore:
        """Get the key-value store, creating the connection on first use."""
        if self._store is None:
            if self.backend == "memory":
                logger.warning("Using in-memory storage; data will not survive a restart")
                self._store = InMemoryKeyValueStore()
            else:
                self._client = redis.from_url(
                    self.url,
                    password=self.password,
                    encoding="utf-8",
                    decode_responses=True,
                )
                self._store = RedisKeyValueStore(self._client)
                logger.info("Connected key-value store to Redis")
        return self._store

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._store = None


__all__ = [
    "StorageModule",
    "KeyValueStore",
    "RedisKeyValueStore",
    "InMemoryKeyValueStore",
]
