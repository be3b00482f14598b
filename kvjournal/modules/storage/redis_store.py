"""
Redis implementation of the key-value backend.

Values are stored as plain strings; the client must be created with
``decode_responses=True`` so reads come back as ``str``.
"""

import logging
import re
from typing import List, Optional

logger = logging.getLogger(__name__)

# Characters with meaning in Redis MATCH patterns
_GLOB_CHARS = re.compile(r"([*?\[\]\\])")


def escape_pattern(prefix: str) -> str:
    """Escape a literal prefix for use in a Redis MATCH pattern."""
    return _GLOB_CHARS.sub(r"\\\1", prefix)


class RedisKeyValueStore:
    """Key-value store backed by an async Redis client."""

    def __init__(self, redis_client, scan_count: int = 500):
        """
        Initialize the store.

        Args:
            redis_client: Async Redis client (``redis.asyncio.Redis``)
            scan_count: COUNT hint passed to SCAN when listing keys
        """
        self.redis = redis_client
        self.scan_count = scan_count

    async def get(self, key: str) -> Optional[str]:
        value = await self.redis.get(key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def put(self, key: str, value: str) -> None:
        await self.redis.set(key, value)

    async def put_if_absent(self, key: str, value: str) -> bool:
        # SET NX returns None when the key already exists
        written = await self.redis.set(key, value, nx=True)
        return bool(written)

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)

    async def list_keys(self, prefix: str) -> List[str]:
        """List keys by prefix using SCAN so large keyspaces don't block Redis."""
        keys = []
        async for key in self.redis.scan_iter(
            match=f"{escape_pattern(prefix)}*", count=self.scan_count
        ):
            raw = key.decode() if isinstance(key, bytes) else key
            if raw.startswith(prefix):
                keys.append(raw)
        return keys

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
