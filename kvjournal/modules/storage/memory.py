"""
In-process key-value backend.

Used for local development (``STORAGE_BACKEND=memory``) and tests. Data is
lost when the process exits. All operations run on the event loop thread
without awaiting in between, so each one is atomic.
"""

from typing import Dict, List, Optional


class InMemoryKeyValueStore:
    """Dict-backed key-value store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def put_if_absent(self, key: str, value: str) -> bool:
        if key in self._data:
            return False
        self._data[key] = value
        return True

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def list_keys(self, prefix: str) -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]

    async def ping(self) -> bool:
        return True

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of the stored data."""
        return dict(self._data)
