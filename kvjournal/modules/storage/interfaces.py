"""Key-value backend contract following Black Box Design principles."""
from typing import List, Optional, Protocol


class KeyValueStore(Protocol):
    """
    Protocol for the key-value backend.

    Single-key operations are expected to be atomic. Prefix listing may be
    eventually consistent: a listed key can already be gone by the time it
    is read, so callers must treat ``get`` returning None as normal.
    """

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""
        ...

    async def put(self, key: str, value: str) -> None:
        """Store value under key, overwriting any previous value."""
        ...

    async def put_if_absent(self, key: str, value: str) -> bool:
        """
        Store value only if key does not exist.

        Returns:
            True if the value was written, False if the key already existed
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove key. Deleting a missing key is not an error."""
        ...

    async def list_keys(self, prefix: str) -> List[str]:
        """Return every key starting with prefix."""
        ...

    async def ping(self) -> bool:
        """Return True if the backend is reachable."""
        ...
