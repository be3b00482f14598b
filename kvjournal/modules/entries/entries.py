import asyncio
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

from ...errors import NotFoundError, ValidationError, internal_errors
from ..storage.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


def entry_prefix(username: str) -> str:
    return f"entry:{username}:"


def entry_key(username: str, timestamp: Union[int, str]) -> str:
    return f"{entry_prefix(username)}{timestamp}"


class EntryModule:
    def __init__(self, store: KeyValueStore, clock: Callable[[], float] = time.time):
        """
        Initialize entry module.

        Args:
            store: Key-value backend holding entry records
            clock: Returns current time in seconds; injectable for tests
        """
        self.store = store
        self._clock = clock

    async def save_entry(
        self,
        username: str,
        content: Optional[str],
        title: Optional[str] = None,
        mood: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> dict:
        """
        Save a new journal entry for a user.

        Args:
            username: Owner, taken from verified token claims
            content: Entry body; required, stored trimmed
            title: Optional title
            mood: Optional short mood token or emoji
            tags: Optional ordered list of tags

        Returns:
            The stored entry

        Logic:
        1. Reject blank content before touching storage
        2. Use wall-clock milliseconds as timestamp and key suffix
        3. Store JSON under entry:<username>:<timestamp>

        Two saves by the same user in the same millisecond share a key and
        the later one wins.
        """
        if not content or not content.strip():
            raise ValidationError("Content is required")

        timestamp = int(self._clock() * 1000)
        entry = {
            "title": title or "",
            "content": content.strip(),
            "mood": mood or "",
            "tags": list(tags or []),
            "timestamp": timestamp,
        }

        with internal_errors("save entry"):
            await self.store.put(entry_key(username, timestamp), json.dumps(entry))

        logger.debug(f"Saved entry {timestamp} for {username}")
        return entry

    async def list_entries(self, username: str) -> List[dict]:
        """
        Get all entries for a user, newest first.

        Keys that vanish between listing and reading are skipped. Values that
        are not JSON objects come from older versions of the service and are
        reshaped into entries using the timestamp in the key.

        Args:
            username: Owner, taken from verified token claims

        Returns:
            Entries sorted by timestamp, descending
        """
        prefix = entry_prefix(username)

        with internal_errors("list entries"):
            keys = await self.store.list_keys(prefix)
            values = await asyncio.gather(*(self.store.get(key) for key in keys))

        entries = []
        for key, value in zip(keys, values):
            if value is None:
                continue
            entries.append(self._normalize(key[len(prefix):], value))

        entries.sort(key=lambda entry: entry["timestamp"], reverse=True)
        return entries

    async def delete_entry(self, username: str, timestamp: Optional[str]) -> None:
        """
        Delete one entry.

        Args:
            username: Owner, taken from verified token claims
            timestamp: Key suffix of the entry

        Raises:
            ValidationError: Timestamp missing
            NotFoundError: No entry under that timestamp for this user
        """
        if timestamp is None or not str(timestamp).strip():
            raise ValidationError("Entry timestamp required")

        key = entry_key(username, str(timestamp).strip())
        with internal_errors("delete entry"):
            if await self.store.get(key) is None:
                raise NotFoundError("Entry not found")
            await self.store.delete(key)

        logger.debug(f"Deleted entry {timestamp} for {username}")

    @staticmethod
    def _normalize(suffix: str, value: str) -> Dict[str, Any]:
        """Shape a stored value into an entry, tolerating legacy records."""
        # The key suffix is the entry id; a stored timestamp field never overrides it
        try:
            key_timestamp = int(suffix)
        except ValueError:
            logger.warning(f"Entry key suffix '{suffix}' is not a timestamp")
            key_timestamp = None

        try:
            data = json.loads(value)
        except json.JSONDecodeError:
            data = None

        if not isinstance(data, dict):
            # Plain-text entry from before entries were JSON
            return {
                "title": "",
                "content": value,
                "mood": "",
                "tags": [],
                "timestamp": key_timestamp or 0,
            }

        timestamp = key_timestamp
        if timestamp is None:
            stored = data.get("timestamp")
            valid = isinstance(stored, int) and not isinstance(stored, bool)
            timestamp = stored if valid else 0

        tags = data.get("tags")
        return {
            "title": str(data.get("title") or ""),
            "content": str(data.get("content") or ""),
            "mood": str(data.get("mood") or ""),
            "tags": [str(tag) for tag in tags] if isinstance(tags, list) else [],
            "timestamp": timestamp,
        }
