"""
Credential store adapter.

Maps a username to its credential record under ``user:<username>``.
Records are JSON objects ``{username, passwordHash, registeredAt}``; values
written by the first version of the service are the bare digest string and
are still readable.
"""

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional

from ..storage.interfaces import KeyValueStore

logger = logging.getLogger(__name__)

USER_KEY_PREFIX = "user:"


def user_key(username: str) -> str:
    return f"{USER_KEY_PREFIX}{username}"


@dataclass
class CredentialRecord:
    """Stored credential for one user."""

    username: str
    password_hash: str
    registered_at: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(
            {
                "username": self.username,
                "passwordHash": self.password_hash,
                "registeredAt": self.registered_at,
            }
        )

    @classmethod
    def from_stored(cls, username: str, value: str) -> "CredentialRecord":
        """Parse a stored value, accepting the legacy bare-digest format."""
        try:
            data = json.loads(value)
        except json.JSONDecodeError:
            data = None

        if not isinstance(data, dict):
            return cls(username=username, password_hash=value.strip())

        return cls(
            username=data.get("username", username),
            password_hash=data.get("passwordHash", ""),
            registered_at=data.get("registeredAt"),
        )


class CredentialStore:
    """Reads and creates credential records in the key-value store."""

    def __init__(self, store: KeyValueStore):
        """
        Args:
            store: Key-value backend
        """
        self.store = store

    async def get(self, username: str) -> Optional[CredentialRecord]:
        value = await self.store.get(user_key(username))
        if value is None:
            return None
        return CredentialRecord.from_stored(username, value)

    async def exists(self, username: str) -> bool:
        return await self.store.get(user_key(username)) is not None

    async def create(self, username: str, password_hash: str) -> Optional[CredentialRecord]:
        """
        Persist a new credential record.

        Returns:
            The stored record, or None if the username was taken in the
            meantime (the backend's conditional put lost the race)
        """
        record = CredentialRecord(
            username=username,
            password_hash=password_hash,
            registered_at=datetime.now(UTC).isoformat(),
        )
        written = await self.store.put_if_absent(user_key(username), record.to_json())
        if not written:
            logger.info(f"Concurrent registration detected for username '{username}'")
            return None
        return record
