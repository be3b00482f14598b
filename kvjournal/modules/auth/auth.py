"""
Authentication module for kvjournal.

Handles user registration and login. Clients never send a plaintext
password: they send the lowercase hex SHA-256 digest of it, and that digest
is the stored credential. There is no server-side salt or slow hash, so a
leaked record is directly usable as a login credential.
"""

import logging
import re
import secrets
import time
from typing import Callable, Optional

from ...errors import (
    AuthenticationError,
    ConflictError,
    ServerConfigError,
    ValidationError,
    internal_errors,
)
from ..storage.interfaces import KeyValueStore
from .credentials import CredentialStore
from .token import TokenCodec

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
DIGEST_PATTERN = re.compile(r"^[a-f0-9]{64}$")

DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60

MISSING_FIELDS = "Username and password are required"
INVALID_CREDENTIALS = "Invalid credentials"


class AuthModule:
    """
    Registration and login over the credential store.

    Tokens are only issued when a signing secret is configured; a missing
    secret is reported as a server misconfiguration at login time rather
    than at startup, so registration keeps working.
    """

    def __init__(
        self,
        store: KeyValueStore,
        secret: Optional[str] = None,
        token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize auth module.

        Args:
            store: Key-value backend holding credential records
            secret: HMAC signing secret for issued tokens
            token_ttl_seconds: Lifetime of issued tokens
            clock: Returns current time in seconds; injectable for tests
        """
        self.credentials = CredentialStore(store)
        self.token_ttl_seconds = token_ttl_seconds
        self._clock = clock
        self.codec = TokenCodec(secret, clock=clock) if secret else None

    @staticmethod
    def validate_registration(username: Optional[str], password: Optional[str]) -> None:
        """
        Check registration input against the username and digest rules.

        Raises:
            ValidationError: With a message naming the first rule violated
        """
        if not username or not password:
            raise ValidationError(MISSING_FIELDS)
        if len(username) < USERNAME_MIN_LENGTH:
            raise ValidationError(
                f"Username must be at least {USERNAME_MIN_LENGTH} characters long"
            )
        if not USERNAME_PATTERN.match(username):
            raise ValidationError(
                "Username may only contain letters, numbers, underscores and hyphens"
            )
        if not DIGEST_PATTERN.match(password):
            raise ValidationError("Password must be a SHA-256 hex digest")

    async def register(self, username: Optional[str], password: Optional[str]) -> None:
        """
        Register a new user.

        Args:
            username: Requested username
            password: Client-computed SHA-256 hex digest

        Raises:
            ValidationError: Input breaks a username or digest rule
            ConflictError: Username already registered
        """
        self.validate_registration(username, password)

        with internal_errors("register"):
            if await self.credentials.exists(username):
                raise ConflictError("Username already taken")

            record = await self.credentials.create(username, password)
            if record is None:
                raise ConflictError("Username already taken")

        logger.info(f"Registered user {username}")

    async def login(self, username: Optional[str], password: Optional[str]) -> str:
        """
        Verify credentials and issue a bearer token.

        Returns:
            Signed token with ``username``, ``iat`` and ``exp`` claims

        Raises:
            ValidationError: Missing username or password
            AuthenticationError: Unknown user or wrong digest
            ServerConfigError: No signing secret configured
        """
        if not username or not password:
            raise ValidationError(MISSING_FIELDS)

        with internal_errors("login"):
            record = await self.credentials.get(username)

        if record is None or not secrets.compare_digest(
            record.password_hash.encode("utf-8"), password.encode("utf-8")
        ):
            logger.info(f"Failed login for {username}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if self.codec is None:
            logger.error("JWT_SECRET not configured; cannot issue tokens")
            raise ServerConfigError()

        now = int(self._clock())
        token = self.codec.encode(
            {"username": username, "iat": now, "exp": now + self.token_ttl_seconds}
        )
        logger.info(f"Login: {username}")
        return token
