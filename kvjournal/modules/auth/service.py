"""
Authentication Service Facade following Black Box Design principles.

This module provides:
- Bearer token verification for protected routes
- Standardized authentication results
- Protocol definition for swappable implementations
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ...errors import ServerConfigError
from .token import TokenCodec, TokenError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass
class AuthResult:
    """Standardized authentication result."""
    ok: bool
    identity: Optional[str]
    error: Optional[str] = None
    claims: Optional[dict] = None


class AuthenticationService(Protocol):
    """Protocol for authentication services."""

    async def authenticate(self, authorization: Optional[str]) -> AuthResult:
        """
        Authenticate a request.

        Args:
            authorization: Authorization header value

        Returns:
            AuthResult with authentication status and details
        """
        ...


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from ``Bearer <token>``, or None if absent or malformed."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class BearerAuthenticationService:
    """
    Verifies bearer tokens issued by ``AuthModule.login``.

    Callers only learn whether the token was accepted. Why it was rejected
    (malformed, bad signature, expired) is logged, never returned.
    """

    def __init__(self, codec: Optional[TokenCodec]):
        """
        Args:
            codec: Token codec, or None when no signing secret is configured
        """
        self._codec = codec

    async def authenticate(self, authorization: Optional[str]) -> AuthResult:
        if self._codec is None:
            logger.error("JWT_SECRET not configured; rejecting bearer authentication")
            raise ServerConfigError()

        token = extract_bearer_token(authorization)
        if token is None:
            return AuthResult(ok=False, identity=None, error="Missing bearer token")

        try:
            claims = self._codec.decode(token)
        except TokenError as e:
            logger.debug(f"Rejected bearer token ({type(e).__name__}): {e}")
            return AuthResult(ok=False, identity=None, error="Invalid token")

        username = claims.get("username")
        if not isinstance(username, str) or not username:
            logger.debug("Rejected bearer token without username claim")
            return AuthResult(ok=False, identity=None, error="Invalid token")

        return AuthResult(ok=True, identity=username, claims=claims)
