"""
Compact signed-claims tokens (JWT, HS256 only).

Tokens are ``header.payload.signature`` with each segment base64url encoded
without padding. The signature is HMAC-SHA256 over ``header.payload``.

The algorithm is fixed: the ``alg`` header is written but never read back,
so a token cannot select how it gets verified.
"""

import base64
import binascii
import hashlib
import hmac
import json
import re
import time
from typing import Any, Callable, Dict

HEADER = {"alg": "HS256", "typ": "JWT"}

_B64URL_SEGMENT = re.compile(r"^[A-Za-z0-9_-]*\Z")


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedToken(TokenError):
    """The token is not three well-formed base64url/JSON segments."""


class InvalidSignature(TokenError):
    """The signature does not match the signing input."""


class TokenExpired(TokenError):
    """The ``exp`` claim is in the past."""


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    if not _B64URL_SEGMENT.match(segment):
        raise MalformedToken("segment contains characters outside the base64url alphabet")
    try:
        raw = segment.encode("ascii")
        return base64.urlsafe_b64decode(raw + b"=" * (-len(raw) % 4))
    except (UnicodeEncodeError, binascii.Error, ValueError) as e:
        raise MalformedToken(f"bad base64url segment: {e}") from e


def _json_segment(obj: Dict[str, Any]) -> str:
    return b64url_encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def _sign(signing_input: str, secret: str) -> bytes:
    return hmac.new(
        secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256
    ).digest()


class TokenCodec:
    """Encode and verify HS256 tokens with a shared secret."""

    def __init__(self, secret: str, clock: Callable[[], float] = time.time):
        """
        Args:
            secret: HMAC key
            clock: Returns current time in seconds; injectable for tests
        """
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._clock = clock

    def encode(self, claims: Dict[str, Any]) -> str:
        """Sign claims and return the compact token string."""
        signing_input = f"{_json_segment(HEADER)}.{_json_segment(claims)}"
        signature = b64url_encode(_sign(signing_input, self._secret))
        return f"{signing_input}.{signature}"

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Raises:
            MalformedToken: Wrong shape, bad base64url or non-object JSON payload
            InvalidSignature: Signature mismatch
            TokenExpired: ``exp`` is before the current time
        """
        parts = token.split(".")
        if len(parts) != 3:
            raise MalformedToken(f"expected 3 segments, got {len(parts)}")

        header_seg, payload_seg, signature_seg = parts
        try:
            expected = _sign(f"{header_seg}.{payload_seg}", self._secret)
        except UnicodeEncodeError as e:
            raise MalformedToken("non-ascii signing input") from e
        b64url_decode(signature_seg)
        # Compare encoded forms so non-canonical spellings of the same bytes fail
        if not hmac.compare_digest(
            b64url_encode(expected).encode("ascii"), signature_seg.encode("ascii")
        ):
            raise InvalidSignature("signature mismatch")

        try:
            claims = json.loads(b64url_decode(payload_seg))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedToken(f"payload is not JSON: {e}") from e
        if not isinstance(claims, dict):
            raise MalformedToken("payload is not a JSON object")

        exp = claims.get("exp")
        if exp is not None:
            if isinstance(exp, bool) or not isinstance(exp, (int, float)):
                raise MalformedToken("exp claim is not numeric")
            if exp < int(self._clock()):
                raise TokenExpired("token expired")

        return claims


__all__ = [
    "TokenCodec",
    "TokenError",
    "MalformedToken",
    "InvalidSignature",
    "TokenExpired",
    "b64url_encode",
    "b64url_decode",
]
