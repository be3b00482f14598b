"""
Authentication Module - Black Box Interface

Purpose: Register users, verify credentials, issue and verify bearer tokens
Interface: AuthModule.register(), AuthModule.login(), AuthenticationService.authenticate()
Hidden: Credential record format, token encoding, signature checks

This module can be replaced with any other auth implementation without
affecting the entry module, which only consumes AuthResult identities.
"""

from .auth import AuthModule
from .factory import AuthFactory
from .service import AuthenticationService, AuthResult, BearerAuthenticationService
from .token import InvalidSignature, MalformedToken, TokenCodec, TokenError, TokenExpired

__all__ = [
    "AuthModule",
    "AuthFactory",
    "AuthenticationService",
    "AuthResult",
    "BearerAuthenticationService",
    "TokenCodec",
    "TokenError",
    "MalformedToken",
    "InvalidSignature",
    "TokenExpired",
]
