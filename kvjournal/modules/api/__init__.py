"""
API Module - Black Box Interface

Purpose: HTTP request/response shapes
Interface: Pydantic request and response models
Hidden: Field descriptions, defaults

The API layer only orchestrates - it contains no business logic.
All logic is delegated to the auth and entries modules.
"""

from .models import (
    CredentialsRequest,
    EntryResponse,
    ErrorResponse,
    HealthResponse,
    SaveEntryRequest,
    SuccessResponse,
    TokenResponse,
)

__all__ = [
    "CredentialsRequest",
    "SaveEntryRequest",
    "SuccessResponse",
    "TokenResponse",
    "EntryResponse",
    "ErrorResponse",
    "HealthResponse",
]
