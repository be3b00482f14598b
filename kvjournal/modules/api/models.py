"""
kvjournal API data models.

Request models are deliberately permissive: presence and format rules are
enforced by the auth and entry modules so that every violation is reported
with the same ``{"error": ...}`` envelope and a specific message.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# Request Models (API Input)


class CredentialsRequest(BaseModel):
    """Body of /register and /login."""

    username: Optional[str] = Field(None, description="Username, 3+ chars of [A-Za-z0-9_-]")
    password: Optional[str] = Field(
        None, description="Lowercase hex SHA-256 digest of the password, computed client-side"
    )


class SaveEntryRequest(BaseModel):
    """Body of POST /entries."""

    title: Optional[str] = Field(None, description="Optional title")
    content: Optional[str] = Field(None, description="Entry text; required, trimmed")
    mood: Optional[str] = Field(None, description="Free-form mood token or emoji")
    tags: Optional[List[str]] = Field(None, description="Ordered list of tags")


# Response Models (API Output)


class SuccessResponse(BaseModel):
    success: bool = True


class TokenResponse(BaseModel):
    token: str = Field(..., description="Bearer token for the Authorization header")


class EntryResponse(BaseModel):
    """A stored journal entry."""

    title: str = ""
    content: str
    mood: str = ""
    tags: List[str] = Field(default_factory=list)
    timestamp: int = Field(..., description="Creation time in ms since epoch; also the entry id")


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    storage: Optional[str] = None
    version: Optional[str] = None
