"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import List, Optional, Protocol

MIN_TOKEN_TTL_HOURS = 24
MAX_TOKEN_TTL_HOURS = 168


@dataclass
class TokenConfig:
    """Bearer token configuration."""
    secret: Optional[str]
    ttl_hours: int

    @property
    def is_configured(self) -> bool:
        """Check if a signing secret is available."""
        return bool(self.secret)

    @property
    def ttl_seconds(self) -> int:
        return self.ttl_hours * 3600


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    cors_origins: List[str]


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_token_config(self) -> TokenConfig:
        """Get token configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_token_config(self) -> TokenConfig:
        """
        Get token configuration from environment variables.

        A missing JWT_SECRET is allowed here: it is reported as a server
        misconfiguration when a token has to be issued or verified.

        Raises:
            ValueError: If TOKEN_TTL_HOURS is not an integer in range
        """
        raw_ttl = os.getenv("TOKEN_TTL_HOURS", str(MIN_TOKEN_TTL_HOURS))
        try:
            ttl_hours = int(raw_ttl)
        except ValueError:
            raise ValueError(f"TOKEN_TTL_HOURS must be an integer, got '{raw_ttl}'")

        if not MIN_TOKEN_TTL_HOURS <= ttl_hours <= MAX_TOKEN_TTL_HOURS:
            raise ValueError(
                f"TOKEN_TTL_HOURS must be between {MIN_TOKEN_TTL_HOURS} and "
                f"{MAX_TOKEN_TTL_HOURS}, got {ttl_hours}"
            )

        return TokenConfig(secret=os.getenv("JWT_SECRET") or None, ttl_hours=ttl_hours)

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        return APIConfig(
            port=int(os.getenv("API_PORT", "8080")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            cors_origins=origins or ["*"],
        )
