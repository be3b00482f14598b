"""
Error taxonomy for kvjournal.

Every error a client can see is an ``AppError``: it carries the HTTP status
the API layer should answer with and a message that is safe to show to the
caller. Anything else that escapes a module is a bug or an infrastructure
failure and is turned into ``InternalError`` at the operation boundary.
"""

import logging
from contextlib import contextmanager
from http import HTTPStatus
from typing import Any, Dict, Iterator

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map to a JSON error response."""

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the ``{"error": ...}`` envelope."""
        return {"error": self.message}


class ValidationError(AppError):
    """Malformed or missing input."""

    status = HTTPStatus.BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(AppError):
    """Bad credentials or a missing, invalid or expired token."""

    status = HTTPStatus.UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(AppError):
    status = HTTPStatus.NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    """The resource already exists (username taken)."""

    # Reported as 400 to match the register contract
    status = HTTPStatus.BAD_REQUEST
    default_message = "Already exists"


class ServerConfigError(AppError):
    """The deployment is missing required configuration."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Server misconfigured"


class InternalError(AppError):
    """Unexpected failure; the real cause is only logged."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        # Never leak internals to the client
        super().__init__(self.default_message)
        self.detail = message


@contextmanager
def internal_errors(operation: str) -> Iterator[None]:
    """
    Map unexpected exceptions raised inside the block to ``InternalError``.

    ``AppError`` subclasses pass through untouched so validation and
    not-found results keep their status.

    Args:
        operation: Short operation name used in the server-side log line
    """
    try:
        yield
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"{operation} failed: {e}")
        raise InternalError(f"{operation} failed") from e


__all__ = [
    "AppError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "ServerConfigError",
    "InternalError",
    "internal_errors",
]
