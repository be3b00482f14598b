"""
Logging configuration: health check suppression and credential redaction
"""

import logging
import logging.config
import re
from typing import Any, Dict

HEALTH_PATHS = ("/health", "/healthz")

# (pattern, replacement) pairs applied to every formatted message
REDACTIONS = [
    (re.compile(r"(bearer\s+)[A-Za-z0-9_\-\.]+", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"(['\"]?authorization['\"]?\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"(['\"]?password['\"]?\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"(redis://[^:/@\s]*:)[^@\s]+@"), r"\1***REDACTED***@"),
]


def redact(message: str) -> str:
    """Mask bearer tokens, passwords and Redis credentials in a log message."""
    for pattern, replacement in REDACTIONS:
        message = pattern.sub(replacement, message)
    return message


class HealthCheckFilter(logging.Filter):
    """Filter to suppress health check endpoint logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out health probe requests from uvicorn access logs."""
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if "GET" in message and any(f"{path} " in message for path in HEALTH_PATHS):
                return False
        return True


class RedactingFilter(logging.Filter):
    """Rewrite records so secrets never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with health check suppression and redaction."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter
            },
            "redacting_filter": {
                "()": RedactingFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["redacting_filter"]
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter", "redacting_filter"]
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False
            },
            "kvjournal": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "INFO",
            "handlers": ["default"]
        }
    }
