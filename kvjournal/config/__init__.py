"""Typed configuration providers."""

from .provider import APIConfig, ConfigProvider, EnvConfigProvider, TokenConfig

__all__ = ["APIConfig", "ConfigProvider", "EnvConfigProvider", "TokenConfig"]
