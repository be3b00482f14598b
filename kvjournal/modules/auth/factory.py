"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires the token codec into both login and bearer verification
- Returns the registration/login module and the verification facade
"""

import logging
from typing import Tuple

from ...config.provider import ConfigProvider
from ..storage.interfaces import KeyValueStore
from .auth import AuthModule
from .service import AuthenticationService, BearerAuthenticationService

logger = logging.getLogger(__name__)


class AuthFactory:
    """
    Composition root for the authentication stack.
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        store: KeyValueStore,
    ) -> Tuple[AuthModule, AuthenticationService]:
        """
        Build the complete authentication stack.

        Args:
            config_provider: Configuration provider
            store: Key-value backend for credential records

        Returns:
            (AuthModule, AuthenticationService) sharing one token codec
        """
        token_config = config_provider.get_token_config()

        if not token_config.is_configured:
            logger.error(
                "JWT_SECRET is not set: registration works but login and "
                "entry routes will answer 500 until it is configured"
            )
        else:
            logger.info(
                f"Building authentication stack (token lifetime {token_config.ttl_hours}h)"
            )

        auth_module = AuthModule(
            store,
            secret=token_config.secret,
            token_ttl_seconds=token_config.ttl_seconds,
        )
        return auth_module, BearerAuthenticationService(auth_module.codec)
