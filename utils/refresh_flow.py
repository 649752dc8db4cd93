"""
Refresh flow: exchange a registered refresh token for a new access token.

Steps, strictly in order:
1. no token                      -> MissingToken (400)
2. token not in the registry     -> UnknownToken (403), registry untouched
3. signature / expiry invalid    -> evict from registry, InvalidToken (403)
4. valid                         -> new access token for the verified identity

The refresh token itself is never rotated; it stays registered until it
expires or is revoked elsewhere.
"""
from __future__ import annotations

import logging

from flask import current_app

from utils.exceptions import InvalidToken, MissingToken, UnknownToken
from utils.security import create_access_token, verify_token

logger = logging.getLogger(__name__)


class RefreshFlow:
    def __init__(self, registry):
        self.registry = registry

    def refresh(self, token) -> str:
        if not token or not isinstance(token, str):
            raise MissingToken()

        if not self.registry.contains(token):
            logger.info("Refresh rejected: token not registered")
            raise UnknownToken()

        result = verify_token(token, current_app.config["REFRESH_SECRET"], expected_type="refresh")
        if not result.ok:
            self.registry.remove(token)
            logger.warning("Refresh rejected (%s): token evicted from registry", result.error.value)
            raise InvalidToken()

        claims = result.claims
        return create_access_token(claims["sub"], claims["email"])
