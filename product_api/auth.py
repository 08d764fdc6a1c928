"""
API key authentication for the mutating endpoints.
"""

import secrets
from typing import Optional

import structlog
from fastapi import Depends, Security
from fastapi.security import APIKeyHeader

from product_api.config import config
from product_api.errors import AuthError

logger = structlog.get_logger(__name__)

API_KEY_HEADER = "x-api-key"

# Security scheme
api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


class CredentialChecker:
    """Decides whether a caller supplied key grants access."""

    def is_authorized(self, api_key: Optional[str]) -> bool:
        raise NotImplementedError


class SharedSecretChecker(CredentialChecker):
    """Compares the key against one configured secret."""

    def __init__(self, secret: str):
        self.secret = secret

    def is_authorized(self, api_key: Optional[str]) -> bool:
        """
        Validate an API key.

        Args:
            api_key: Key from the request header, None if absent

        Returns:
            True if it equals the configured secret, False otherwise
        """
        if not api_key:
            return False
        return secrets.compare_digest(api_key.encode("utf-8"), self.secret.encode("utf-8"))


def get_credential_checker() -> CredentialChecker:
    """Credential check used by the auth gate, overridable per app."""
    return SharedSecretChecker(config.api_key)


async def require_api_key(
    api_key: Optional[str] = Security(api_key_header),
    checker: CredentialChecker = Depends(get_credential_checker)
) -> Optional[str]:
    """
    Verify the API key header when the auth gate is enabled.

    Args:
        api_key: Value of the ``x-api-key`` header
        checker: Credential check to apply

    Returns:
        The accepted key, or None when the gate is disabled

    Raises:
        AuthError: If the key is missing or does not match
    """
    if not config.auth_enabled:
        return None

    if not checker.is_authorized(api_key):
        logger.warning(
            "Invalid API key attempted",
            api_key=(api_key[:4] + "...") if api_key else None
        )
        raise AuthError()

    return api_key
