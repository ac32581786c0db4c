"""
Secure credential storage using OS keyring.

Provides cross-platform secure storage for the provider API key using the
system's credential manager (GNOME Keyring, macOS Keychain, Windows
Credential Locker).
"""

import logging
import os
from typing import Optional

import keyring
from keyring.backends.fail import Keyring as FailKeyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)


class KeyringService:
    """
    Secure credential storage using OS keyring.

    Lookups fall back to environment variables so headless and CI runs can
    supply credentials without a keyring backend.
    """

    SERVICE_NAME = "chatdesk"

    CREDENTIAL_NAMES = {
        "anthropic": "anthropic_api_key",
    }

    ENV_VAR_NAMES = {
        "anthropic": "ANTHROPIC_API_KEY",
    }

    def __init__(self) -> None:
        self._available: Optional[bool] = None

    @property
    def is_available(self) -> bool:
        """True when a real keyring backend (not the fail backend) is active."""
        if self._available is not None:
            return self._available

        try:
            backend = keyring.get_keyring()
        except KeyringError as e:
            logger.warning("Failed to initialize keyring: %s", e)
            self._available = False
            return self._available

        if isinstance(backend, FailKeyring):
            logger.warning(
                "No secure keyring backend available. "
                "Set ANTHROPIC_API_KEY or install a backend such as 'keyrings.alt'."
            )
            self._available = False
        else:
            logger.debug("Using keyring backend: %s", type(backend).__name__)
            self._available = True
        return self._available

    def _get_credential_name(self, name: str) -> str:
        return self.CREDENTIAL_NAMES.get(name.lower(), name)

    def store_credential(self, name: str, value: str) -> bool:
        """
        Store a credential in the keyring.

        Returns:
            True if stored successfully, False otherwise
        """
        if not self.is_available:
            logger.warning("Keyring not available, cannot store credential")
            return False

        credential_name = self._get_credential_name(name)
        try:
            keyring.set_password(self.SERVICE_NAME, credential_name, value)
        except KeyringError as e:
            logger.error("Failed to store credential %s: %s", name, e)
            return False
        logger.debug("Stored credential: %s", credential_name)
        return True

    def get_credential(self, name: str) -> Optional[str]:
        """
        Retrieve a credential, keyring first, then the environment.

        Returns:
            The credential value, or None if not found
        """
        credential_name = self._get_credential_name(name)

        if self.is_available:
            try:
                value = keyring.get_password(self.SERVICE_NAME, credential_name)
            except KeyringError as e:
                logger.warning("Failed to get credential from keyring: %s", e)
                value = None
            if value:
                return value

        env_var = self.ENV_VAR_NAMES.get(name.lower())
        if env_var:
            value = os.environ.get(env_var)
            if value:
                logger.debug("Using %s from environment", env_var)
                return value

        return None

    def delete_credential(self, name: str) -> bool:
        if not self.is_available:
            return False

        credential_name = self._get_credential_name(name)
        try:
            keyring.delete_password(self.SERVICE_NAME, credential_name)
        except KeyringError as e:
            # PasswordDeleteError when nothing is stored
            logger.debug("Could not delete credential %s: %s", name, e)
            return False
        logger.debug("Deleted credential: %s", credential_name)
        return True

    def has_credential(self, name: str) -> bool:
        return self.get_credential(name) is not None


_keyring_service: Optional[KeyringService] = None


def get_keyring_service() -> KeyringService:
    """Get the global KeyringService instance."""
    global _keyring_service
    if _keyring_service is None:
        _keyring_service = KeyringService()
    return _keyring_service
