"""
Configuration loader for ChatDesk.

The provider API key is resolved using a priority chain:
1. OS keyring (secure storage)
2. ANTHROPIC_API_KEY environment variable (CI/CD support)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from core.errors import ConfigurationError
from core.infrastructure.keyring_service import KeyringService, get_keyring_service

_keyring_service: Optional[KeyringService] = None
logger = logging.getLogger(__name__)

API_KEY_CREDENTIAL = "anthropic"
DATA_DIR_ENV_VAR = "CHATDESK_HOME"


def _get_keyring() -> KeyringService:
    """Get the keyring service instance."""
    global _keyring_service
    if _keyring_service is None:
        _keyring_service = get_keyring_service()
    return _keyring_service


def get_data_dir() -> Path:
    """Directory holding the database, uploaded files and logs."""
    override = os.environ.get(DATA_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".chatdesk"


def get_api_key() -> Optional[str]:
    """
    Get the provider API key.

    Priority: keyring → env var

    Returns:
        The API key value, or None if not found
    """
    value = _get_keyring().get_credential(API_KEY_CREDENTIAL)
    if value:
        return value
    return os.environ.get("ANTHROPIC_API_KEY") or None


def get_anthropic_api_key() -> str:
    """
    Get the provider API key.

    Raises:
        ConfigurationError: If no key is configured
    """
    key = get_api_key()
    if not key:
        logger.warning("Missing API key: ANTHROPIC_API_KEY")
        raise ConfigurationError(
            "API key not configured. "
            "Please configure it in Settings or set ANTHROPIC_API_KEY."
        )
    return key


def store_api_key(value: str) -> bool:
    """Store the provider API key in the keyring."""
    return _get_keyring().store_credential(API_KEY_CREDENTIAL, value)


def clear_api_key() -> bool:
    return _get_keyring().delete_credential(API_KEY_CREDENTIAL)


def reset_keyring_cache() -> None:
    """Forget the cached keyring service. Useful for testing."""
    global _keyring_service
    _keyring_service = None
