"""Optional system keyring integration for credential secrets."""

from __future__ import annotations

import keyring
import structlog
from keyring.errors import KeyringError

logger = structlog.get_logger()

SERVICE_NAME = "llmusage"


def use_keyring() -> bool:
    """Check if secrets should be stored in the system keyring.

    Returns True only if it's enabled in config and a backend is usable.
    """
    from .settings import get_config

    if not get_config().credentials.use_keyring:
        return False

    try:
        backend = keyring.get_keyring()
    except KeyringError:
        return False
    return backend.priority > 0


def keyring_key(provider_id: str, account: str) -> str:
    """Generate a keyring key for storage."""
    return f"{provider_id}:{account}"


def store_in_keyring(provider_id: str, account: str, value: str) -> bool:
    """Store a secret in the system keyring.

    Returns:
        True if stored successfully, False otherwise
    """
    try:
        keyring.set_password(SERVICE_NAME, keyring_key(provider_id, account), value)
    except KeyringError as e:
        logger.warning("keyring_store_failed", provider=provider_id, error=str(e))
        return False
    return True


def get_from_keyring(provider_id: str, account: str) -> str | None:
    """Retrieve a secret from the system keyring."""
    try:
        return keyring.get_password(SERVICE_NAME, keyring_key(provider_id, account))
    except KeyringError as e:
        logger.warning("keyring_read_failed", provider=provider_id, error=str(e))
        return None


def delete_from_keyring(provider_id: str, account: str) -> bool:
    """Delete a secret from the system keyring.

    Returns:
        True if deleted, False if it didn't exist or the backend failed
    """
    try:
        keyring.delete_password(SERVICE_NAME, keyring_key(provider_id, account))
    except KeyringError:
        return False
    return True
