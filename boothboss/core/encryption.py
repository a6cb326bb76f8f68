"""Encryption helpers for storing tenant SMTP credentials."""

import base64
import hashlib
import logging
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken

from boothboss.core.config import settings

logger = logging.getLogger(__name__)

# Fernet tokens always start with the version byte 0x80, base64 "gAAAAA"
_FERNET_PREFIX = "gAAAAA"


@lru_cache(maxsize=1)
def _get_fernet() -> Fernet:
    """Get Fernet instance from the encryption key setting.

    Derives a valid 32-byte Fernet key from the config encryption_key
    using SHA-256, then base64-encodes it.

    Note: Changing encryption_key will make previously encrypted secrets
    undecryptable.
    """
    key_bytes = hashlib.sha256(settings.encryption_key.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(key_bytes))


def is_encrypted(value: str | None) -> bool:
    """Whether a stored value looks like a Fernet token."""
    return bool(value) and value.startswith(_FERNET_PREFIX)  # type: ignore[union-attr]


def _decrypts(value: str) -> bool:
    try:
        _get_fernet().decrypt(value.encode())
    except InvalidToken:
        return False
    return True


def encrypt_secret(secret: str) -> str:
    """Encrypt a secret string.

    Values that are already tokens for the current key are returned unchanged.
    Anything else, including plaintext that merely starts like a token, is
    encrypted.
    """
    if is_encrypted(secret) and _decrypts(secret):
        return secret
    f = _get_fernet()
    return f.encrypt(secret.encode()).decode()


def decrypt_secret(stored: str | None) -> str:
    """Decrypt a stored secret.

    Rows written before encryption was introduced hold plaintext; those are
    returned as-is.
    """
    if not stored:
        return ""
    if not is_encrypted(stored):
        return stored
    f = _get_fernet()
    try:
        return f.decrypt(stored.encode()).decode()
    except InvalidToken:
        logger.warning("Stored secret could not be decrypted with the current key")
        raise
