"""
Cookie encryption utilities.

Uses Fernet symmetric encryption from the cryptography library. The anti-CSRF
state is encrypted before it is written to the state cookie and decrypted
when the callback reads it back, so the browser only ever holds ciphertext.
"""

import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from ally.config import get_ally_config

logger = logging.getLogger(__name__)

# Singleton cipher instance
_fernet: Optional[Fernet] = None


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""

    pass


def _get_fernet() -> Fernet:
    """
    Get or create the Fernet cipher.

    The key is read from ALLY_COOKIE_SECRET (via AllyConfig). It must be a
    32-byte URL-safe base64-encoded string.

    Returns:
        Fernet instance for encryption/decryption

    Raises:
        ValueError: If ALLY_COOKIE_SECRET is not set or invalid
    """
    global _fernet

    if _fernet is not None:
        return _fernet

    key = get_ally_config().cookie_secret
    if not key:
        raise ValueError(
            "ALLY_COOKIE_SECRET environment variable must be set for cookie encryption"
        )

    try:
        _fernet = Fernet(key.encode())
        logger.info("Cookie encryption initialized")
        return _fernet
    except Exception as e:
        raise ValueError(f"Invalid ALLY_COOKIE_SECRET: {e}")


def encrypt_value(plaintext: str) -> str:
    """
    Encrypt a cookie value.

    Args:
        plaintext: The value to encrypt

    Returns:
        Base64-encoded ciphertext

    Raises:
        EncryptionError: If encryption fails
    """
    try:
        encrypted_bytes = _get_fernet().encrypt(plaintext.encode())
        result: str = encrypted_bytes.decode()
        return result
    except ValueError:
        # Re-raise configuration errors
        raise
    except Exception as e:
        logger.error(f"Failed to encrypt cookie value: {e}")
        raise EncryptionError(f"Encryption failed: {e}")


def decrypt_value(ciphertext: str, ttl: Optional[int] = None) -> str:
    """
    Decrypt a cookie value.

    Args:
        ciphertext: Base64-encoded ciphertext
        ttl: Reject ciphertexts older than this many seconds

    Returns:
        Decrypted plaintext

    Raises:
        EncryptionError: If decryption fails (tampered, expired or wrong key)
    """
    try:
        decrypted_bytes = _get_fernet().decrypt(ciphertext.encode(), ttl=ttl)
        result: str = decrypted_bytes.decode()
        return result
    except ValueError:
        raise
    except InvalidToken:
        raise EncryptionError("Decryption failed: invalid, expired or tampered value")


def generate_encryption_key() -> str:
    """
    Generate a new Fernet key, suitable for ALLY_COOKIE_SECRET.

    Returns:
        URL-safe base64-encoded 32-byte key
    """
    key_bytes = Fernet.generate_key()
    result: str = key_bytes.decode()
    return result


def reset_encryption() -> None:
    """
    Reset the cipher singleton.

    Useful for testing to ensure clean state between tests.
    """
    global _fernet
    _fernet = None
