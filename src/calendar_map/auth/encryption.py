"""Encryption for Google tokens carried inside the session cookie.

The session JWT is signed, not encrypted, so anyone holding the cookie can
read its claims. Google access and refresh tokens are therefore Fernet
encrypted before they are put into the token.

## Key Derivation

The encryption key is derived from the application secret using PBKDF2:
- Salt: ENCRYPTION_SALT, or derived from SECRET_KEY
- Iterations: 480,000 (OWASP recommendation for PBKDF2-HMAC-SHA256)
- Key length: 32 bytes (256 bits)

## Usage

```python
from calendar_map.auth.encryption import encrypt_token, decrypt_token

encrypted = encrypt_token("ya29.a0...")
decrypted = decrypt_token(encrypted)
```
"""

from __future__ import annotations

import base64
import logging

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

# Module-level cipher instance (initialized on first use)
_fernet: Fernet | None = None


def _get_fernet() -> Fernet:
    """Get or create the Fernet cipher instance."""
    global _fernet

    if _fernet is None:
        from calendar_map.config import get_settings

        settings = get_settings()
        _fernet = _create_fernet(
            settings.secret_key,
            settings.encryption_salt,
        )

    return _fernet


def _create_fernet(secret_key: str, salt: str) -> Fernet:
    """Create a Fernet cipher from the secret key and salt."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,  # 256 bits for Fernet
        salt=salt.encode("utf-8"),
        iterations=480_000,
    )

    key = base64.urlsafe_b64encode(kdf.derive(secret_key.encode("utf-8")))
    return Fernet(key)


def encrypt_token(plaintext: str | None) -> str:
    """Encrypt a token before putting it in the session.

    Returns:
        Fernet token as text, or "" for an empty input
    """
    if not plaintext:
        return ""

    fernet = _get_fernet()
    encrypted = fernet.encrypt(plaintext.encode("utf-8"))
    return encrypted.decode("utf-8")


def decrypt_token(ciphertext: str | None) -> str:
    """Decrypt a token taken from the session.

    Raises:
        ValueError: If decryption fails (tampered token or rotated key)
    """
    if not ciphertext:
        return ""

    fernet = _get_fernet()
    try:
        decrypted = fernet.decrypt(ciphertext.encode("utf-8"))
        return decrypted.decode("utf-8")
    except InvalidToken as e:
        logger.error("Failed to decrypt token: invalid token or key")
        raise ValueError("Failed to decrypt token") from e


def reset_cipher() -> None:
    """Reset the cached cipher instance.

    Call this if the configuration changes (e.g., in tests).
    """
    global _fernet
    _fernet = None
