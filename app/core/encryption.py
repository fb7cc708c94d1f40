"""
AES-256-GCM encryption for access tokens stored at rest.

Ciphertexts are base64(nonce || ciphertext || tag). The key is derived from
the static ENCRYPTION_KEY secret with SHA-256 so any length of secret works.
"""

import base64
import binascii
import hashlib
import json
import os
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.config import settings

NONCE_SIZE = 12


class TokenDecryptionError(Exception):
    """Raised when a stored ciphertext cannot be decrypted with the current key."""


def _derive_key(secret: Optional[str] = None) -> bytes:
    secret = settings.encryption_key if secret is None else secret
    return hashlib.sha256(secret.encode("utf-8")).digest()


def encrypt(text: str, key: Optional[str] = None) -> str:
    aesgcm = AESGCM(_derive_key(key))
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = aesgcm.encrypt(nonce, text.encode("utf-8"), None)
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def decrypt(ciphertext: str, key: Optional[str] = None) -> str:
    try:
        raw = base64.b64decode(ciphertext, validate=True)
    except (binascii.Error, ValueError) as e:
        raise TokenDecryptionError("Ciphertext is not valid base64") from e
    if len(raw) <= NONCE_SIZE:
        raise TokenDecryptionError("Ciphertext is too short")

    aesgcm = AESGCM(_derive_key(key))
    try:
        plaintext = aesgcm.decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], None)
        return plaintext.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError) as e:
        raise TokenDecryptionError("Failed to decrypt ciphertext") from e


def encrypt_object(obj: Any, key: Optional[str] = None) -> str:
    return encrypt(json.dumps(obj), key)


def decrypt_object(ciphertext: str, key: Optional[str] = None) -> Any:
    return json.loads(decrypt(ciphertext, key))
