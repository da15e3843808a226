"""Encryption at rest for questionnaire answers and photos.

Stored format is ``base64(nonce || ciphertext)`` where the nonce is 12 random
bytes and the ciphertext carries the 16-byte GCM tag at its end. Keys are
derived from a server secret with PBKDF2-HMAC-SHA256.
"""

import base64
import binascii
import hashlib
import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

NONCE_SIZE = 12
KEY_SIZE = 32


class DecryptionError(Exception):
    """Raised when a stored blob cannot be decoded or fails authentication."""

    pass


@lru_cache(maxsize=8)
def derive_key(secret: str, salt: str, iterations: int = 100_000) -> bytes:
    """
    PBKDF2-SHA256 → 256-bit key.
    Cached per (secret, salt, iterations); a rotated secret is a new cache key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt.encode("utf-8"),
        iterations=iterations,
    )
    return kdf.derive(secret.encode("utf-8"))


def content_hash(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


class ResponseCipher:
    def __init__(self, secret: str, salt: str = "justone-salt-v1", iterations: int = 100_000):
        self._aead = AESGCM(derive_key(secret, salt, iterations))

    def encrypt(self, plaintext: str) -> str:
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, blob: str) -> str:
        try:
            combined = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("stored value is not valid base64") from e

        if len(combined) <= NONCE_SIZE:
            raise DecryptionError("stored value is too short")

        nonce, ciphertext = combined[:NONCE_SIZE], combined[NONCE_SIZE:]
        try:
            return self._aead.decrypt(nonce, ciphertext, None).decode("utf-8")
        except (InvalidTag, UnicodeDecodeError) as e:
            raise DecryptionError("authentication failed") from e
