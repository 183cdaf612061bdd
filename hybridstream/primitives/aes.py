"""
AES-256-GCM session cipher
==========================
One instance wraps one session key for the lifetime of one stream.

Unlike a message-at-a-time cipher, the nonce is NOT generated here: the
caller supplies it from a NonceSequence, so both ends derive the same
nonce for every chunk without transmitting it.

Key size: 256 bits (32 bytes)
Nonce:    96 bits (12 bytes)
Tag:      128 bits (16 bytes), appended to the ciphertext

Output of encrypt() is the opaque ciphertext+tag blob returned by the
library; it is never split or inspected.

Dependencies: cryptography >= 41.0
"""

import os
from typing import Callable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import DecryptionError

KEY_SIZE   = 32   # 256-bit key
NONCE_SIZE = 12   # 96-bit nonce (GCM standard)
TAG_SIZE   = 16   # 128-bit authentication tag


def random_bytes(rng: Callable[[int], bytes], size: int) -> bytes:
    """Draw exactly `size` bytes from an injected random source."""
    data = bytes(rng(size))
    if len(data) != size:
        raise ValueError(
            f"Random source returned {len(data)} bytes, expected {size}."
        )
    return data


class SessionCipher:
    """AES-256-GCM with caller-supplied nonces."""

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ValueError(f"AES-256 key must be {KEY_SIZE} bytes.")
        self._aesgcm = AESGCM(bytes(key))

    @staticmethod
    def generate_key(rng: Callable[[int], bytes] = os.urandom) -> bytes:
        return random_bytes(rng, KEY_SIZE)

    def encrypt(self, nonce: bytes, plaintext: bytes) -> bytes:
        """Returns: ciphertext || tag(16)"""
        return self._aesgcm.encrypt(nonce, plaintext, None)

    def decrypt(self, nonce: bytes, blob: bytes) -> bytes:
        """
        Verify the tag and decrypt.
        Raises DecryptionError if the blob was tampered with or truncated.
        """
        try:
            return self._aesgcm.decrypt(nonce, blob, None)
        except InvalidTag as exc:
            raise DecryptionError("Chunk failed authentication.") from exc
