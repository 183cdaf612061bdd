"""Thin wrappers over the `cryptography` primitives used by the streams."""

from .aes import SessionCipher, KEY_SIZE, NONCE_SIZE, TAG_SIZE
from .rsa import RSAKeys, KeyKind, as_public_key, as_private_key

__all__ = [
    "SessionCipher",
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "RSAKeys",
    "KeyKind",
    "as_public_key",
    "as_private_key",
]
