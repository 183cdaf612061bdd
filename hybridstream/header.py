"""
Stream header codec
===================
Written once, before the first chunk:

    +------------------------------+------------------+
    |  RSA-wrapped session key     |  initial nonce   |
    |  modulus size in bytes       |  12 bytes        |
    +------------------------------+------------------+

There is no length prefix or version field. The reader learns the size
of the first field from its own private key.
"""

import logging
import os
from typing import Callable, Optional, Tuple

from .primitives.aes import KEY_SIZE, NONCE_SIZE, SessionCipher, random_bytes
from .primitives.rsa import (
    as_private_key,
    as_public_key,
    unwrap_session_key,
    wrap_session_key,
)
from .transport import read_exact, write_all

logger = logging.getLogger(__name__)


def header_size(key) -> int:
    """Total header length in bytes for an RSA key (public or private)."""
    return (as_public_key(key).key_size + 7) // 8 + NONCE_SIZE


def write_header(sink, public_key,
                 rng: Optional[Callable[[int], bytes]] = None) -> Tuple[bytes, bytes]:
    """
    Generate a session key and initial nonce, write the header to `sink`,
    and return (session_key, nonce).
    """
    rng = rng or os.urandom
    public_key  = as_public_key(public_key)
    session_key = SessionCipher.generate_key(rng)
    nonce       = random_bytes(rng, NONCE_SIZE)

    wrapped = wrap_session_key(public_key, session_key)
    write_all(sink, wrapped)
    write_all(sink, nonce)
    logger.debug("Wrote %d-byte stream header", len(wrapped) + len(nonce))
    return session_key, nonce


def read_header(source, private_key) -> Tuple[bytes, bytes]:
    """
    Read the header from `source` and return (session_key, nonce).

    Raises TruncatedStreamError if the source ends early and
    DecryptionError if the session key cannot be unwrapped.
    """
    private_key = as_private_key(private_key)
    wrapped = read_exact(source, (private_key.key_size + 7) // 8, "the wrapped session key")
    nonce   = read_exact(source, NONCE_SIZE, "the initial nonce")

    session_key = unwrap_session_key(private_key, wrapped, KEY_SIZE)
    logger.debug("Read %d-byte stream header", len(wrapped) + len(nonce))
    return session_key, nonce
