"""
hybridstream
============
Hybrid (RSA + AES-256-GCM) streaming encryption.

A sender opens an EncryptingWriter on any binary sink with the
recipient's RSA public key and writes as much data as it likes; the
recipient opens a DecryptingReader on the matching source with the RSA
private key and reads the plaintext back, in pulls of any size.

Wire format:
    RSA-wrapped session key (modulus size) || nonce (12) || chunks ...
    every chunk but the last is exactly chunk_size + 16 bytes.

Modules:
    primitives.aes  AES-256-GCM session cipher
    primitives.rsa  RSA key container + PKCS#1 v1.5 key wrap
    nonce           per-chunk nonce counter
    header          session-key exchange block
    writer          EncryptingWriter
    reader          DecryptingReader
    hybrid          whole-message / whole-file convenience
    cli             `hybridstream` command

License: Apache 2.0
"""

__version__ = "1.0.0"

from .config     import StreamConfig, DEFAULT_CHUNK_SIZE
from .errors     import (
    StreamError,
    StreamIOError,
    TruncatedStreamError,
    InvalidKeyError,
    DecryptionError,
    ProtocolError,
    NonceExhaustedError,
)
from .nonce      import NonceSequence, NonceOverflow
from .header     import write_header, read_header, header_size
from .primitives import RSAKeys, KeyKind, SessionCipher
from .writer     import EncryptingWriter
from .reader     import DecryptingReader
from .hybrid     import HybridStreamCipher

__all__ = [
    "StreamConfig",
    "DEFAULT_CHUNK_SIZE",
    "StreamError",
    "StreamIOError",
    "TruncatedStreamError",
    "InvalidKeyError",
    "DecryptionError",
    "ProtocolError",
    "NonceExhaustedError",
    "NonceSequence",
    "NonceOverflow",
    "write_header",
    "read_header",
    "header_size",
    "RSAKeys",
    "KeyKind",
    "SessionCipher",
    "EncryptingWriter",
    "DecryptingReader",
    "HybridStreamCipher",
]
