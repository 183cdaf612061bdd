"""
Whole-message and whole-file hybrid encryption
==============================================
RSA for the key exchange, AES-256-GCM for the data, exactly as the
streams do it, for callers that have the full plaintext in hand or just
want to copy one file object into another.

The output is the ordinary stream wire format: the RSA-wrapped session
key, the initial nonce, then the chunks. Anything encrypted here can be
read back with a DecryptingReader and vice versa, as long as both sides
use the same chunk size.

Dependencies: cryptography >= 41.0
"""

import io
import shutil

from .config import StreamConfig, resolve
from .primitives.rsa import RSAKeys
from .reader import DecryptingReader
from .writer import EncryptingWriter


class HybridStreamCipher:
    """RSA + chunked AES-256-GCM over bytes or binary file objects."""

    def __init__(self, keys: RSAKeys = None, config=None, rng=None):
        """Pass an RSAKeys container, or omit to generate a fresh pair."""
        if keys is None:
            keys = RSAKeys.generate()
        self._keys   = keys
        self._config = resolve(config)
        self._rng    = rng

    @classmethod
    def generate(cls, config=None, rng=None) -> "HybridStreamCipher":
        return cls(RSAKeys.generate(), config, rng)

    @property
    def keys(self) -> RSAKeys:
        return self._keys

    @property
    def config(self) -> StreamConfig:
        return self._config

    def export_public_pem(self) -> bytes:
        return self._keys.public_key_to_pem()

    def export_private_pem(self) -> bytes:
        return self._keys.private_key_to_pem()

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt to the recipient's public key. Returns the whole stream."""
        sink = io.BytesIO()
        writer = EncryptingWriter.open(sink, self._keys, self._config, self._rng)
        writer.write(plaintext)
        writer.finalize()
        return sink.getvalue()

    def decrypt(self, blob: bytes) -> bytes:
        """Decrypt a stream produced by encrypt(). Requires the private key."""
        reader = DecryptingReader.open(io.BytesIO(blob), self._keys, self._config)
        return reader.readall()

    def encrypt_file(self, src, dst) -> int:
        """
        Stream binary file object `src` into `dst` encrypted.
        Returns the number of chunks written.
        """
        with EncryptingWriter.open(dst, self._keys, self._config, self._rng) as writer:
            shutil.copyfileobj(src, writer, self._config.chunk_size)
        return writer.chunks_written

    def decrypt_file(self, src, dst) -> int:
        """
        Stream encrypted `src` into `dst` as plaintext.
        Returns the number of chunks read.
        """
        with DecryptingReader.open(src, self._keys, self._config) as reader:
            shutil.copyfileobj(reader, dst, self._config.chunk_size)
        return reader.chunks_read
