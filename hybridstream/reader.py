"""
Decrypting read stream
======================
Mirror of EncryptingWriter. Ciphertext is pulled from the source in
chunks of `chunk_size + 16` bytes; a shorter run of bytes followed by
the end of the source is the final chunk. Every chunk is authenticated
before any of its plaintext is handed out, and once a chunk fails
authentication the stream refuses to produce anything else.

Callers may pull any number of bytes per call: output is identical
whether they read one byte at a time or everything at once.

The reader does not own the source and never closes it.
"""

import logging
from typing import Optional

from .config import StreamConfig, resolve
from .errors import DecryptionError, ProtocolError
from .header import read_header
from .nonce import NonceSequence
from .primitives.aes import TAG_SIZE, SessionCipher
from .transport import read_some

logger = logging.getLogger(__name__)


class DecryptingReader:
    """Chunked AES-256-GCM decryption over a readable binary source."""

    def __init__(self, source, session_key: bytes, nonce: bytes,
                 config: Optional[StreamConfig] = None):
        """
        Low-level constructor for a source positioned just after the
        header. Most callers want DecryptingReader.open().
        """
        self._config   = resolve(config)
        self._source   = source
        self._cipher   = SessionCipher(session_key)
        self._nonce    = NonceSequence(nonce, self._config.nonce_overflow)
        self._capacity = self._config.chunk_size
        self._enc      = bytearray(self._capacity + TAG_SIZE)
        self._enc_fill = 0
        self._plain    = b""
        self._plain_pos = 0
        self._chunks   = 0
        self._eof      = False
        self._closed   = False
        self._failure: Optional[BaseException] = None

    @classmethod
    def open(cls, source, private_key, config=None) -> "DecryptingReader":
        """
        Read the stream header from `source` and return a reader for the
        chunks that follow. `private_key` is an RSAKeys container holding
        a private key, or a `cryptography` RSA private key.
        """
        config = resolve(config)
        session_key, nonce = read_header(source, private_key)
        logger.info("Opened decrypting stream (chunk size %d)", config.chunk_size)
        return cls(source, session_key, nonce, config)

    # ── properties ───────────────────────────────────────────────────────────

    @property
    def chunk_size(self) -> int:
        return self._capacity

    @property
    def chunks_read(self) -> int:
        return self._chunks

    @property
    def eof(self) -> bool:
        """True once the source is exhausted and every byte was delivered."""
        return self._eof and self._residual == 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def _residual(self) -> int:
        return len(self._plain) - self._plain_pos

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    # ── reading ──────────────────────────────────────────────────────────────

    def _check_usable(self) -> None:
        if self._closed:
            raise ProtocolError("Cannot read: stream is closed.")
        if isinstance(self._failure, DecryptionError):
            raise DecryptionError(
                "Stream failed authentication earlier; no further output."
            ) from self._failure
        if self._failure is not None:
            raise ProtocolError("Cannot read: stream failed earlier and is unusable.")

    def _drain(self, out: memoryview) -> int:
        """Copy residual plaintext into `out`."""
        n = min(len(out), self._residual)
        if n:
            out[:n] = self._plain[self._plain_pos:self._plain_pos + n]
            self._plain_pos += n
        return n

    def _fill_chunk(self) -> int:
        """
        Read from the source until a full ciphertext chunk is buffered or
        the source is exhausted. Returns the number of bytes buffered.
        """
        full = len(self._enc)
        while self._enc_fill < full:
            data = read_some(self._source, full - self._enc_fill)
            if not data:
                self._eof = True
                logger.info("Source exhausted after %d chunks", self._chunks)
                break
            self._enc[self._enc_fill:self._enc_fill + len(data)] = data
            self._enc_fill += len(data)
        return self._enc_fill

    def _decrypt_chunk(self) -> None:
        size = self._enc_fill
        final = size < len(self._enc)
        if size <= TAG_SIZE:
            raise DecryptionError(
                f"Final chunk is {size} bytes, too short to be valid: "
                f"transmission was truncated or corrupted."
            )
        try:
            plain = self._cipher.decrypt(self._nonce.current(), bytes(self._enc[:size]))
        except DecryptionError as exc:
            if final:
                raise DecryptionError(
                    f"Final chunk {self._chunks} failed authentication: "
                    f"transmission was truncated or corrupted."
                ) from exc.__cause__
            raise DecryptionError(
                f"Chunk {self._chunks} failed authentication."
            ) from exc.__cause__
        self._nonce.advance()
        logger.debug("Decrypted chunk %d (%d bytes)", self._chunks, len(plain))
        self._chunks += 1
        self._enc_fill = 0
        self._plain = plain
        self._plain_pos = 0

    def readinto(self, buffer) -> int:
        """
        Fill `buffer` with plaintext and return the number of bytes
        written to it. Returns 0 only at the end of the stream.
        """
        self._check_usable()
        out = memoryview(buffer).cast("B")
        wanted = len(out)
        if wanted == 0:
            return 0

        total = self._drain(out)
        try:
            while total < wanted and not self._eof:
                if self._fill_chunk() == 0:
                    break
                self._decrypt_chunk()
                total += self._drain(out[total:])
        except BaseException as exc:
            self._failure = exc
            self._plain = b""
            self._plain_pos = 0
            raise
        return total

    def read(self, size: Optional[int] = -1) -> bytes:
        """Read up to `size` bytes, or everything that is left if size < 0."""
        if size is None or size < 0:
            return self.readall()
        buf = bytearray(size)
        n = self.readinto(buf)
        return bytes(buf[:n])

    def readall(self) -> bytes:
        parts = []
        buf = bytearray(self._capacity)
        while True:
            n = self.readinto(buf)
            if not n:
                break
            parts.append(bytes(buf[:n]))
        return b"".join(parts)

    def close(self) -> None:
        self._plain = b""
        self._plain_pos = 0
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
