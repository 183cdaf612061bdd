"""
Encrypting write stream
=======================
Plaintext written to an EncryptingWriter is cut into chunks of exactly
`chunk_size` bytes. Each full chunk is AES-256-GCM encrypted as soon as
it fills and written to the sink as ciphertext || tag. Whatever is left
over when finalize() is called goes out as one shorter final chunk.

    header | chunk 0 (C+16) | chunk 1 (C+16) | ... | last (L+16, 1 <= L <= C)

Nothing marks the end of the chunk sequence except the end of the sink,
so a stream that is never finalized silently loses its tail. finalize()
must be called explicitly (the context manager does it on a clean exit);
close() without finalize() discards the tail and logs an error instead
of raising.

The writer does not own the sink and never closes it.
"""

import logging
from typing import Callable, Optional

from .config import StreamConfig, resolve
from .errors import ProtocolError
from .header import write_header
from .nonce import NonceSequence
from .primitives.aes import SessionCipher
from .transport import write_all

logger = logging.getLogger(__name__)


class EncryptingWriter:
    """Chunked AES-256-GCM encryption over a writable binary sink."""

    def __init__(self, sink, session_key: bytes, nonce: bytes,
                 config: Optional[StreamConfig] = None):
        """
        Low-level constructor for a sink whose header has already been
        written. Most callers want EncryptingWriter.open().
        """
        self._config    = resolve(config)
        self._sink      = sink
        self._cipher    = SessionCipher(session_key)
        self._nonce     = NonceSequence(nonce, self._config.nonce_overflow)
        self._capacity  = self._config.chunk_size
        self._buffer    = bytearray(self._capacity)
        self._fill      = 0
        self._chunks    = 0
        self._finalized = False
        self._closed    = False
        self._broken    = False

    @classmethod
    def open(cls, sink, public_key, config=None,
             rng: Optional[Callable[[int], bytes]] = None) -> "EncryptingWriter":
        """
        Write the stream header to `sink` and return a writer for it.

        `public_key` is an RSAKeys container or a `cryptography` RSA key.
        `rng(n)` supplies the session key and initial nonce; it defaults
        to os.urandom.
        """
        config = resolve(config)
        session_key, nonce = write_header(sink, public_key, rng)
        logger.info("Opened encrypting stream (chunk size %d)", config.chunk_size)
        return cls(sink, session_key, nonce, config)

    # ── properties ───────────────────────────────────────────────────────────

    @property
    def chunk_size(self) -> int:
        return self._capacity

    @property
    def chunks_written(self) -> int:
        return self._chunks

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return True

    def readable(self) -> bool:
        return False

    # ── writing ──────────────────────────────────────────────────────────────

    def _check_open(self, action: str) -> None:
        if self._broken:
            raise ProtocolError(f"Cannot {action}: stream failed earlier and is unusable.")
        if self._finalized:
            raise ProtocolError(f"Cannot {action}: stream already finalized.")
        if self._closed:
            raise ProtocolError(f"Cannot {action}: stream is closed.")

    def _emit(self, plaintext) -> None:
        blob = self._cipher.encrypt(self._nonce.current(), bytes(plaintext))
        write_all(self._sink, blob)
        self._nonce.advance()
        logger.debug("Encrypted chunk %d (%d bytes)", self._chunks, len(plaintext))
        self._chunks += 1

    def write(self, data) -> int:
        """
        Accept all of `data` and return its length. Full chunks are
        encrypted and written immediately; the remainder stays buffered.
        """
        self._check_open("write")
        view = memoryview(data).cast("B")
        total = len(view)
        capacity = self._capacity
        try:
            # Top up a partially filled buffer first.
            if self._fill:
                take = min(capacity - self._fill, len(view))
                self._buffer[self._fill:self._fill + take] = view[:take]
                self._fill += take
                view = view[take:]
                if self._fill < capacity:
                    return total
                self._emit(self._buffer)
                self._fill = 0

            # Whole chunks go straight from the caller's data.
            while len(view) >= capacity:
                self._emit(view[:capacity])
                view = view[capacity:]

            if view:
                self._buffer[:len(view)] = view
                self._fill = len(view)
        except BaseException:
            self._broken = True
            raise
        return total

    def finalize(self) -> None:
        """
        Encrypt and write any buffered tail as the final (short) chunk,
        then flush the sink. Nothing is written if the buffer is empty.
        """
        self._check_open("finalize")
        try:
            if self._fill:
                self._emit(memoryview(self._buffer)[:self._fill])
                self._clear()
            self._flush_sink()
        except BaseException:
            self._broken = True
            raise
        self._finalized = True
        logger.info("Finalized encrypting stream after %d chunks", self._chunks)

    def flush(self) -> None:
        """Flush the sink. Never emits a partial chunk."""
        if self._closed or self._broken:
            return
        self._flush_sink()

    def _flush_sink(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()

    def _clear(self) -> None:
        self._buffer[:self._fill] = bytes(self._fill)
        self._fill = 0

    def close(self) -> None:
        """
        Release the writer. A buffered tail that was never finalized is
        discarded and reported with an ERROR log record.
        """
        if self._closed:
            return
        if not self._finalized and not self._broken:
            if self._fill:
                logger.error(
                    "Encrypting stream closed before finalize(); "
                    "%d buffered plaintext bytes were discarded", self._fill
                )
            else:
                logger.warning("Encrypting stream closed before finalize()")
        self._clear()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is None and not self._finalized and not self._closed:
                self.finalize()
        finally:
            self.close()
        return False
