"""
Exception hierarchy for hybridstream.

Every error raised by this package derives from StreamError, so callers
can catch the whole family at once. OSErrors raised by the caller's own
sink or source are NOT wrapped; they reach the caller unchanged.
"""


class StreamError(Exception):
    """Base class for all hybridstream errors."""


class StreamIOError(StreamError, OSError):
    """The transport misbehaved (refused bytes, would block, ended early)."""


class TruncatedStreamError(StreamIOError):
    """The transport ended inside a fixed-size field such as the header."""


class InvalidKeyError(StreamError, ValueError):
    """Malformed, missing or wrong-size RSA key material."""


class DecryptionError(StreamError):
    """Key unwrap or chunk authentication failed. Fatal for the stream."""


class ProtocolError(StreamError):
    """API misuse: write after finalize, finalize twice, use after failure."""


class NonceExhaustedError(StreamError):
    """The nonce counter overflowed while wraparound is disabled."""
