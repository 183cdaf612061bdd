"""
Per-chunk nonce counter.

One session key encrypts every chunk of a stream, so each chunk needs a
distinct nonce. The nonce is treated as a big-endian counter: the writer
starts from a random value, sends it once in the header, and both ends
advance it after every chunk. No nonce travels with the chunks.
"""

import enum

from .errors import NonceExhaustedError


class NonceOverflow(enum.Enum):
    """What happens once the counter has passed the all-0xFF value."""
    WRAP  = "wrap"    # reset to all-zero
    RAISE = "raise"   # the all-0xFF value is the last one handed out


class NonceSequence:
    """
    Fixed-width big-endian counter.

    In RAISE mode advancing past all-0xFF does not fail by itself: the
    last value may already have been used legitimately. The sequence is
    marked exhausted instead, and the next current() raises
    NonceExhaustedError.
    """

    def __init__(self, initial: bytes, overflow: NonceOverflow = NonceOverflow.WRAP):
        if not initial:
            raise ValueError("Nonce must be at least one byte wide.")
        self._value     = bytearray(initial)
        self._overflow  = NonceOverflow(overflow)
        self._exhausted = False

    def __len__(self):
        return len(self._value)

    def __repr__(self):
        return f"NonceSequence(width={len(self._value)}, overflow={self._overflow.name})"

    @property
    def overflow(self) -> NonceOverflow:
        return self._overflow

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def current(self) -> bytes:
        if self._exhausted:
            raise NonceExhaustedError(
                f"{len(self._value) * 8}-bit nonce counter is exhausted."
            )
        return bytes(self._value)

    def advance(self) -> None:
        if self._exhausted:
            return
        value = self._value
        for i in range(len(value) - 1, -1, -1):
            if value[i] != 0xFF:
                value[i] += 1
                return
            value[i] = 0
        # Every byte carried: the loop has already left the value at zero.
        if self._overflow is NonceOverflow.RAISE:
            value[:] = b"\xff" * len(value)
            self._exhausted = True
