"""
Exact-length reads and writes over caller-supplied file-like objects.

Sinks need write(b); sources need read(n). Short reads and partial
writes are continued here. OSErrors from the transport itself are
never caught.
"""

import io

from .errors import StreamIOError, TruncatedStreamError


def write_all(sink, data) -> None:
    view = memoryview(data).cast("B")
    while view:
        written = sink.write(view)
        if written is None:
            # Only raw streams use None to mean "would block"; duck-typed
            # sinks that return nothing have taken the whole buffer.
            if isinstance(sink, io.RawIOBase):
                raise StreamIOError("Sink would block; non-blocking sinks are not supported.")
            return
        if written <= 0:
            raise StreamIOError("Sink refused to accept more bytes.")
        view = view[written:]


def read_some(source, size: int) -> bytes:
    """One read() call; b'' means the source is exhausted."""
    data = source.read(size)
    if data is None:
        raise StreamIOError("Source would block; non-blocking sources are not supported.")
    if len(data) > size:
        raise StreamIOError(f"Source returned {len(data)} bytes for a {size}-byte read.")
    return data


def read_exact(source, size: int, what: str = "data") -> bytes:
    """Read exactly `size` bytes or raise TruncatedStreamError."""
    parts = []
    remaining = size
    while remaining:
        data = read_some(source, remaining)
        if not data:
            raise TruncatedStreamError(
                f"Stream ended inside {what}: got {size - remaining} of {size} bytes."
            )
        parts.append(data)
        remaining -= len(data)
    return b"".join(parts)
