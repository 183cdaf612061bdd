"""Stream configuration shared by writer and reader."""

from dataclasses import dataclass

from .nonce import NonceOverflow

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StreamConfig:
    """
    chunk_size is the plaintext capacity of every non-final chunk. It is
    not written to the stream: writer and reader must agree on it.
    """
    chunk_size: int = DEFAULT_CHUNK_SIZE
    nonce_overflow: NonceOverflow = NonceOverflow.WRAP

    def __post_init__(self):
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
            raise ValueError("chunk_size must be an integer.")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1.")
        object.__setattr__(self, "nonce_overflow", NonceOverflow(self.nonce_overflow))


def resolve(config) -> StreamConfig:
    """Accept None, an int chunk size, or a StreamConfig."""
    if config is None:
        return StreamConfig()
    if isinstance(config, StreamConfig):
        return config
    return StreamConfig(chunk_size=config)
