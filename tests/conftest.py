import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from hybridstream import RSAKeys


@pytest.fixture(scope="session")
def keys():
    """One 2048-bit pair for the whole run; generation is the slow part."""
    return RSAKeys.generate()


@pytest.fixture(scope="session")
def other_keys():
    return RSAKeys.generate()


class CountingRandom:
    """Deterministic stand-in for os.urandom: hands out a fixed byte string."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos  = 0

    def __call__(self, n: int) -> bytes:
        out = self._data[self._pos:self._pos + n]
        self._pos += n
        return out


@pytest.fixture
def fixed_random():
    return CountingRandom
