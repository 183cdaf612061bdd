"""
RSA key container + PKCS#1 v1.5 key wrap
========================================
RSA is used for exactly one job here: wrapping the 32-byte session key
that precedes every stream. The wrapped block is always exactly
`key_size // 8` bytes long (256 bytes for a 2048-bit key), which is what
lets the reader find the end of the header without a length prefix.

Padding is PKCS#1 v1.5 encryption padding. It is kept for wire
compatibility with existing streams.

A key container holds a public key, a private key, or both. It is a
single tagged value (KeyKind) so there is no way to build one that holds
neither.

PEM output uses the PKCS#1 encodings ("RSA PRIVATE KEY" /
"RSA PUBLIC KEY"). Loading also accepts PKCS#8 / SubjectPublicKeyInfo.

Dependencies: cryptography >= 41.0
"""

import enum
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..errors import DecryptionError, InvalidKeyError

MIN_KEY_SIZE = 1024


class KeyKind(enum.Enum):
    PUBLIC_ONLY  = "public"
    PRIVATE_ONLY = "private"
    KEY_PAIR     = "pair"


def _check_size(key) -> None:
    if key.key_size < MIN_KEY_SIZE:
        raise InvalidKeyError(
            f"RSA key is {key.key_size} bits; at least {MIN_KEY_SIZE} required."
        )


class RSAKeys:
    """RSA public key, private key, or key pair."""

    KEY_SIZE = 2048

    def __init__(self, private_key: Optional[rsa.RSAPrivateKey] = None,
                 public_key: Optional[rsa.RSAPublicKey] = None):
        if private_key is None and public_key is None:
            raise InvalidKeyError("An RSA key container needs at least one key.")
        if private_key is not None:
            if not isinstance(private_key, rsa.RSAPrivateKey):
                raise InvalidKeyError("Private key is not an RSA private key.")
            _check_size(private_key)
        if public_key is not None:
            if not isinstance(public_key, rsa.RSAPublicKey):
                raise InvalidKeyError("Public key is not an RSA public key.")
            _check_size(public_key)
        if private_key is not None and public_key is not None:
            if (private_key.public_key().public_numbers()
                    != public_key.public_numbers()):
                raise InvalidKeyError("Public key does not match private key.")
            self._kind = KeyKind.KEY_PAIR
        elif private_key is not None:
            self._kind = KeyKind.PRIVATE_ONLY
        else:
            self._kind = KeyKind.PUBLIC_ONLY
        self._private_key = private_key
        self._public_key  = public_key

    def __repr__(self):
        return f"RSAKeys(kind={self._kind.name}, bits={self.key_size})"

    # ── construction ─────────────────────────────────────────────────────────

    @classmethod
    def generate(cls, key_size: int = KEY_SIZE) -> "RSAKeys":
        """Generate a fresh key pair."""
        if key_size < MIN_KEY_SIZE:
            raise InvalidKeyError(
                f"RSA key size must be at least {MIN_KEY_SIZE} bits."
            )
        private_key = rsa.generate_private_key(
            public_exponent=65537,
            key_size=key_size,
        )
        return cls(private_key=private_key, public_key=private_key.public_key())

    @classmethod
    def from_private_key(cls, private_key: rsa.RSAPrivateKey) -> "RSAKeys":
        """Key pair from a private key; the public half is derived."""
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise InvalidKeyError("Private key is not an RSA private key.")
        return cls(private_key=private_key, public_key=private_key.public_key())

    @classmethod
    def from_key_pem(cls, pem: Union[str, bytes]) -> "RSAKeys":
        """Load a private PEM and derive the public key -> KEY_PAIR."""
        return cls.from_private_key(_load_private(pem))

    @classmethod
    def from_private_key_pem(cls, pem: Union[str, bytes]) -> "RSAKeys":
        """Load a private PEM -> PRIVATE_ONLY."""
        return cls(private_key=_load_private(pem))

    @classmethod
    def from_public_key_pem(cls, pem: Union[str, bytes]) -> "RSAKeys":
        """Load a public PEM -> PUBLIC_ONLY."""
        return cls(public_key=_load_public(pem))

    # ── access ───────────────────────────────────────────────────────────────

    @property
    def kind(self) -> KeyKind:
        return self._kind

    @property
    def has_public(self) -> bool:
        return self._kind is not KeyKind.PRIVATE_ONLY

    @property
    def has_private(self) -> bool:
        return self._kind is not KeyKind.PUBLIC_ONLY

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        if self._public_key is None:
            raise InvalidKeyError("Public key not found.")
        return self._public_key

    @property
    def private_key(self) -> rsa.RSAPrivateKey:
        if self._private_key is None:
            raise InvalidKeyError("Private key not found.")
        return self._private_key

    @property
    def key_size(self) -> int:
        key = self._private_key if self._private_key is not None else self._public_key
        return key.key_size

    # ── PEM export ───────────────────────────────────────────────────────────

    def private_key_to_pem(self) -> bytes:
        return self.private_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption()
        )

    def public_key_to_pem(self) -> bytes:
        # A private-only container can still hand out its public half.
        key = (self._public_key if self._public_key is not None
               else self.private_key.public_key())
        return key.public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.PKCS1
        )


def _as_bytes(pem: Union[str, bytes]) -> bytes:
    return pem.encode("ascii") if isinstance(pem, str) else bytes(pem)


def _load_private(pem) -> rsa.RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(_as_bytes(pem), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyError(f"Invalid private key PEM: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidKeyError("PEM does not hold an RSA private key.")
    return key


def _load_public(pem) -> rsa.RSAPublicKey:
    try:
        key = serialization.load_pem_public_key(_as_bytes(pem))
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyError(f"Invalid public key PEM: {exc}") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise InvalidKeyError("PEM does not hold an RSA public key.")
    return key


def as_public_key(key) -> rsa.RSAPublicKey:
    """
    Accept an RSAKeys container or a raw `cryptography` RSA key and return
    the public key used to wrap session keys.
    """
    if isinstance(key, RSAKeys):
        if key.kind is KeyKind.PRIVATE_ONLY:
            return key.private_key.public_key()
        return key.public_key
    if isinstance(key, rsa.RSAPrivateKey):
        key = key.public_key()
    if not isinstance(key, rsa.RSAPublicKey):
        raise InvalidKeyError(
            f"Expected an RSA public key, got {type(key).__name__}."
        )
    _check_size(key)
    return key


def as_private_key(key) -> rsa.RSAPrivateKey:
    """Accept an RSAKeys container or a raw RSA private key."""
    if isinstance(key, RSAKeys):
        return key.private_key
    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidKeyError(
            f"Expected an RSA private key, got {type(key).__name__}."
        )
    _check_size(key)
    return key


def wrap_session_key(public_key: rsa.RSAPublicKey, session_key: bytes) -> bytes:
    """Encrypt the raw session key. Output is exactly key_size // 8 bytes."""
    try:
        return public_key.encrypt(session_key, padding.PKCS1v15())
    except ValueError as exc:
        raise InvalidKeyError(f"RSA key cannot wrap a session key: {exc}") from exc


def unwrap_session_key(private_key: rsa.RSAPrivateKey, block: bytes,
                       size: int) -> bytes:
    """
    Recover a raw session key of exactly `size` bytes.

    The PKCS#1 v1.5 padding is checked here rather than by the backend:
    OpenSSL builds with implicit rejection hand back a random message
    instead of failing when the padding is wrong, which would let a
    non-matching private key through. Any block that is not

        00 02 | >= 8 non-zero bytes | 00 | `size` bytes

    raises DecryptionError.
    """
    numbers = private_key.private_numbers()
    n = numbers.public_numbers.n
    k = (n.bit_length() + 7) // 8
    if len(block) != k:
        raise DecryptionError(
            f"Wrapped session key is {len(block)} bytes, expected {k}."
        )
    c = int.from_bytes(block, "big")
    if c >= n:
        raise DecryptionError("RSA decryption of the session key failed.")

    # CRT form of pow(c, d, n)
    m1 = pow(c, numbers.dmp1, numbers.p)
    m2 = pow(c, numbers.dmq1, numbers.q)
    h  = (numbers.iqmp * (m1 - m2)) % numbers.p
    em = (m2 + h * numbers.q).to_bytes(k, "big")

    separator = em.find(b"\x00", 2)
    if (em[0] != 0x00 or em[1] != 0x02 or separator < 10
            or k - separator - 1 != size):
        raise DecryptionError("RSA decryption of the session key failed.")
    return em[separator + 1:]
