"""
hybridstream command-line tool.

    hybridstream keygen KEYFILE [--bits 2048]
    hybridstream encrypt INPUT KEYFILE.pub [OUTPUT]     (default INPUT.enc)
    hybridstream decrypt INPUT KEYFILE [OUTPUT]         (default "-", stdout)

Both ends must pass the same --chunk-size.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from . import __version__
from .config import DEFAULT_CHUNK_SIZE, StreamConfig
from .errors import StreamError
from .hybrid import HybridStreamCipher
from .primitives.rsa import RSAKeys

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hybridstream",
        description="Hybrid RSA + AES-256-GCM streaming file encryption.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log every chunk")
    parser.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE,
                        help=f"plaintext bytes per chunk (default: {DEFAULT_CHUNK_SIZE})")
    sub = parser.add_subparsers(dest="command", required=True)

    keygen = sub.add_parser("keygen", help="generate an RSA key pair")
    keygen.add_argument("output", type=Path,
                        help="private key file; the public key goes to OUTPUT.pub")
    keygen.add_argument("--bits", type=int, default=RSAKeys.KEY_SIZE,
                        help=f"key size in bits (default: {RSAKeys.KEY_SIZE})")

    enc = sub.add_parser("encrypt", help="encrypt a file to a public key")
    enc.add_argument("input", type=Path, help="file to encrypt")
    enc.add_argument("key", type=Path, help="recipient public key (PEM)")
    enc.add_argument("output", type=Path, nargs="?",
                     help="encrypted output (default: INPUT.enc)")

    dec = sub.add_parser("decrypt", help="decrypt a file with a private key")
    dec.add_argument("input", type=Path, help="file to decrypt")
    dec.add_argument("key", type=Path, help="private key (PEM)")
    dec.add_argument("output", nargs="?", default="-",
                     help="decrypted output, '-' for stdout (default: -)")
    return parser


def cmd_keygen(args) -> str:
    keys = RSAKeys.generate(args.bits)
    pub_path = Path(f"{args.output}.pub")
    args.output.write_bytes(keys.private_key_to_pem())
    pub_path.write_bytes(keys.public_key_to_pem())
    print(f"Keys saved to {args.output} and {pub_path}")
    return "Key generation"


def cmd_encrypt(args, config: StreamConfig) -> str:
    keys = RSAKeys.from_public_key_pem(args.key.read_bytes())
    output = args.output or Path(f"{args.input}.enc")
    cipher = HybridStreamCipher(keys, config)
    with open(args.input, "rb") as src, open(output, "wb") as dst:
        chunks = cipher.encrypt_file(src, dst)
    logger.info("Wrote %d chunks", chunks)
    print(f"Encrypted data saved to {output}")
    return "Encryption"


def cmd_decrypt(args, config: StreamConfig) -> Optional[str]:
    keys = RSAKeys.from_private_key_pem(args.key.read_bytes())
    cipher = HybridStreamCipher(keys, config)
    with open(args.input, "rb") as src:
        if args.output == "-":
            cipher.decrypt_file(src, sys.stdout.buffer)
            sys.stdout.buffer.flush()
            return None
        output = Path(args.output)
        try:
            with open(output, "wb") as dst:
                chunks = cipher.decrypt_file(src, dst)
        except BaseException:
            # drop the partial plaintext
            output.unlink(missing_ok=True)
            raise
    logger.info("Read %d chunks", chunks)
    print(f"Decrypted data saved to {args.output}")
    return "Decryption"


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    start = time.perf_counter()
    try:
        config = StreamConfig(chunk_size=args.chunk_size)
        if args.command == "keygen":
            label = cmd_keygen(args)
        elif args.command == "encrypt":
            label = cmd_encrypt(args, config)
        else:
            label = cmd_decrypt(args, config)
    except (StreamError, OSError, ValueError) as exc:
        print(f"hybridstream: error: {exc}", file=sys.stderr)
        return 1

    if label:
        print(f"{label} took {time.perf_counter() - start:.3f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
