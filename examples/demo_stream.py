"""
hybridstream - Live Demo
========================
Run:  python examples/demo_stream.py

Encrypts a message through an EncryptingWriter, shows the wire layout,
reads it back one byte at a time and all at once, then flips a single
bit to show the tamper check.
"""

import sys, os, io, time
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hybridstream import (
    DecryptingReader,
    DecryptionError,
    EncryptingWriter,
    HybridStreamCipher,
    RSAKeys,
    header_size,
)

LINE  = "═" * 70
MSG   = b"Hello, World!" * 5
CHUNK = 16

def header(name):
    print(f"\n{LINE}")
    print(f"  {name}")
    print(LINE)

def ok(label, value=""):
    print(f"  ✓  {label}{f': {value}' if value else ''}")

# ─────────────────────────────────────────────────────────────────────────────
print(f"\n{LINE}")
print("  hybridstream - RSA + AES-256-GCM streaming demo")
print(LINE)
print(f"  Message: {len(MSG)} bytes, chunk size {CHUNK}\n")

header("KEYS - RSA-2048")
t0   = time.perf_counter()
keys = RSAKeys.generate()
ok("Kind",     keys.kind.name)
ok("Generate", f"{(time.perf_counter() - t0) * 1000:.0f} ms")

# ── WRITE ────────────────────────────────────────────────────────────────────
header("WRITE - EncryptingWriter")
sink = io.BytesIO()
with EncryptingWriter.open(sink, keys, CHUNK) as writer:
    for i in range(0, len(MSG), 10):
        writer.write(MSG[i:i + 10])
blob = sink.getvalue()
hdr  = header_size(keys)
body = len(blob) - hdr
full, rest = divmod(body, CHUNK + 16)
ok("Header",  f"{hdr} bytes (wrapped key 256 + nonce 12)")
ok("Chunks",  f"{full} x {CHUNK + 16} bytes" + (f" + 1 x {rest} bytes" if rest else ""))
ok("Total",   f"{len(blob)} bytes")

# ── READ ─────────────────────────────────────────────────────────────────────
header("READ - DecryptingReader")
reader = DecryptingReader.open(io.BytesIO(blob), keys, CHUNK)
one_by_one = b"".join(iter(lambda: reader.read(1), b""))
all_at_once = DecryptingReader.open(io.BytesIO(blob), keys, CHUNK).read()
ok("1-byte pulls", f"{len(one_by_one)} bytes")
ok("Single pull",  f"{len(all_at_once)} bytes")
ok("Identical",    str(one_by_one == all_at_once == MSG))

# ── TAMPER ───────────────────────────────────────────────────────────────────
header("TAMPER - single bit flip in chunk 2")
bad = bytearray(blob)
bad[hdr + 2 * (CHUNK + 16) + 3] ^= 0x01
reader = DecryptingReader.open(io.BytesIO(bytes(bad)), keys, CHUNK)
released = bytearray()
try:
    while True:
        b = reader.read(1)
        if not b:
            break
        released += b
except DecryptionError as e:
    ok("Rejected", str(e))
ok("Released before failure", f"{len(released)} bytes (chunks 0-1 only)")

# ── CONVENIENCE ──────────────────────────────────────────────────────────────
header("HybridStreamCipher - whole message")
h  = HybridStreamCipher(keys, CHUNK)
ct = h.encrypt(MSG)
ok("Bundle",    f"{len(ct)} bytes")
ok("Decrypted", h.decrypt(ct)[:26].decode() + "...")

print(f"\n{LINE}\n")
