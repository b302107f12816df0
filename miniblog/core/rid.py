"""
Human-readable resource ids such as ``user-k3x9qa``.

The six-character code is a bijection of the row's autoincrement id, mixed with
a per-machine salt, so distinct rows never collide while ids stay opaque.
"""

import hashlib
import os
import socket
from functools import lru_cache

ALPHABET = "abcdefghijklmnopqrstuvwxyz1234567890"
CODE_LENGTH = 6

USER = "user"
POST = "post"

_SPACE = len(ALPHABET) ** CODE_LENGTH
# Coprime with 36**6 (= 2**12 * 3**12), so counter -> code is a permutation.
_MULTIPLIER = 1_000_003

_MACHINE_ID_FILES = ("/etc/machine-id", "/sys/class/dmi/id/product_uuid")


def new(prefix: str, counter: int, salt: int | None = None) -> str:
    """Return ``<prefix>-<code>`` for the given autoincrement counter."""
    if counter < 0:
        raise ValueError("counter must be non-negative")
    if salt is None:
        salt = machine_salt()
    return f"{prefix}-{encode(counter, salt)}"


def encode(counter: int, salt: int) -> str:
    value = (counter * _MULTIPLIER + salt) % _SPACE
    base = len(ALPHABET)
    chars = []
    for _ in range(CODE_LENGTH):
        value, digit = divmod(value, base)
        chars.append(ALPHABET[digit])
    return "".join(reversed(chars))


@lru_cache
def machine_salt() -> int:
    """Stable salt derived from the machine id (hostname or random as fallback)."""
    digest = hashlib.blake2b(_machine_id(), digest_size=8).digest()
    return int.from_bytes(digest, "big")


def _machine_id() -> bytes:
    for path in _MACHINE_ID_FILES:
        try:
            with open(path, "rb") as f:
                data = f.read().strip()
        except OSError:
            continue
        if data:
            return data
    hostname = socket.gethostname()
    if hostname:
        return hostname.encode("utf-8")
    return os.urandom(16)
