"""Key derivation from a participant identifier pair.

The key is SHA-256(sorted(id_a, id_b) joined ‖ salt) truncated to 16
bytes. Round subkeys are SHA-256(key ‖ round_index_byte) truncated to
16 bytes.
"""

from __future__ import annotations

import hashlib

from .config import KEY_SIZE, ROUNDS, SERVER_SALT
from .utils import encode_text


def _canonical_pair(id_a: str, id_b: str) -> str:
    """Concatenate the two identifiers in sorted order."""
    return "".join(sorted((id_a, id_b)))


def derive_key(id_a: str, id_b: str, salt: str = SERVER_SALT) -> bytes:
    """
    Derive the 16-byte conversation key for an identifier pair.

    Order-independent: derive_key(a, b) == derive_key(b, a).

    Args:
        id_a: First participant identifier
        id_b: Second participant identifier
        salt: Server-side secret salt

    Returns:
        16-byte key
    """
    material = encode_text(_canonical_pair(id_a, id_b) + salt)
    return hashlib.sha256(material).digest()[:KEY_SIZE]


def round_key(key: bytes, round_index: int) -> bytes:
    """
    Derive the subkey for one round.

    Args:
        key: 16-byte key
        round_index: Round number (0..255)

    Returns:
        16-byte round key
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    if not 0 <= round_index <= 255:
        raise ValueError(f"Round index must be 0..255, got {round_index}")
    return hashlib.sha256(key + bytes([round_index])).digest()[:KEY_SIZE]


def key_schedule(key: bytes, rounds: int = ROUNDS) -> list[bytes]:
    """Compute every round key for one message, in round order."""
    return [round_key(key, r) for r in range(rounds)]
