"""
Reference padding and hashing using PyCryptodome for verification.

The padding scheme is PKCS#7 with a 16-byte block, and the key and
round-key derivations are plain SHA-256 truncations, so PyCryptodome
can reproduce both independently of this package.
"""

from Crypto.Hash import SHA256
from Crypto.Util.Padding import pad as _pkcs7_pad, unpad as _pkcs7_unpad

from .cbc import pad
from .config import BLOCK_SIZE, KEY_SIZE, ROUNDS, SERVER_SALT
from .kdf import derive_key, round_key
from .utils import encode_text


def reference_pad(data: bytes) -> bytes:
    """PKCS#7-pad data to the cipher block size."""
    return _pkcs7_pad(data, BLOCK_SIZE, style="pkcs7")


def reference_unpad(data: bytes) -> bytes:
    """
    Remove PKCS#7 padding.

    Raises:
        ValueError: If the padding is incorrect
    """
    return _pkcs7_unpad(data, BLOCK_SIZE, style="pkcs7")


def reference_derive_key(id_a: str, id_b: str, salt: str = SERVER_SALT) -> bytes:
    """Derive the conversation key with PyCryptodome's SHA-256."""
    material = "".join(sorted((id_a, id_b))) + salt
    return SHA256.new(encode_text(material)).digest()[:KEY_SIZE]


def reference_round_key(key: bytes, round_index: int) -> bytes:
    """Derive a round key with PyCryptodome's SHA-256."""
    return SHA256.new(key + bytes([round_index])).digest()[:KEY_SIZE]


def verify_padding(data: bytes) -> bool:
    """
    Verify pad() against the PyCryptodome reference.

    Returns:
        True if both paddings match, False otherwise
    """
    return pad(data) == reference_pad(data)


def verify_key_derivation(id_a: str, id_b: str, salt: str = SERVER_SALT, rounds: int = ROUNDS) -> bool:
    """
    Verify derive_key() and round_key() against the reference hashes.

    Returns:
        True if the key and every round key match, False otherwise
    """
    key = derive_key(id_a, id_b, salt)
    if key != reference_derive_key(id_a, id_b, salt):
        return False
    return all(round_key(key, r) == reference_round_key(key, r) for r in range(rounds))
