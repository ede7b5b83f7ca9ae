"""Deterministic tunnel/room identifiers.

The identifier is public: the transport layer routes on it. It shares
the sorted-pair shape with the key derivation but never uses the salt.
"""

import hashlib

from .utils import encode_text


def tunnel_id(id_a: str, id_b: str) -> str:
    """
    Return the 64-char hex SHA-256 of the sorted, concatenated identifiers.

    tunnel_id(a, b) == tunnel_id(b, a) for every pair.
    """
    joined = "".join(sorted((id_a, id_b)))
    return hashlib.sha256(encode_text(joined)).hexdigest()


# Name used by the messaging layer for the same value
generate_room_id = tunnel_id
