"""
Block cipher core: a 3-round substitution-permutation network.

Encryption of one 16-byte block:
- Initial whitening: XOR with the key
- Each round: SubBytes -> RotateRows -> MixColumns -> AddRoundKey
- Final round: SubBytes -> RotateRows -> AddRoundKey (no MixColumns)

Decryption runs the rounds backwards with the inverse steps and ends
with the same whitening XOR. The row rotation direction and the
"no mix on the last round" rule must match between the two directions.
"""

from __future__ import annotations

from .config import BLOCK_SIZE, KEY_SIZE, ROUNDS
from .gf import gf_dot
from .kdf import key_schedule
from .tables import SBOX, INV_SBOX, MIX_MATRIX, INV_MIX_MATRIX
from .trace import TraceRecorder
from .utils import require_block, xor_bytes


def sub_bytes(block: bytes, table: bytes = SBOX) -> bytes:
    """Substitute every byte through the given table."""
    return bytes(table[b] for b in block)


def inv_sub_bytes(block: bytes) -> bytes:
    return sub_bytes(block, INV_SBOX)


def rotate_rows(block: bytes, inverse: bool = False) -> bytes:
    """Rotate row r of the row-major 4x4 state by r positions.

    Left for encryption, right when inverse is set.
    """
    result = bytearray(BLOCK_SIZE)
    for row in range(4):
        shift = (4 - row) % 4 if inverse else row
        for col in range(4):
            result[row * 4 + col] = block[row * 4 + (col + shift) % 4]
    return bytes(result)


def mix_columns(block: bytes, matrix: tuple[tuple[int, ...], ...] = MIX_MATRIX) -> bytes:
    """Multiply each state column by the matrix in GF(2^8)."""
    result = bytearray(BLOCK_SIZE)
    for col in range(4):
        column = [block[i * 4 + col] for i in range(4)]
        for row in range(4):
            result[row * 4 + col] = gf_dot(matrix[row], column)
    return bytes(result)


def inv_mix_columns(block: bytes) -> bytes:
    return mix_columns(block, INV_MIX_MATRIX)


def add_round_key(block: bytes, round_key: bytes) -> bytes:
    """XOR state with round key."""
    return xor_bytes(block, round_key)


def _resolve_schedule(key: bytes, round_keys: list[bytes] | None) -> list[bytes]:
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    if round_keys is None:
        return key_schedule(key, ROUNDS)
    if not round_keys:
        raise ValueError("Key schedule must contain at least one round key")
    return round_keys


def encrypt_block(
    block: bytes,
    key: bytes,
    round_keys: list[bytes] | None = None,
    tracer: TraceRecorder | None = None,
) -> bytes:
    """
    Encrypt a single 16-byte block.

    Args:
        block: 16-byte plaintext block
        key: 16-byte key
        round_keys: Precomputed key_schedule(key, rounds); computed
            with the default round count when omitted
        tracer: Optional trace recorder

    Returns:
        16-byte ciphertext block

    Raises:
        ValueError: If block or key is not 16 bytes
    """
    require_block(block)
    schedule = _resolve_schedule(key, round_keys)
    last_round = len(schedule) - 1

    state = add_round_key(block, key)
    if tracer:
        tracer.record(direction="encrypt", round=None, operation="Whiten", state=state)

    for round_num, rk in enumerate(schedule):
        state = sub_bytes(state)
        if tracer:
            tracer.record(direction="encrypt", round=round_num, operation="SubBytes", state=state)

        state = rotate_rows(state)
        if tracer:
            tracer.record(direction="encrypt", round=round_num, operation="RotateRows", state=state)

        if round_num < last_round:
            state = mix_columns(state)
            if tracer:
                tracer.record(direction="encrypt", round=round_num, operation="MixColumns", state=state)

        state = add_round_key(state, rk)
        if tracer:
            tracer.record(direction="encrypt", round=round_num, operation="AddRoundKey", state=state)

    return state


def decrypt_block(
    block: bytes,
    key: bytes,
    round_keys: list[bytes] | None = None,
    tracer: TraceRecorder | None = None,
) -> bytes:
    """
    Decrypt a single 16-byte block; exact inverse of encrypt_block.

    Args:
        block: 16-byte ciphertext block
        key: 16-byte key
        round_keys: Same schedule that was used for encryption
        tracer: Optional trace recorder

    Returns:
        16-byte plaintext block
    """
    require_block(block)
    schedule = _resolve_schedule(key, round_keys)
    last_round = len(schedule) - 1

    state = block
    for round_num in range(last_round, -1, -1):
        state = add_round_key(state, schedule[round_num])
        if tracer:
            tracer.record(direction="decrypt", round=round_num, operation="AddRoundKey", state=state)

        if round_num < last_round:
            state = inv_mix_columns(state)
            if tracer:
                tracer.record(direction="decrypt", round=round_num, operation="InvMixColumns", state=state)

        state = rotate_rows(state, inverse=True)
        if tracer:
            tracer.record(direction="decrypt", round=round_num, operation="InvRotateRows", state=state)

        state = inv_sub_bytes(state)
        if tracer:
            tracer.record(direction="decrypt", round=round_num, operation="InvSubBytes", state=state)

    state = add_round_key(state, key)
    if tracer:
        tracer.record(direction="decrypt", round=None, operation="Whiten", state=state)

    return state
