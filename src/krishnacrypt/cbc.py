"""Padding and cipher-block chaining over the block cipher core.

Envelope layout: IV (16 bytes) || ciphertext blocks (16 bytes each).
On the wire the envelope travels as standard base64 text.

Padding appends 16 - (len % 16) bytes of that value, so aligned input
(including empty input) gains a full block of 0x10. Unpadding checks
the count and every pad byte, returning early on the first failure;
it is not constant-time.
"""

from __future__ import annotations

import base64
import logging

from .cipher_core import decrypt_block, encrypt_block
from .config import BLOCK_SIZE, ROUNDS
from .errors import InvalidLength, InvalidPadding, MalformedEncoding
from .kdf import key_schedule
from .randomness import RandomSource
from .utils import split_blocks, xor_bytes

logger = logging.getLogger(__name__)

MIN_ENVELOPE_SIZE = 2 * BLOCK_SIZE


def pad(data: bytes) -> bytes:
    """Append 1..16 pad bytes, each holding the pad length."""
    pad_len = BLOCK_SIZE - (len(data) % BLOCK_SIZE)
    return data + bytes([pad_len]) * pad_len


def unpad(data: bytes) -> bytes:
    """
    Strip padding added by pad().

    Raises:
        InvalidPadding: If the pad count is outside 1..16, exceeds the
            data length, or the pad bytes disagree
    """
    if not data or len(data) % BLOCK_SIZE:
        raise InvalidPadding("Invalid padding")
    pad_len = data[-1]
    if not 1 <= pad_len <= BLOCK_SIZE or pad_len > len(data):
        raise InvalidPadding("Invalid padding")
    if data[-pad_len:] != bytes([pad_len]) * pad_len:
        raise InvalidPadding("Invalid padding")
    return data[:-pad_len]


def check_envelope_length(envelope: bytes) -> None:
    """Raise InvalidLength unless envelope is IV plus at least one block."""
    if len(envelope) < MIN_ENVELOPE_SIZE or len(envelope) % BLOCK_SIZE:
        raise InvalidLength(
            f"Envelope must be at least {MIN_ENVELOPE_SIZE} bytes and a "
            f"multiple of {BLOCK_SIZE}, got {len(envelope)}"
        )


def encode_envelope(envelope: bytes) -> str:
    """Encode an envelope as base64 text."""
    return base64.b64encode(envelope).decode("ascii")


def decode_envelope(encoded: str | bytes) -> bytes:
    """
    Decode base64 text into an envelope and check its length.

    Raises:
        MalformedEncoding: If the input is not strict base64
        InvalidLength: If the decoded envelope has a bad length
    """
    if not isinstance(encoded, (str, bytes)):
        raise MalformedEncoding(
            f"Expected base64 text, got {type(encoded).__name__}"
        )
    try:
        envelope = base64.b64decode(encoded, validate=True)
    except ValueError:
        # binascii.Error and non-ASCII str input are both ValueError
        raise MalformedEncoding("Ciphertext is not valid base64") from None
    check_envelope_length(envelope)
    return envelope


def validate_envelope_format(encoded: str | bytes) -> bool:
    """Check decodability and length without attempting decryption."""
    try:
        decode_envelope(encoded)
    except (MalformedEncoding, InvalidLength):
        return False
    return True


def encrypt_message(
    plaintext: bytes,
    key: bytes,
    rounds: int = ROUNDS,
    rng: RandomSource | None = None,
) -> bytes:
    """
    Pad and CBC-encrypt a message.

    Args:
        plaintext: Message bytes (may be empty)
        key: 16-byte key
        rounds: Cipher round count
        rng: IV source; a fresh secure source when omitted

    Returns:
        IV || ciphertext blocks

    Raises:
        EntropyError: If no IV could be drawn
    """
    rng = rng or RandomSource()
    schedule = key_schedule(key, rounds)
    iv = rng.get_bytes(BLOCK_SIZE)

    encrypted = [iv]
    previous = iv
    for block in split_blocks(pad(plaintext)):
        previous = encrypt_block(xor_bytes(block, previous), key, schedule)
        encrypted.append(previous)

    logger.debug("Encrypted %d bytes into %d blocks", len(plaintext), len(encrypted) - 1)
    return b"".join(encrypted)


def decrypt_blocks(envelope: bytes, key: bytes, rounds: int = ROUNDS) -> bytes:
    """
    CBC-decrypt an envelope without removing the padding.

    Raises:
        InvalidLength: If the envelope has a bad length
    """
    check_envelope_length(envelope)
    schedule = key_schedule(key, rounds)
    blocks = split_blocks(envelope)

    decrypted = []
    previous = blocks[0]
    for block in blocks[1:]:
        decrypted.append(xor_bytes(decrypt_block(block, key, schedule), previous))
        # chain on the raw ciphertext block, not the decrypted one
        previous = block
    return b"".join(decrypted)


def decrypt_message(envelope: bytes, key: bytes, rounds: int = ROUNDS) -> bytes:
    """
    CBC-decrypt an envelope and strip the padding.

    Raises:
        InvalidLength: If the envelope has a bad length
        InvalidPadding: If the recovered padding is inconsistent
    """
    plaintext = unpad(decrypt_blocks(envelope, key, rounds))
    logger.debug("Decrypted %d blocks into %d bytes", len(envelope) // BLOCK_SIZE - 1, len(plaintext))
    return plaintext
