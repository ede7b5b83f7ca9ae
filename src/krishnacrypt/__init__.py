"""KrishnaCrypt: custom 128-bit block cipher with a CBC tunnel envelope."""

__version__ = "1.0.0"

from .config import BLOCK_SIZE, KEY_SIZE, ROUNDS, CipherConfig
from .errors import (
    KrishnaCryptError,
    DecryptionError,
    MalformedEncoding,
    InvalidLength,
    InvalidPadding,
    InvalidPlaintext,
    EntropyError,
)
from .cipher_core import encrypt_block, decrypt_block
from .kdf import derive_key, round_key, key_schedule
from .cbc import encrypt_message, decrypt_message, validate_envelope_format
from .identifiers import tunnel_id, generate_room_id
from .tunnel import TunnelMetadata, TunnelResult, tunnel_encrypt, tunnel_decrypt

__all__ = [
    "BLOCK_SIZE",
    "KEY_SIZE",
    "ROUNDS",
    "CipherConfig",
    "KrishnaCryptError",
    "DecryptionError",
    "MalformedEncoding",
    "InvalidLength",
    "InvalidPadding",
    "InvalidPlaintext",
    "EntropyError",
    "encrypt_block",
    "decrypt_block",
    "derive_key",
    "round_key",
    "key_schedule",
    "encrypt_message",
    "decrypt_message",
    "validate_envelope_format",
    "tunnel_id",
    "generate_room_id",
    "TunnelMetadata",
    "TunnelResult",
    "tunnel_encrypt",
    "tunnel_decrypt",
]
