"""Tunnel envelope: the encrypt/decrypt entry points used by the messaging layer.

Callers pass two participant identifiers and never handle key
material. Results are returned as a TunnelResult; a rejected
ciphertext is reported through ``success``/``error`` rather than by
raising, and its ``message`` never says which check failed.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .cbc import decode_envelope, decrypt_message, encode_envelope, encrypt_message
from .config import DEFAULT_CONFIG, CipherConfig
from .errors import DecryptionError, EntropyError, InvalidPlaintext, KrishnaCryptError
from .identifiers import tunnel_id
from .kdf import derive_key
from .randomness import RandomSource
from .utils import encode_text

logger = logging.getLogger(__name__)

ENCRYPT_FAILED = "Failed to encrypt message"
DECRYPT_FAILED = "Failed to decrypt message"


def _utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class TunnelMetadata:
    """Algorithm and timing record carried beside the ciphertext."""

    algorithm: str
    key_size: int     # bits
    block_size: int   # bits
    rounds: int
    elapsed_ms: float
    tunnel_id: str
    timestamp: str
    operation: str    # "encrypt" or "decrypt"
    encryption_version: str = "1.0"

    @classmethod
    def build(
        cls,
        config: CipherConfig,
        operation: str,
        elapsed_ms: float,
        id_a: str,
        id_b: str,
    ) -> "TunnelMetadata":
        return cls(
            algorithm=config.algorithm,
            key_size=config.key_size_bits,
            block_size=config.block_size_bits,
            rounds=config.rounds,
            elapsed_ms=elapsed_ms,
            tunnel_id=tunnel_id(id_a, id_b),
            timestamp=_utc_timestamp(),
            operation=operation,
            encryption_version=config.encryption_version,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the record stored next to a message."""
        time_key = "encryptionTime" if self.operation == "encrypt" else "decryptionTime"
        return {
            "algorithm": self.algorithm,
            "keySize": self.key_size,
            "blockSize": self.block_size,
            "rounds": self.rounds,
            time_key: self.elapsed_ms,
            "tunnelId": self.tunnel_id,
            "timestamp": self.timestamp,
            "encryptionVersion": self.encryption_version,
        }


@dataclass
class TunnelResult:
    """Outcome of a tunnel operation.

    Exactly one of ``ciphertext`` / ``plaintext`` is set on success;
    ``error`` holds the typed error on failure.
    """

    success: bool
    ciphertext: str | None = None
    plaintext: str | None = None
    metadata: TunnelMetadata | None = None
    error: KrishnaCryptError | None = None
    message: str = ""

    @property
    def error_kind(self) -> str:
        return self.error.kind if self.error is not None else ""

    def unwrap(self) -> "TunnelResult":
        """Return self on success, otherwise raise the stored error."""
        if self.error is not None:
            raise self.error
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for serialization."""
        result: dict[str, Any] = {"success": self.success}
        if self.ciphertext is not None:
            result["encrypted"] = self.ciphertext
        if self.plaintext is not None:
            result["decrypted"] = self.plaintext
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_dict()
        if not self.success:
            result["error"] = self.error_kind
            result["message"] = self.message
        return result


def tunnel_encrypt(
    message: str,
    id_a: str,
    id_b: str,
    config: CipherConfig | None = None,
    rng: RandomSource | None = None,
) -> TunnelResult:
    """
    Encrypt a text message for the conversation between id_a and id_b.

    Args:
        message: UTF-8 text to encrypt
        id_a: First participant identifier
        id_b: Second participant identifier
        config: Cipher configuration (module defaults when omitted)
        rng: IV source (secure source when omitted)

    Returns:
        TunnelResult with base64 ``ciphertext`` and ``metadata``
    """
    config = config or DEFAULT_CONFIG
    start = time.perf_counter()
    try:
        key = derive_key(id_a, id_b, config.salt)
        envelope = encrypt_message(encode_text(message), key, config.rounds, rng)
    except EntropyError as e:
        logger.warning("Tunnel encryption rejected: %s", e.kind)
        return TunnelResult(success=False, error=e, message=ENCRYPT_FAILED)
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    metadata = TunnelMetadata.build(config, "encrypt", elapsed_ms, id_a, id_b)
    logger.debug(
        "Tunnel %s: encrypted %d chars in %.3f ms",
        metadata.tunnel_id[:12], len(message), elapsed_ms,
    )
    return TunnelResult(success=True, ciphertext=encode_envelope(envelope), metadata=metadata)


def tunnel_decrypt(
    encoded: str,
    id_a: str,
    id_b: str,
    config: CipherConfig | None = None,
) -> TunnelResult:
    """
    Decrypt a base64 envelope produced by tunnel_encrypt.

    Args:
        encoded: Base64 text of IV || ciphertext blocks
        id_a: First participant identifier
        id_b: Second participant identifier
        config: Cipher configuration (must match the encrypting side)

    Returns:
        TunnelResult with ``plaintext`` and ``metadata``, or with
        ``success=False`` and a DecryptionError in ``error``
    """
    config = config or DEFAULT_CONFIG
    start = time.perf_counter()
    try:
        envelope = decode_envelope(encoded)
        key = derive_key(id_a, id_b, config.salt)
        raw = decrypt_message(envelope, key, config.rounds)
        try:
            plaintext = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidPlaintext("Recovered plaintext is not valid UTF-8") from None
    except DecryptionError as e:
        logger.warning("Tunnel decryption rejected: %s", e.kind)
        return TunnelResult(success=False, error=e, message=DECRYPT_FAILED)
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    metadata = TunnelMetadata.build(config, "decrypt", elapsed_ms, id_a, id_b)
    logger.debug("Tunnel %s: decrypted in %.3f ms", metadata.tunnel_id[:12], elapsed_ms)
    return TunnelResult(success=True, plaintext=plaintext, metadata=metadata)
