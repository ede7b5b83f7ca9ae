"""Built-in self-test: round trips, identifier symmetry and reference checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .cbc import decrypt_message, encrypt_message
from .cipher_core import decrypt_block, encrypt_block
from .config import BLOCK_SIZE, DEFAULT_CONFIG, CipherConfig
from .errors import KrishnaCryptError
from .identifiers import tunnel_id
from .kdf import derive_key, key_schedule
from .reference import verify_key_derivation, verify_padding
from .tunnel import tunnel_decrypt, tunnel_encrypt
from .utils import encode_text

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Hello, this is a test message for KrishnaCrypt!"
DEFAULT_USER_A = "user123"
DEFAULT_USER_B = "user456"


@dataclass
class SelfTestReport:
    """Result of run_self_test()."""

    success: bool
    original: str
    encrypted: str = ""
    decrypted: str = ""
    room_id: str = ""
    tunnel_metadata: dict[str, Any] = field(default_factory=dict)
    checks: dict[str, bool] = field(default_factory=dict)
    message: str = ""
    error: str = ""

    @property
    def failed_checks(self) -> list[str]:
        return [name for name, passed in self.checks.items() if not passed]

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary for serialization."""
        return {
            "success": self.success,
            "original": self.original,
            "encrypted": self.encrypted,
            "decrypted": self.decrypted,
            "roomId": self.room_id,
            "tunnelMetadata": self.tunnel_metadata,
            "checks": self.checks,
            "message": self.message,
            "error": self.error,
        }


def run_self_test(
    message: str = DEFAULT_MESSAGE,
    id_a: str = DEFAULT_USER_A,
    id_b: str = DEFAULT_USER_B,
    config: CipherConfig | None = None,
) -> SelfTestReport:
    """
    Exercise every layer once with a known message and identifier pair.

    Never raises for cipher failures; they are reported in the result.
    """
    config = config or DEFAULT_CONFIG
    report = SelfTestReport(success=False, original=message)

    try:
        key = derive_key(id_a, id_b, config.salt)
        schedule = key_schedule(key, config.rounds)

        sample = bytes(range(BLOCK_SIZE))
        report.checks["block_self_inverse"] = (
            decrypt_block(encrypt_block(sample, key, schedule), key, schedule) == sample
        )

        envelope = encrypt_message(encode_text(message), key, config.rounds)
        report.checks["cbc_round_trip"] = (
            decrypt_message(envelope, key, config.rounds).decode("utf-8") == message
        )

        enc = tunnel_encrypt(message, id_a, id_b, config).unwrap()
        dec = tunnel_decrypt(enc.ciphertext, id_a, id_b, config).unwrap()
        report.encrypted = enc.ciphertext
        report.decrypted = dec.plaintext
        report.tunnel_metadata = enc.metadata.to_dict()
        report.checks["tunnel_round_trip"] = dec.plaintext == message

        report.room_id = tunnel_id(id_a, id_b)
        report.checks["room_id_symmetry"] = report.room_id == tunnel_id(id_b, id_a)
        report.checks["key_symmetry"] = key == derive_key(id_b, id_a, config.salt)

        report.checks["padding_matches_reference"] = all(
            verify_padding(bytes(n)) for n in range(2 * BLOCK_SIZE + 1)
        )
        report.checks["key_derivation_matches_reference"] = verify_key_derivation(
            id_a, id_b, config.salt, config.rounds
        )
    except KrishnaCryptError as e:
        logger.error("Self-test aborted: %s", e.kind)
        report.error = str(e)
        report.message = "Encryption test failed!"
        return report

    report.success = all(report.checks.values())
    report.message = "All tests passed!" if report.success else "Tests failed!"
    if not report.success:
        logger.error("Self-test failed checks: %s", ", ".join(report.failed_checks))
    return report
