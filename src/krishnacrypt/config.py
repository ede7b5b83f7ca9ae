"""Cipher constants and configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

BLOCK_SIZE = 16  # bytes
KEY_SIZE = 16    # bytes
ROUNDS = 3
SERVER_SALT = "KrishnaCrypt2024SecureTunnel"
ALGORITHM_NAME = "KrishnaCrypt-Custom-CBC"
ENCRYPTION_VERSION = "1.0"

SALT_ENV_VAR = "KRISHNACRYPT_SALT"
ROUNDS_ENV_VAR = "KRISHNACRYPT_ROUNDS"


@dataclass(frozen=True)
class CipherConfig:
    """Configuration shared by the tunnel entry points.

    Both ends of a conversation must use the same salt and round count,
    otherwise decryption fails with InvalidPadding (or returns garbage).
    """

    # Server-side secret appended to the sorted identifiers before hashing
    salt: str = SERVER_SALT

    # Number of cipher rounds (the round index must fit in one byte)
    rounds: int = ROUNDS

    # Reported in tunnel metadata only; not embedded in the ciphertext
    algorithm: str = ALGORITHM_NAME
    encryption_version: str = ENCRYPTION_VERSION

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not isinstance(self.salt, str):
            raise ValueError(f"salt must be a string, got {type(self.salt).__name__}")
        if not isinstance(self.rounds, int) or isinstance(self.rounds, bool):
            raise ValueError(f"rounds must be an integer, got {type(self.rounds).__name__}")
        if not 1 <= self.rounds <= 255:
            raise ValueError(f"rounds must be 1..255, got {self.rounds}")
        if not self.algorithm:
            raise ValueError("algorithm must be a non-empty string")

    @property
    def key_size_bits(self) -> int:
        return KEY_SIZE * 8

    @property
    def block_size_bits(self) -> int:
        return BLOCK_SIZE * 8

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "CipherConfig":
        """Build a config from KRISHNACRYPT_* environment variables.

        Unset variables fall back to the module defaults.

        Raises:
            ValueError: If KRISHNACRYPT_ROUNDS is not an integer in 1..255
        """
        env = os.environ if environ is None else environ
        salt = env.get(SALT_ENV_VAR, SERVER_SALT)
        rounds_text = env.get(ROUNDS_ENV_VAR)
        if rounds_text is None:
            return cls(salt=salt)
        try:
            rounds = int(rounds_text)
        except ValueError:
            raise ValueError(
                f"{ROUNDS_ENV_VAR} must be an integer, got {rounds_text!r}"
            ) from None
        return cls(salt=salt, rounds=rounds)


DEFAULT_CONFIG = CipherConfig()
