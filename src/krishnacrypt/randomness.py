"""Random source for initialization vectors."""

from __future__ import annotations

import logging
import secrets

from .errors import EntropyError

logger = logging.getLogger(__name__)


class RandomSource:
    """Random source with usage tracking.

    Draws from the operating system CSPRNG (secrets) unless a seed is
    given. A seeded source is deterministic and exists for reproducible
    tests only.
    """

    def __init__(self, seed: int | None = None):
        """Initialize random source.

        Args:
            seed: Optional seed for deterministic randomness
        """
        self._seed = seed
        self._rng = _SeededRNG(seed) if seed is not None else None
        self._bytes_used = 0
        self._draws = 0

    @property
    def seeded(self) -> bool:
        return self._seed is not None

    @property
    def bytes_used(self) -> int:
        """Total random bytes handed out."""
        return self._bytes_used

    @property
    def draws(self) -> int:
        return self._draws

    def reset(self) -> None:
        """Reset usage counters (and the seeded stream)."""
        self._bytes_used = 0
        self._draws = 0
        if self._seed is not None:
            self._rng = _SeededRNG(self._seed)

    def get_bytes(self, count: int) -> bytes:
        """Get random bytes and track usage.

        Args:
            count: Number of bytes to generate

        Returns:
            Random bytes

        Raises:
            EntropyError: If the operating system entropy source fails
        """
        if self._rng is None:
            try:
                data = secrets.token_bytes(count)
            except (OSError, NotImplementedError) as e:
                logger.error("Secure random source unavailable: %s", e)
                raise EntropyError("Secure random source unavailable") from e
        else:
            data = self._rng.get_bytes(count)

        self._bytes_used += count
        self._draws += 1
        return data


class _SeededRNG:
    """Simple seeded PRNG for reproducibility.

    Uses a linear congruential generator (LCG) for simplicity.
    NOT cryptographically secure - for testing/reproducibility only.
    """

    def __init__(self, seed: int):
        self._state = seed & 0xFFFFFFFFFFFFFFFF
        self._a = 6364136223846793005
        self._c = 1442695040888963407
        self._m = 2**64

    def _next(self) -> int:
        self._state = (self._a * self._state + self._c) % self._m
        return self._state

    def get_bytes(self, count: int) -> bytes:
        result = bytearray(count)
        for i in range(count):
            result[i] = (self._next() >> 56) & 0xFF
        return bytes(result)
