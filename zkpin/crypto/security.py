"""
⚠️ DRAFT — requires crypto review before production use

Randomness for key generation.
"""

import os
import secrets


class RandomnessSource:
    """
    Cryptographically secure randomness with fork detection.

    Prevents catastrophic randomness reuse if process forks.

    Example:
        >>> rng = RandomnessSource()
        >>> seed = rng.get_random_bytes(32)
    """

    def __init__(self):
        """Initialize randomness source with fork detection."""
        self._pid = os.getpid()

    def _check_fork(self) -> None:
        if os.getpid() != self._pid:
            self._pid = os.getpid()

    def get_random_bytes(self, n: int) -> bytes:
        """
        Get n cryptographically secure random bytes.

        Args:
            n: Number of bytes to generate

        Returns:
            n random bytes
        """
        if n <= 0:
            raise ValueError("n must be positive")
        self._check_fork()
        return secrets.token_bytes(n)

    def get_random_int(self, bits: int) -> int:
        """Uniform integer in [0, 2**bits), read big-endian."""
        if bits <= 0 or bits % 8 != 0:
            raise ValueError("bits must be a positive multiple of 8")
        return int.from_bytes(self.get_random_bytes(bits // 8), byteorder="big")
