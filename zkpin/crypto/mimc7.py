"""
MiMC7 permutation and sponge-free multi-hash over the BN254 field.

Round constants follow the circomlib derivation: the first constant is zero
and the rest come from a Keccak-256 chain seeded with ``b"mimc"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from Crypto.Hash import keccak

from .config import MIMC7_EXPONENT, MIMC7_ROUNDS, MIMC7_SEED, SNARK_FIELD_SIZE

P = SNARK_FIELD_SIZE


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def derive_round_constants(
    seed: bytes = MIMC7_SEED, rounds: int = MIMC7_ROUNDS
) -> Tuple[int, ...]:
    """
    Derive MiMC7 round constants.

    Args:
        seed: Seed for the Keccak-256 chain
        rounds: Number of rounds (one constant per round)

    Returns:
        Tuple of `rounds` field elements, the first being 0
    """
    if rounds < 1:
        raise ValueError("rounds must be >= 1")

    constants = [0]
    digest = keccak256(seed)
    for _ in range(1, rounds):
        digest = keccak256(digest)
        constants.append(int.from_bytes(digest, byteorder="big") % P)
    return tuple(constants)


@dataclass(frozen=True)
class Mimc7:
    """
    MiMC7 keyed permutation.

    Example:
        >>> mimc = Mimc7.create()
        >>> mimc.hash(1, 2) == mimc.hash(1, 2)
        True
    """

    constants: Tuple[int, ...]

    @classmethod
    def create(cls, seed: bytes = MIMC7_SEED, rounds: int = MIMC7_ROUNDS) -> "Mimc7":
        return cls(constants=derive_round_constants(seed, rounds))

    @property
    def rounds(self) -> int:
        return len(self.constants)

    def hash(self, x_in: int, k: int) -> int:
        """
        Encrypt x_in under key k and add the key back.

        Round 0 computes (x_in + k)^7; round i computes (r + k + c_i)^7.
        """
        x_in %= P
        k %= P
        r = 0
        for i, c in enumerate(self.constants):
            t = (x_in + k) % P if i == 0 else (r + k + c) % P
            r = pow(t, MIMC7_EXPONENT, P)
        return (r + k) % P

    def multi_hash(self, values: Iterable[int], key: int = 0) -> int:
        """
        Hash a sequence of field elements.

        r starts at key; each value v updates r = r + v + hash(v, r).
        """
        r = key % P
        for value in values:
            value %= P
            r = (r + value + self.hash(value, r)) % P
        return r
