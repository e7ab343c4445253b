"""
Explicit cryptographic context.

A CryptoContext bundles the curve parameters, the MiMC7 round constants and
the randomness source. It is built once by the caller and passed to every
operation that needs it; nothing in zkpin keeps a module-level instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .field import CurveParameters, setup_curve
from .mimc7 import Mimc7
from .security import RandomnessSource


@dataclass(frozen=True)
class CryptoContext:
    """
    Handle passed to key, ECDH, cipher and Merkle operations.

    Example:
        >>> ctx = CryptoContext.create()
        >>> keypair = generate_keypair(ctx)
    """

    curve: CurveParameters
    mimc: Mimc7
    rng: RandomnessSource = field(default_factory=RandomnessSource, compare=False)

    @classmethod
    def create(cls, rng: RandomnessSource | None = None) -> "CryptoContext":
        return cls(
            curve=setup_curve(),
            mimc=Mimc7.create(),
            rng=rng if rng is not None else RandomnessSource(),
        )
