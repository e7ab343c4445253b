"""Elliptic-curve Diffie-Hellman over BabyJubJub."""

from __future__ import annotations

from dataclasses import dataclass

from .field import require_field_element, scalar_mul
from .keys import PrivateKey, PublicKey, format_private_key


@dataclass(frozen=True)
class SharedKey:
    """x-coordinate of the ECDH point; a single field element."""

    value: int

    def __post_init__(self):
        require_field_element(self.value, "shared key")

    def __repr__(self) -> str:
        return "SharedKey(<redacted>)"


def derive_shared_key(private_key: PrivateKey | int, public_key: PublicKey) -> SharedKey:
    """
    Derive the shared key between a private key and a counterpart public key.

    derive_shared_key(a.private_key, b.public_key) equals
    derive_shared_key(b.private_key, a.public_key) because both sides
    multiply Base8 by the product of the two clamped scalars.

    Raises:
        InvalidKeyRange: If an int private key is >= SNARK_FIELD_SIZE
    """
    if not isinstance(public_key, PublicKey):
        raise TypeError(f"expected PublicKey, got {type(public_key)}")
    scalar = format_private_key(private_key)
    return SharedKey(scalar_mul(public_key.point, scalar).x)
