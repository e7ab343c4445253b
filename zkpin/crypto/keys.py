"""
⚠️ DRAFT — requires crypto review before production use

Key generation and deterministic public-key derivation.

Private keys are BN254 field elements. Public keys are BabyJubJub points
obtained by clamping a hash of the private key (EdDSA style) and multiplying
Base8 by the result. Signer and operator must derive keys identically, or
the ECDH shared key used for reveal will not match.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from .config import (
    CLAMP_SHIFT_BITS,
    FIELD_ELEMENT_BYTES,
    KEY_HASH_PREFIX_BYTES,
    PRIVATE_KEY_REJECTION_THRESHOLD,
    RANDOM_BITS,
    SNARK_FIELD_SIZE,
)
from .context import CryptoContext
from .exceptions import InvalidKeyRange, InvalidPoint
from .field import Point, encode_field_element, scalar_mul


@dataclass(frozen=True)
class PrivateKey:
    """
    A private key in [0, SNARK_FIELD_SIZE).

    The value never leaves the owning participant except as the clamped
    scalar inside circuit inputs.
    """

    value: int

    def __post_init__(self):
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"private key must be int, got {type(self.value)}")
        if self.value < 0 or self.value >= SNARK_FIELD_SIZE:
            raise InvalidKeyRange("private key must be less than SNARK_FIELD_SIZE")

    def __repr__(self) -> str:
        return "PrivateKey(<redacted>)"

    def to_bytes(self) -> bytes:
        return encode_field_element(self.value)

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, data: str) -> "PrivateKey":
        raw = bytes.fromhex(data)
        if len(raw) != FIELD_ELEMENT_BYTES:
            raise ValueError(
                f"private key must be {FIELD_ELEMENT_BYTES} bytes, got {len(raw)}"
            )
        return cls(int.from_bytes(raw, byteorder="big"))


@dataclass(frozen=True)
class PublicKey:
    """A BabyJubJub point derived from a PrivateKey."""

    point: Point

    def __post_init__(self):
        if not isinstance(self.point, Point):
            raise TypeError(f"public key must wrap a Point, got {type(self.point)}")

    @classmethod
    def from_coordinates(cls, x: int, y: int) -> "PublicKey":
        return cls(Point(x, y))

    @property
    def x(self) -> int:
        return self.point.x

    @property
    def y(self) -> int:
        return self.point.y

    def to_bytes(self) -> bytes:
        return self.point.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> "PublicKey":
        return cls(Point.from_bytes(data))

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_hex(cls, data: str) -> "PublicKey":
        try:
            raw = bytes.fromhex(data)
        except ValueError as exc:
            raise InvalidPoint(f"public key is not valid hex: {exc}") from exc
        return cls.from_bytes(raw)


@dataclass(frozen=True)
class Keypair:
    private_key: PrivateKey
    public_key: PublicKey

    @classmethod
    def from_private(cls, ctx: CryptoContext, private_key: PrivateKey) -> "Keypair":
        return cls(private_key, derive_public_key(ctx, private_key))


def generate_private_key(ctx: CryptoContext) -> PrivateKey:
    """
    Draw a private key with negligible modulo bias.

    256-bit candidates below PRIVATE_KEY_REJECTION_THRESHOLD are redrawn;
    the remaining range is a multiple of the field size, so reducing the
    accepted value is uniform.
    """
    while True:
        candidate = ctx.rng.get_random_int(RANDOM_BITS)
        if candidate >= PRIVATE_KEY_REJECTION_THRESHOLD:
            break

    value = candidate % SNARK_FIELD_SIZE
    assert value < SNARK_FIELD_SIZE
    return PrivateKey(value)


def _require_private_key(private_key) -> PrivateKey:
    if isinstance(private_key, PrivateKey):
        return private_key
    if isinstance(private_key, int) and not isinstance(private_key, bool):
        return PrivateKey(private_key)
    raise TypeError(f"expected PrivateKey or int, got {type(private_key)}")


def prune_buffer(buf: bytes) -> bytes:
    """Clear the low 3 bits, clear the top bit and set bit 254."""
    if len(buf) != KEY_HASH_PREFIX_BYTES:
        raise ValueError(f"prune_buffer expects {KEY_HASH_PREFIX_BYTES} bytes")
    pruned = bytearray(buf)
    pruned[0] &= 0xF8
    pruned[31] &= 0x7F
    pruned[31] |= 0x40
    return bytes(pruned)


def format_private_key(private_key: PrivateKey | int) -> int:
    """
    Clamp a private key into the scalar the curve and circuit use.

    hash -> first 32 bytes -> prune -> little-endian int -> >> 3

    Raises:
        InvalidKeyRange: If an int key is >= SNARK_FIELD_SIZE
    """
    key = _require_private_key(private_key)
    digest = hashlib.blake2b(key.to_bytes(), digest_size=64).digest()
    pruned = prune_buffer(digest[:KEY_HASH_PREFIX_BYTES])
    return int.from_bytes(pruned, byteorder="little") >> CLAMP_SHIFT_BITS


def derive_public_key(ctx: CryptoContext, private_key: PrivateKey | int) -> PublicKey:
    """
    Derive the public key for a private key.

    Raises:
        InvalidKeyRange: If the private key is >= SNARK_FIELD_SIZE
    """
    scalar = format_private_key(private_key)
    return PublicKey(scalar_mul(ctx.curve.base, scalar))


def generate_keypair(ctx: CryptoContext) -> Keypair:
    private_key = generate_private_key(ctx)
    return Keypair(private_key, derive_public_key(ctx, private_key))
