"""
⚠️ DRAFT — requires crypto review before production use

Field arithmetic over the BN254 scalar field and BabyJubJub point operations.

All functions are pure and operate on Python integers. Values are reduced
modulo SNARK_FIELD_SIZE on the way in, so callers may pass unreduced sums.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .config import (
    BASE8,
    CURVE_A,
    CURVE_D,
    CURVE_NAME,
    FIELD_ELEMENT_BYTES,
    POINT_SIZE_BYTES,
    SNARK_FIELD_SIZE,
    SUBGROUP_ORDER,
)
from .exceptions import InvalidKeyRange, InvalidPoint

P = SNARK_FIELD_SIZE


# ============================================================================
# FIELD OPERATIONS
# ============================================================================


def to_field(value: int) -> int:
    """Reduce an integer into [0, p)."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"field element must be int, got {type(value)}")
    return value % P


def field_add(a: int, b: int) -> int:
    return (a + b) % P


def field_sub(a: int, b: int) -> int:
    return (a - b) % P


def field_mul(a: int, b: int) -> int:
    return (a * b) % P


def field_neg(a: int) -> int:
    return (-a) % P


def field_inv(a: int) -> int:
    """
    Multiplicative inverse modulo p.

    Raises:
        ZeroDivisionError: If a is 0 mod p
    """
    a %= P
    if a == 0:
        raise ZeroDivisionError("0 has no inverse in the field")
    return pow(a, P - 2, P)


def require_field_element(value: int, label: str = "value") -> int:
    """
    Check that value is already a canonical field element.

    Raises:
        TypeError: If value is not an int
        InvalidKeyRange: If value is negative or >= p
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{label} must be int, got {type(value)}")
    if value < 0 or value >= P:
        raise InvalidKeyRange(f"{label} must be in [0, SNARK_FIELD_SIZE)")
    return value


def encode_field_element(value: int) -> bytes:
    """
    Serialize a field element as a fixed-width big-endian buffer.

    Example:
        >>> encode_field_element(1).hex()[-2:]
        '01'
    """
    require_field_element(value)
    return value.to_bytes(FIELD_ELEMENT_BYTES, byteorder="big")


def decode_field_element(data: bytes) -> int:
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("field element encoding must be bytes")
    if len(data) != FIELD_ELEMENT_BYTES:
        raise ValueError(
            f"field element encoding must be {FIELD_ELEMENT_BYTES} bytes, "
            f"got {len(data)}"
        )
    return require_field_element(int.from_bytes(data, byteorder="big"))


# ============================================================================
# CURVE POINTS
# ============================================================================


def is_on_curve(x: int, y: int) -> bool:
    """Check a*x^2 + y^2 == 1 + d*x^2*y^2 (mod p)."""
    x2 = x * x % P
    y2 = y * y % P
    lhs = (CURVE_A * x2 + y2) % P
    rhs = (1 + CURVE_D * x2 * y2) % P
    return lhs == rhs


@dataclass(frozen=True)
class Point:
    """
    Affine BabyJubJub point.

    Construction validates that the coordinates are canonical field
    elements and satisfy the curve equation.
    """

    x: int
    y: int

    def __post_init__(self):
        require_field_element(self.x, "x")
        require_field_element(self.y, "y")
        if not is_on_curve(self.x, self.y):
            raise InvalidPoint("point is not on the curve")

    def to_bytes(self) -> bytes:
        return encode_field_element(self.x) + encode_field_element(self.y)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Point":
        if len(data) != POINT_SIZE_BYTES:
            raise ValueError(
                f"point encoding must be {POINT_SIZE_BYTES} bytes, got {len(data)}"
            )
        half = POINT_SIZE_BYTES // 2
        return cls(decode_field_element(data[:half]), decode_field_element(data[half:]))

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def is_identity(self) -> bool:
        return self.x == 0 and self.y == 1


IDENTITY = Point(0, 1)


def point_add(p1: Point, p2: Point) -> Point:
    """
    Twisted Edwards addition (complete for BabyJubJub).

    x3 = (x1*y2 + y1*x2) / (1 + d*x1*x2*y1*y2)
    y3 = (y1*y2 - a*x1*x2) / (1 - d*x1*x2*y1*y2)
    """
    x1, y1 = p1.x, p1.y
    x2, y2 = p2.x, p2.y
    beta = x1 * y2 % P
    gamma = y1 * x2 % P
    delta = (y1 - CURVE_A * x1) * (x2 + y2) % P
    tau = beta * gamma % P
    dtau = CURVE_D * tau % P

    x3 = (beta + gamma) * field_inv(1 + dtau) % P
    y3 = (delta + CURVE_A * beta - gamma) * field_inv(1 - dtau) % P
    return Point(x3, y3)


def scalar_mul(point: Point, scalar: int) -> Point:
    """
    Multiply a point by a non-negative scalar (double-and-add).

    Raises:
        ValueError: If scalar is negative
    """
    if not isinstance(scalar, int) or isinstance(scalar, bool):
        raise TypeError(f"scalar must be int, got {type(scalar)}")
    if scalar < 0:
        raise ValueError("scalar must be non-negative")

    result = IDENTITY
    addend = point
    while scalar:
        if scalar & 1:
            result = point_add(result, addend)
        addend = point_add(addend, addend)
        scalar >>= 1
    return result


def in_subgroup(point: Point) -> bool:
    return scalar_mul(point, SUBGROUP_ORDER).is_identity


# ============================================================================
# CURVE SETUP
# ============================================================================


@dataclass(frozen=True)
class CurveParameters:
    """
    Curve parameters used for key derivation and ECDH.

    Attributes:
        curve: Curve name
        field_size: Prime modulus of the base field
        base: Generator of the prime-order subgroup (Base8)
        order: Subgroup order
    """

    curve: str
    field_size: int
    base: Point
    order: int

    def __post_init__(self):
        if self.field_size != SNARK_FIELD_SIZE:
            raise ValueError(
                f"Field size mismatch: expected {SNARK_FIELD_SIZE}, "
                f"got {self.field_size}"
            )


def setup_curve() -> CurveParameters:
    """Build the BabyJubJub parameters (Base8 generator)."""
    return CurveParameters(
        curve=CURVE_NAME,
        field_size=SNARK_FIELD_SIZE,
        base=Point(*BASE8),
        order=SUBGROUP_ORDER,
    )
