"""
⚠️ DRAFT — requires crypto review before production use

MiMC7 stream cipher keyed by an ECDH shared key.

    iv        = multi_hash(plaintext, 0)
    data[i]   = plaintext[i] + hash(shared_key, iv + i)    (mod p)
    plain[i]  = data[i]      - hash(shared_key, iv + i)    (mod p)

Every addition and subtraction is reduced modulo SNARK_FIELD_SIZE, so
ciphertext elements are canonical field elements and survive any consumer
that reduces them again (the circuit does).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import cbor2

from .config import CIPHERTEXT_VERSION
from .context import CryptoContext
from .ecdh import SharedKey
from .exceptions import CryptographicError
from .field import field_add, field_sub, require_field_element

Plaintext = List[int]


@dataclass(frozen=True)
class Ciphertext:
    """
    Encrypted plaintext.

    Attributes:
        iv: Initialisation vector derived from the plaintext
        data: One encrypted field element per plaintext element

    Equality is by value, which is what duplicate detection in a pool
    compares.
    """

    iv: int
    data: Tuple[int, ...]

    def __post_init__(self):
        require_field_element(self.iv, "iv")
        if not isinstance(self.data, tuple):
            object.__setattr__(self, "data", tuple(self.data))
        if not self.data:
            raise ValueError("ciphertext data cannot be empty")
        for idx, element in enumerate(self.data):
            require_field_element(element, f"data[{idx}]")

    def __len__(self) -> int:
        return len(self.data)

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-safe representation (decimal strings, as snarkjs expects).

        Example:
            >>> Ciphertext(iv=1, data=(2, 3)).to_dict()
            {'iv': '1', 'data': ['2', '3']}
        """
        return {"iv": str(self.iv), "data": [str(e) for e in self.data]}

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "Ciphertext":
        if not isinstance(obj, dict) or "iv" not in obj or "data" not in obj:
            raise ValueError("Invalid ciphertext format: missing required fields")
        try:
            iv = int(obj["iv"])
            data = tuple(int(e) for e in obj["data"])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid ciphertext format: {exc}") from exc
        return cls(iv=iv, data=data)

    def serialize(self) -> bytes:
        """Canonical CBOR encoding with a version field."""
        try:
            return cbor2.dumps(
                {"v": CIPHERTEXT_VERSION, "iv": self.iv, "d": list(self.data)},
                canonical=True,
            )
        except Exception as e:
            raise CryptographicError(f"Failed to serialize ciphertext: {e}")

    @classmethod
    def deserialize(cls, data: bytes) -> "Ciphertext":
        try:
            obj = cbor2.loads(data)
        except Exception as e:
            raise CryptographicError(f"Failed to deserialize ciphertext: {e}")

        if not isinstance(obj, dict) or "iv" not in obj or "d" not in obj:
            raise ValueError("Invalid ciphertext format: missing required fields")

        version = obj.get("v", CIPHERTEXT_VERSION)
        if version != CIPHERTEXT_VERSION:
            raise ValueError(
                f"Unsupported ciphertext version: {version} "
                f"(expected {CIPHERTEXT_VERSION})"
            )
        return cls(iv=obj["iv"], data=tuple(obj["d"]))


def _check_plaintext(plaintext: Sequence[int]) -> List[int]:
    values = list(plaintext)
    if not values:
        raise ValueError("plaintext cannot be empty")
    for idx, value in enumerate(values):
        require_field_element(value, f"plaintext[{idx}]")
    return values


def _keystream(ctx: CryptoContext, shared_key: SharedKey, iv: int, length: int):
    for i in range(length):
        yield ctx.mimc.hash(shared_key.value, field_add(iv, i))


def encrypt(
    ctx: CryptoContext, plaintext: Sequence[int], shared_key: SharedKey
) -> Ciphertext:
    """
    Encrypt a sequence of field elements.

    Raises:
        ValueError: If the plaintext is empty
        InvalidKeyRange: If an element is outside the field
    """
    values = _check_plaintext(plaintext)
    iv = ctx.mimc.multi_hash(values, 0)
    data = tuple(
        field_add(value, pad)
        for value, pad in zip(values, _keystream(ctx, shared_key, iv, len(values)))
    )
    return Ciphertext(iv=iv, data=data)


def decrypt(
    ctx: CryptoContext, ciphertext: Ciphertext, shared_key: SharedKey
) -> Plaintext:
    """Decrypt a ciphertext. A wrong key yields garbage, not an error."""
    return [
        field_sub(element, pad)
        for element, pad in zip(
            ciphertext.data, _keystream(ctx, shared_key, ciphertext.iv, len(ciphertext))
        )
    ]


def verify_plaintext(
    ctx: CryptoContext, plaintext: Sequence[int], ciphertext: Ciphertext
) -> bool:
    """True when plaintext hashes to the ciphertext's iv."""
    if len(plaintext) != len(ciphertext):
        return False
    return ctx.mimc.multi_hash(plaintext, 0) == ciphertext.iv
