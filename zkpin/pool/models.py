"""Commitment pool records and outcomes."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..crypto.cipher import Ciphertext
from ..crypto.keys import PublicKey


class PoolState(Enum):
    """
    Pool lifecycle.

    COLLECTING -> THRESHOLD_REACHED -> REVEALED (terminal)
    """

    COLLECTING = "collecting"
    THRESHOLD_REACHED = "threshold_reached"
    REVEALED = "revealed"


@dataclass(frozen=True)
class ProofResult:
    """Opaque prover output, stored verbatim."""

    proof: Dict[str, Any]
    public_signals: List[str]


@dataclass(frozen=True)
class Signature:
    proof: Dict[str, Any]
    public_signals: List[str]
    ciphertext: Ciphertext
    pin_cid: Optional[str] = None
    submitted_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class CommitmentPool:
    """
    Pool record as held by the store.

    Records are immutable; transitions return a new record so a store can
    swap it in one step.
    """

    id: int
    title: str
    threshold: int
    operator_public_key: PublicKey
    description: str = ""
    created_at: float = field(default_factory=time.time)
    state: PoolState = PoolState.COLLECTING
    signatures: Tuple[Signature, ...] = ()

    @property
    def signature_count(self) -> int:
        return len(self.signatures)

    @property
    def threshold_reached(self) -> bool:
        return self.signature_count >= self.threshold

    def has_ciphertext(self, ciphertext: Ciphertext) -> bool:
        return any(sig.ciphertext == ciphertext for sig in self.signatures)


@dataclass(frozen=True)
class SubmitOutcome:
    """
    Result of submit_signature.

    A duplicate is a normal outcome: accepted=False, reason="duplicate".
    """

    accepted: bool
    signature_count: int
    state: PoolState
    reason: Optional[str] = None
    transitioned: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"accepted": self.accepted}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class PoolView:
    """
    Public pool view.

    Ciphertexts are None until the threshold is reached; the count is
    always visible. Proofs and public signals are not exposed.
    """

    id: int
    title: str
    description: str
    threshold: int
    operator_public_key: PublicKey
    created_at: float
    state: PoolState
    signatures: List[Optional[Ciphertext]]

    @classmethod
    def from_pool(cls, pool: CommitmentPool) -> "PoolView":
        reveal_ciphertexts = pool.state is not PoolState.COLLECTING
        return cls(
            id=pool.id,
            title=pool.title,
            description=pool.description,
            threshold=pool.threshold,
            operator_public_key=pool.operator_public_key,
            created_at=pool.created_at,
            state=pool.state,
            signatures=[
                sig.ciphertext if reveal_ciphertexts else None
                for sig in pool.signatures
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "threshold": self.threshold,
            "operatorPublicKey": self.operator_public_key.to_hex(),
            "createdAt": self.created_at,
            "state": self.state.value,
            "signatures": [
                {"ciphertext": c.to_dict() if c is not None else None}
                for c in self.signatures
            ],
        }
