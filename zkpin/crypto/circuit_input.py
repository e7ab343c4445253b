"""Helpers for building membership-circuit inputs from a signer's keys."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .cipher import Ciphertext, encrypt
from .context import CryptoContext
from .ecdh import derive_shared_key
from .keys import Keypair, PublicKey, format_private_key
from .merkle import build_anonymity_tree, hash_leaf, path_indices


@dataclass(frozen=True)
class CircuitInput:
    """
    Structured payload handed to the external prover.

    Attributes:
        pool_public_key: Operator public key of the pool
        signer_public_key: Signer public key (private witness)
        path_elements: Merkle siblings from leaf to root
        path_indices: 1 where the current node is the right child
        root: Merkle root of the anonymity set
        signer_private_key_hash: Clamped signer scalar (private witness)
        ciphertext: Encrypted ballot
        pool_id: Pool identifier bound into the proof
    """

    pool_public_key: PublicKey
    signer_public_key: PublicKey
    path_elements: List[int]
    path_indices: List[int]
    root: int
    signer_private_key_hash: int
    ciphertext: Ciphertext
    pool_id: int

    def __post_init__(self):
        if len(self.path_elements) != len(self.path_indices):
            raise ValueError("path_elements and path_indices must have equal length")
        if any(bit not in (0, 1) for bit in self.path_indices):
            raise ValueError("path_indices must be 0 or 1")

    @property
    def depth(self) -> int:
        return len(self.path_elements)

    def __repr__(self) -> str:
        return (
            f"CircuitInput(pool_id={self.pool_id}, depth={self.depth}, "
            f"root={self.root})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Render snarkjs input JSON: every signal as a decimal string."""
        return {
            "poolPubKey": [str(self.pool_public_key.x), str(self.pool_public_key.y)],
            "signerPubkey": [
                str(self.signer_public_key.x),
                str(self.signer_public_key.y),
            ],
            "signerPrivKeyHash": str(self.signer_private_key_hash),
            "ciphertext": [str(self.ciphertext.iv)]
            + [str(e) for e in self.ciphertext.data],
            "pathElements": [str(e) for e in self.path_elements],
            "pathIndices": [str(i) for i in self.path_indices],
            "root": str(self.root),
            "poolId": str(self.pool_id),
        }


def build_circuit_input(
    ctx: CryptoContext,
    operator_public_key: PublicKey,
    signer: Keypair,
    anonymity_set: Sequence[PublicKey],
    pool_id: int,
    ciphertext: Ciphertext,
    *,
    depth: Optional[int] = None,
) -> CircuitInput:
    """
    Assemble the circuit input for a membership proof.

    Deterministic: the same arguments always yield the same root and path.

    Raises:
        NotInAnonymitySet: If the signer's public key is not in the set
        ValueError: If the set is empty or does not fit in depth
    """
    if not isinstance(pool_id, int) or pool_id < 0:
        raise ValueError("pool_id must be a non-negative int")

    tree = build_anonymity_tree(ctx, anonymity_set, depth)
    index = tree.index_of(hash_leaf(ctx, signer.public_key))
    path = tree.path(index)

    return CircuitInput(
        pool_public_key=operator_public_key,
        signer_public_key=signer.public_key,
        path_elements=[sibling for sibling, _ in path],
        path_indices=path_indices(path),
        root=tree.root,
        signer_private_key_hash=format_private_key(signer.private_key),
        ciphertext=ciphertext,
        pool_id=pool_id,
    )


def generate_circuit_input(
    ctx: CryptoContext,
    operator_public_key: PublicKey,
    signer: Keypair,
    anonymity_set: Sequence[PublicKey],
    pool_id: int,
    plaintext: Sequence[int],
    *,
    depth: Optional[int] = None,
) -> CircuitInput:
    """
    Encrypt plaintext for the operator and build the circuit input.

    ECDH(signer, operator) -> encrypt -> build_circuit_input
    """
    shared_key = derive_shared_key(signer.private_key, operator_public_key)
    ciphertext = encrypt(ctx, plaintext, shared_key)
    return build_circuit_input(
        ctx,
        operator_public_key,
        signer,
        anonymity_set,
        pool_id,
        ciphertext,
        depth=depth,
    )
