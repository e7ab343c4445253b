"""
Merkle tree utilities for anonymity set membership.

Nodes are BN254 field elements hashed with MiMC7 so the circuit can
recompute the root. Trees have a fixed depth; empty slots hold the zero
leaf, and their subtrees are represented by precomputed zero hashes instead
of being materialised.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .config import MAX_MERKLE_DEPTH, MERKLE_ZERO_LEAF
from .context import CryptoContext
from .exceptions import NotInAnonymitySet
from .keys import PublicKey

AuthPath = List[Tuple[int, bool]]


def hash_leaf(ctx: CryptoContext, public_key: PublicKey) -> int:
    """
    Hash a public key into a Merkle leaf.

    Example:
        leaf = hash_leaf(ctx, keypair.public_key)
    """
    return ctx.mimc.multi_hash([public_key.x, public_key.y], 0)


def hash_node(ctx: CryptoContext, left: int, right: int) -> int:
    """
    Hash two child nodes.

    Note:
        Uses fixed left||right ordering (no sorting).
    """
    return ctx.mimc.multi_hash([left, right], 0)


def required_depth(leaf_count: int) -> int:
    """Smallest depth >= 1 that fits leaf_count leaves."""
    if leaf_count < 1:
        raise ValueError("Cannot build tree with zero leaves")
    return max(1, math.ceil(math.log2(leaf_count)))


def zero_hashes(ctx: CryptoContext, depth: int) -> List[int]:
    """zeros[i] is the root of an empty subtree of height i."""
    zeros = [MERKLE_ZERO_LEAF]
    for _ in range(depth):
        zeros.append(hash_node(ctx, zeros[-1], zeros[-1]))
    return zeros


def build_tree(
    ctx: CryptoContext, leaves: Sequence[int], depth: Optional[int] = None
) -> Tuple[int, Dict[int, AuthPath]]:
    """
    Build a fixed-depth Merkle tree and generate authentication paths.

    Args:
        ctx: Crypto context (MiMC7 constants)
        leaves: Leaf hashes (field elements)
        depth: Tree depth; defaults to the smallest depth that fits

    Returns:
        (root, auth_paths)
        - root: Merkle root
        - auth_paths: Dict mapping leaf_index -> [(sibling, is_left), ...],
          each path exactly `depth` entries long

    Raises:
        ValueError: If leaves is empty or does not fit in 2**depth slots
    """
    tree = MerkleTree.build(ctx, leaves, depth)
    return tree.root, {i: tree.path(i) for i in range(len(leaves))}


def verify_path(ctx: CryptoContext, leaf: int, path: AuthPath, root: int) -> bool:
    """
    Verify a Merkle authentication path.

    Example:
        if verify_path(ctx, my_leaf, my_path, expected_root):
            print("Leaf is in tree")
    """
    current = leaf

    for sibling, is_left in path:
        if is_left:
            # Sibling is on left, current on right
            current = hash_node(ctx, sibling, current)
        else:
            # Sibling is on right, current on left
            current = hash_node(ctx, current, sibling)

    return current == root


@dataclass(frozen=True)
class MerkleTree:
    """
    Fixed-depth Merkle tree.

    Attributes:
        depth: Number of levels above the leaves
        levels: levels[0] are the leaves, levels[depth] is [root]; odd
            levels are not padded, missing siblings come from zeros
        zeros: Empty-subtree hashes per level
    """

    depth: int
    levels: Tuple[Tuple[int, ...], ...]
    zeros: Tuple[int, ...]

    @classmethod
    def build(
        cls, ctx: CryptoContext, leaves: Sequence[int], depth: Optional[int] = None
    ) -> "MerkleTree":
        leaves = list(leaves)
        minimum = required_depth(len(leaves))
        if depth is None:
            depth = minimum
        if depth < 1 or depth > MAX_MERKLE_DEPTH:
            raise ValueError(f"depth must be in [1, {MAX_MERKLE_DEPTH}]")
        if len(leaves) > 2**depth:
            raise ValueError(
                f"{len(leaves)} leaves do not fit in a tree of depth {depth}"
            )

        zeros = zero_hashes(ctx, depth)
        levels = [tuple(leaves)]
        current = leaves
        for level in range(depth):
            if len(current) % 2 == 1:
                current = current + [zeros[level]]
            current = [
                hash_node(ctx, current[i], current[i + 1])
                for i in range(0, len(current), 2)
            ]
            levels.append(tuple(current))

        return cls(depth=depth, levels=tuple(levels), zeros=tuple(zeros))

    @property
    def root(self) -> int:
        return self.levels[-1][0]

    @property
    def leaves(self) -> Tuple[int, ...]:
        return self.levels[0]

    def path(self, index: int) -> AuthPath:
        """Authentication path for the leaf at index."""
        if index < 0 or index >= len(self.leaves):
            raise IndexError(f"leaf index {index} out of range")

        path: AuthPath = []
        for level in range(self.depth):
            nodes = self.levels[level]
            sibling_index = index ^ 1
            if sibling_index < len(nodes):
                sibling = nodes[sibling_index]
            else:
                sibling = self.zeros[level]
            path.append((sibling, index & 1 == 1))
            index >>= 1
        return path

    def index_of(self, leaf: int) -> int:
        """
        First index holding leaf.

        Raises:
            NotInAnonymitySet: If no leaf matches
        """
        try:
            return self.leaves.index(leaf)
        except ValueError:
            raise NotInAnonymitySet("public key has no matching leaf") from None


def build_anonymity_tree(
    ctx: CryptoContext, anonymity_set: Sequence[PublicKey], depth: Optional[int] = None
) -> MerkleTree:
    """Build the tree over an ordered anonymity set of public keys."""
    return MerkleTree.build(ctx, [hash_leaf(ctx, key) for key in anonymity_set], depth)


def path_indices(path: AuthPath) -> List[int]:
    """Circuit path indices: 1 where the current node is the right child."""
    return [1 if is_left else 0 for _, is_left in path]
