"""
Commitment pool state machine.

Pure transitions over CommitmentPool records. Stores apply them atomically;
nothing here touches I/O.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Sequence, Tuple

from ..crypto.cipher import Ciphertext, decrypt, verify_plaintext
from ..crypto.context import CryptoContext
from ..crypto.ecdh import SharedKey, derive_shared_key
from ..crypto.exceptions import DecryptionError
from ..crypto.keys import PrivateKey, PublicKey
from .constants import MAX_TITLE_LENGTH, REASON_CLOSED, REASON_DUPLICATE
from .errors import InvalidPoolConfiguration, ThresholdNotReached
from .models import CommitmentPool, PoolState, Signature, SubmitOutcome

logger = logging.getLogger(__name__)


def new_pool(
    pool_id: int,
    title: str,
    threshold: int,
    operator_public_key: PublicKey,
    description: str = "",
) -> CommitmentPool:
    """
    Create a pool record in the COLLECTING state.

    Raises:
        InvalidPoolConfiguration: If threshold < 1 or the title is unusable
    """
    if not isinstance(threshold, int) or isinstance(threshold, bool) or threshold < 1:
        raise InvalidPoolConfiguration("threshold must be an int >= 1")
    if not title or len(title) > MAX_TITLE_LENGTH:
        raise InvalidPoolConfiguration(
            f"title must be 1..{MAX_TITLE_LENGTH} characters"
        )
    if not isinstance(operator_public_key, PublicKey):
        raise InvalidPoolConfiguration("operator_public_key must be a PublicKey")
    return CommitmentPool(
        id=pool_id,
        title=title,
        threshold=threshold,
        operator_public_key=operator_public_key,
        description=description,
    )


def apply_submission(
    pool: CommitmentPool, signature: Signature
) -> Tuple[CommitmentPool, SubmitOutcome]:
    """
    Append a signature unless its ciphertext is already present.

    The threshold is re-evaluated against the new count on every insert;
    the COLLECTING -> THRESHOLD_REACHED transition fires at most once.

    Returns:
        (new_pool, outcome); new_pool is pool itself when nothing changed
    """
    if pool.state is PoolState.REVEALED:
        return pool, SubmitOutcome(
            accepted=False,
            signature_count=pool.signature_count,
            state=pool.state,
            reason=REASON_CLOSED,
        )

    if pool.has_ciphertext(signature.ciphertext):
        logger.debug("pool %s: duplicate ciphertext rejected", pool.id)
        return pool, SubmitOutcome(
            accepted=False,
            signature_count=pool.signature_count,
            state=pool.state,
            reason=REASON_DUPLICATE,
        )

    signatures = pool.signatures + (signature,)
    state = pool.state
    transitioned = False
    if state is PoolState.COLLECTING and len(signatures) >= pool.threshold:
        state = PoolState.THRESHOLD_REACHED
        transitioned = True
        logger.info(
            "pool %s: threshold %d reached", pool.id, pool.threshold
        )

    updated = dataclasses.replace(pool, signatures=signatures, state=state)
    return updated, SubmitOutcome(
        accepted=True,
        signature_count=len(signatures),
        state=state,
        transitioned=transitioned,
    )


def check_reveal_allowed(pool: CommitmentPool) -> None:
    """
    Raises:
        ThresholdNotReached: If the pool is still collecting
    """
    if pool.state is PoolState.COLLECTING:
        raise ThresholdNotReached(
            f"pool {pool.id} has {pool.signature_count}/{pool.threshold} signatures"
        )


def apply_reveal(pool: CommitmentPool) -> CommitmentPool:
    check_reveal_allowed(pool)
    if pool.state is PoolState.REVEALED:
        return pool
    logger.info("pool %s: revealed %d signatures", pool.id, pool.signature_count)
    return dataclasses.replace(pool, state=PoolState.REVEALED)


def _candidate_keys(
    operator_private_key: PrivateKey, anonymity_set: Sequence[PublicKey]
) -> List[SharedKey]:
    seen = set()
    keys = []
    for member in anonymity_set:
        if member in seen:
            continue
        seen.add(member)
        keys.append(derive_shared_key(operator_private_key, member))
    return keys


def open_ciphertext(
    ctx: CryptoContext, ciphertext: Ciphertext, candidates: Sequence[SharedKey]
) -> List[int]:
    """
    Decrypt with the first candidate whose plaintext hashes to the iv.

    Raises:
        DecryptionError: If no candidate key opens the ciphertext
    """
    for shared_key in candidates:
        plaintext = decrypt(ctx, ciphertext, shared_key)
        if verify_plaintext(ctx, plaintext, ciphertext):
            return plaintext
    raise DecryptionError("no anonymity set member opens the ciphertext")


def open_signatures(
    ctx: CryptoContext,
    pool: CommitmentPool,
    operator_private_key: PrivateKey,
    anonymity_set: Sequence[PublicKey],
) -> List[List[int]]:
    """
    Decrypt every signature in submission order.

    The signer of each ciphertext is recovered by trial decryption against
    the anonymity set; the iv commits to the plaintext, so only the signer's
    ECDH key yields a plaintext that hashes back to it.

    Raises:
        ThresholdNotReached: If the pool is still collecting
        DecryptionError: If a ciphertext matches no member
    """
    check_reveal_allowed(pool)
    candidates = _candidate_keys(operator_private_key, anonymity_set)
    return [open_ciphertext(ctx, sig.ciphertext, candidates) for sig in pool.signatures]
