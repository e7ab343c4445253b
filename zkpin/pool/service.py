"""Commitment pool service: submission, pool views and operator reveal."""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

import trio

from ..crypto.cipher import Ciphertext
from ..crypto.circuit_input import CircuitInput, generate_circuit_input
from ..crypto.context import CryptoContext
from ..crypto.keys import Keypair, PrivateKey, PublicKey, derive_public_key
from ..settings import Settings, get_settings
from .constants import PIN_NAME, REASON_CLOSED
from .errors import (
    OperatorKeyMismatch,
    PersistenceFailure,
    PoolError,
    ProofGenerationFailure,
)
from .models import (
    CommitmentPool,
    PoolState,
    PoolView,
    ProofResult,
    Signature,
    SubmitOutcome,
)
from .pinning import PinningService
from .prover import Prover
from .state import (
    apply_reveal,
    apply_submission,
    check_reveal_allowed,
    open_signatures,
)
from .store import PoolStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _reveal_if_unchanged(snapshot: CommitmentPool):
    """Commit REVEALED only if no signature arrived since the snapshot."""

    def transition(pool: CommitmentPool):
        if pool.signature_count != snapshot.signature_count:
            return pool, False
        return apply_reveal(pool), True

    return transition


class CommitmentPoolService:
    """
    Orchestrates the pool lifecycle over external collaborators.

    Example:
        >>> service = CommitmentPoolService(ctx, InMemoryPoolStore(),
        ...                                 InMemoryPinningService(), prover)
        >>> pool = await service.create_pool("Q3 vote", 3, operator.public_key)
        >>> outcome = await service.sign(pool.id, signer, [1, 0])
    """

    def __init__(
        self,
        ctx: CryptoContext,
        store: PoolStore,
        pinning: PinningService,
        prover: Optional[Prover] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._ctx = ctx
        self._store = store
        self._pinning = pinning
        self._prover = prover
        self._settings = settings if settings is not None else get_settings()

    async def _persist(self, label: str, fn: Callable[..., Awaitable[T]], *args) -> T:
        try:
            with trio.fail_after(self._settings.persistence_timeout):
                return await fn(*args)
        except trio.TooSlowError as exc:
            logger.warning("%s timed out", label)
            raise PersistenceFailure(f"{label} timed out") from exc
        except PoolError:
            raise
        except Exception as exc:
            logger.warning("%s failed: %s", label, type(exc).__name__)
            raise PersistenceFailure(f"{label} failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    async def create_pool(
        self,
        title: str,
        threshold: int,
        operator_public_key: PublicKey,
        description: str = "",
    ) -> CommitmentPool:
        pool = await self._persist(
            "create pool",
            self._store.create_pool,
            title,
            threshold,
            operator_public_key,
            description,
        )
        logger.info("pool %s created with threshold %d", pool.id, pool.threshold)
        return pool

    async def register_public_key(self, public_key: PublicKey) -> None:
        await self._persist(
            "register public key", self._store.register_public_key, public_key
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_anonymity_set(self) -> List[PublicKey]:
        return await self._persist("list public keys", self._store.list_public_keys)

    async def get_pool(self, pool_id: int) -> PoolView:
        pool = await self._persist("get pool", self._store.get_pool, pool_id)
        return PoolView.from_pool(pool)

    async def authenticate_operator(
        self, pool_id: int, private_key: PrivateKey
    ) -> bool:
        """True when private_key derives the pool's operator public key."""
        pool = await self._persist("get pool", self._store.get_pool, pool_id)
        return derive_public_key(self._ctx, private_key) == pool.operator_public_key

    # ------------------------------------------------------------------
    # Signer side
    # ------------------------------------------------------------------

    async def submit_signature(
        self,
        pool_id: int,
        proof: Dict[str, Any],
        public_signals: List[str],
        ciphertext: Ciphertext,
    ) -> SubmitOutcome:
        """
        Pin the proof artifact and record the signature.

        The artifact is pinned before the record is written; a pin failure
        aborts with PersistenceFailure and nothing is recorded. A duplicate
        ciphertext returns accepted=False, reason="duplicate".

        A pool that is already revealed returns reason="closed" without
        pinning anything.

        Raises:
            TypeError: If ciphertext is not a Ciphertext
            PoolNotFound: If the pool does not exist
            PersistenceFailure: If pinning or the store fails or times out
        """
        if not isinstance(ciphertext, Ciphertext):
            raise TypeError(f"expected Ciphertext, got {type(ciphertext)}")

        pool = await self._persist("get pool", self._store.get_pool, pool_id)
        if pool.state is PoolState.REVEALED:
            return SubmitOutcome(
                accepted=False,
                signature_count=pool.signature_count,
                state=pool.state,
                reason=REASON_CLOSED,
            )

        cid = await self._persist(
            "pin proof",
            self._pinning.pin,
            {"proof": proof, "publicSignals": public_signals},
            {"name": PIN_NAME, "commitmentPoolId": str(pool_id)},
        )

        signature = Signature(
            proof=proof,
            public_signals=list(public_signals),
            ciphertext=ciphertext,
            pin_cid=cid,
        )
        outcome = await self._persist(
            "record signature",
            self._store.atomic_update,
            pool_id,
            lambda pool: apply_submission(pool, signature),
        )
        if not outcome.accepted:
            logger.info("pool %s: signature not accepted (%s)", pool_id, outcome.reason)
        return outcome

    async def prove(self, circuit_input: CircuitInput) -> ProofResult:
        """
        Run the external prover under the prover timeout.

        Raises:
            ProofGenerationFailure: If no prover is configured, or it fails
                or times out
        """
        if self._prover is None:
            raise ProofGenerationFailure("no prover configured")
        try:
            with trio.fail_after(self._settings.prover_timeout):
                return await self._prover.prove(circuit_input)
        except trio.TooSlowError as exc:
            logger.warning("prover timed out for pool %s", circuit_input.pool_id)
            raise ProofGenerationFailure("prover timed out") from exc
        except ProofGenerationFailure:
            raise
        except Exception as exc:
            logger.warning("prover failed: %s", type(exc).__name__)
            raise ProofGenerationFailure(f"prover failed: {exc}") from exc

    async def sign(
        self,
        pool_id: int,
        signer: Keypair,
        plaintext: Sequence[int],
        *,
        depth: Optional[int] = None,
    ) -> SubmitOutcome:
        """
        Full signer flow: encrypt for the operator, prove membership, submit.

        Raises:
            NotInAnonymitySet: If the signer's key is not registered
            ProofGenerationFailure: If proving fails
            PersistenceFailure: If pinning or recording fails
        """
        pool = await self._persist("get pool", self._store.get_pool, pool_id)
        anonymity_set = await self.get_anonymity_set()
        if depth is None:
            depth = self._settings.merkle_depth

        circuit_input = await trio.to_thread.run_sync(
            functools.partial(
                generate_circuit_input,
                self._ctx,
                pool.operator_public_key,
                signer,
                anonymity_set,
                pool.id,
                plaintext,
                depth=depth,
            )
        )
        result = await self.prove(circuit_input)
        return await self.submit_signature(
            pool.id, result.proof, result.public_signals, circuit_input.ciphertext
        )

    # ------------------------------------------------------------------
    # Operator side
    # ------------------------------------------------------------------

    async def reveal(
        self, pool_id: int, operator_private_key: PrivateKey
    ) -> List[List[int]]:
        """
        Decrypt every signature of a pool that reached its threshold.

        A snapshot of the pool is decrypted first; REVEALED is committed
        only if no signature was added meanwhile, otherwise the new snapshot
        is decrypted again. The output covers exactly the signatures
        recorded at commit time and later submissions are refused with
        reason="closed". A failed decryption leaves the pool unchanged.

        Raises:
            OperatorKeyMismatch: If the key is not the pool's operator key
            ThresholdNotReached: If the pool is still collecting
            DecryptionError: If a ciphertext opens under no member's key
        """
        if not await self.authenticate_operator(pool_id, operator_private_key):
            raise OperatorKeyMismatch(f"key does not operate pool {pool_id}")

        anonymity_set = await self.get_anonymity_set()
        while True:
            snapshot = await self._persist("get pool", self._store.get_pool, pool_id)
            check_reveal_allowed(snapshot)
            plaintexts = await trio.to_thread.run_sync(
                open_signatures,
                self._ctx,
                snapshot,
                operator_private_key,
                anonymity_set,
            )
            committed = await self._persist(
                "reveal pool",
                self._store.atomic_update,
                pool_id,
                _reveal_if_unchanged(snapshot),
            )
            if committed:
                return plaintexts
            logger.debug("pool %s: signatures added during reveal, retrying", pool_id)
