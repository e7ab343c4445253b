"""Commitment pool: state machine, collaborators and service."""

from .errors import (
    CollaboratorError,
    InvalidPoolConfiguration,
    OperatorKeyMismatch,
    PersistenceFailure,
    PoolError,
    PoolNotFound,
    ProofGenerationFailure,
    ThresholdNotReached,
)
from .models import (
    CommitmentPool,
    PoolState,
    PoolView,
    ProofResult,
    Signature,
    SubmitOutcome,
)
from .pinning import InMemoryPinningService, LocalPinningService, PinningService
from .prover import MockProver, Prover, SnarkjsProver
from .service import CommitmentPoolService
from .store import InMemoryPoolStore, PoolStore

__all__ = [
    "CollaboratorError",
    "CommitmentPool",
    "CommitmentPoolService",
    "InMemoryPinningService",
    "InMemoryPoolStore",
    "InvalidPoolConfiguration",
    "LocalPinningService",
    "MockProver",
    "OperatorKeyMismatch",
    "PersistenceFailure",
    "PinningService",
    "PoolError",
    "PoolNotFound",
    "PoolState",
    "PoolStore",
    "PoolView",
    "ProofGenerationFailure",
    "ProofResult",
    "Prover",
    "Signature",
    "SnarkjsProver",
    "SubmitOutcome",
    "ThresholdNotReached",
]
