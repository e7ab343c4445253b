"""Commitment pool error types."""


class PoolError(Exception):
    """Base error for commitment pool issues."""

    retryable = False


class PoolNotFound(PoolError, LookupError):
    """Raised when a pool id has no record."""


class InvalidPoolConfiguration(PoolError, ValueError):
    """Raised when a pool is created with invalid parameters."""


class ThresholdNotReached(PoolError):
    """Raised when reveal is attempted before the threshold is met."""

    retryable = True


class CollaboratorError(PoolError):
    """External service failure; the caller may retry."""

    retryable = True


class ProofGenerationFailure(CollaboratorError):
    """Raised when the external prover fails or times out."""


class PersistenceFailure(CollaboratorError):
    """Raised when the pool store or pinning service fails or times out."""


class OperatorKeyMismatch(PoolError):
    """Raised when a private key does not match the pool's operator key."""
