"""
⚠️ DRAFT — requires crypto review before production use

Custom exceptions for the zkpin cryptographic layer.

Cryptographic invariant violations are unrecoverable locally: callers abort
the operation instead of retrying.
"""


class ZkPinCryptoError(Exception):
    """Base exception for zkpin cryptographic errors."""

    pass


class ConfigurationError(ZkPinCryptoError):
    """Configuration error."""

    pass


class CryptographicError(ZkPinCryptoError):
    """Cryptographic operation error."""

    pass


class InvalidKeyRange(CryptographicError, ValueError):
    """Key or field element is outside [0, SNARK_FIELD_SIZE)."""

    pass


class InvalidPoint(CryptographicError, ValueError):
    """Coordinates do not describe a point on the curve."""

    pass


class DecryptionError(CryptographicError):
    """No candidate key opens the ciphertext."""

    pass


class NotInAnonymitySet(ZkPinCryptoError, LookupError):
    """Signer public key has no matching Merkle leaf."""

    pass
