"""Cryptographic layer: keys, ECDH, MiMC7 cipher and circuit inputs."""

from .cipher import Ciphertext, decrypt, encrypt, verify_plaintext
from .circuit_input import CircuitInput, build_circuit_input, generate_circuit_input
from .context import CryptoContext
from .ecdh import SharedKey, derive_shared_key
from .exceptions import (
    ConfigurationError,
    CryptographicError,
    DecryptionError,
    InvalidKeyRange,
    InvalidPoint,
    NotInAnonymitySet,
    ZkPinCryptoError,
)
from .field import Point
from .keys import (
    Keypair,
    PrivateKey,
    PublicKey,
    derive_public_key,
    format_private_key,
    generate_keypair,
    generate_private_key,
)
from .merkle import MerkleTree, build_anonymity_tree, verify_path

__all__ = [
    "Ciphertext",
    "CircuitInput",
    "ConfigurationError",
    "CryptoContext",
    "CryptographicError",
    "DecryptionError",
    "InvalidKeyRange",
    "InvalidPoint",
    "Keypair",
    "MerkleTree",
    "NotInAnonymitySet",
    "Point",
    "PrivateKey",
    "PublicKey",
    "SharedKey",
    "ZkPinCryptoError",
    "build_anonymity_tree",
    "build_circuit_input",
    "decrypt",
    "derive_public_key",
    "derive_shared_key",
    "encrypt",
    "format_private_key",
    "generate_circuit_input",
    "generate_keypair",
    "generate_private_key",
    "verify_path",
    "verify_plaintext",
]
