"""
⚠️ DRAFT — requires crypto review before production use

Cryptographic configuration for zkpin.

Field, curve and hash parameters shared by signers and operators. Every
value here must match the zero-knowledge circuit the proofs are built for.
"""

# ============================================================================
# FIELD SELECTION
# ============================================================================

# BN254 scalar field (EIP-197). Keys, ciphertexts and curve coordinates all
# live in this field.
SNARK_FIELD_SIZE = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)
FIELD_ELEMENT_BYTES = 32

# ============================================================================
# CURVE PARAMETERS (BabyJubJub, twisted Edwards)
# ============================================================================

# a*x^2 + y^2 = 1 + d*x^2*y^2 over SNARK_FIELD_SIZE
CURVE_NAME = "babyjubjub"
CURVE_A = 168700
CURVE_D = 168696

# Full curve order and cofactor
CURVE_ORDER = (
    21888242871839275222246405745257275088614511777268538073601725287587578984328
)
COFACTOR = 8
SUBGROUP_ORDER = CURVE_ORDER >> 3

# Base8 generates the prime-order subgroup; public keys are multiples of it.
BASE8 = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)

POINT_SIZE_BYTES = 2 * FIELD_ELEMENT_BYTES  # x || y, uncompressed

# ============================================================================
# KEY DERIVATION
# ============================================================================

# Private keys are drawn from 256 random bits, rejecting values below this
# threshold before reducing modulo the field (arc4random_uniform technique).
RANDOM_BITS = 256
PRIVATE_KEY_REJECTION_THRESHOLD = (2**RANDOM_BITS - SNARK_FIELD_SIZE) % SNARK_FIELD_SIZE

# Clamping hash. The circuit only consumes the clamped scalar, so the hash is
# an off-circuit choice.
KEY_HASH_FUNCTION = "BLAKE2b-512"
KEY_HASH_PREFIX_BYTES = 32
CLAMP_SHIFT_BITS = 3

# ============================================================================
# MIMC7
# ============================================================================

MIMC7_SEED = b"mimc"
MIMC7_ROUNDS = 91
MIMC7_EXPONENT = 7

# ============================================================================
# MERKLE TREE
# ============================================================================

MERKLE_ZERO_LEAF = 0
MAX_MERKLE_DEPTH = 32

# ============================================================================
# SERIALIZATION
# ============================================================================

CIPHERTEXT_VERSION = 1

# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate configuration parameters.

    Returns:
        True if configuration is valid

    Raises:
        AssertionError: If configuration is invalid
    """
    assert SNARK_FIELD_SIZE.bit_length() == 254, "Field must be 254 bits"
    assert CURVE_ORDER == COFACTOR * SUBGROUP_ORDER, "Cofactor mismatch"
    assert 0 < PRIVATE_KEY_REJECTION_THRESHOLD < SNARK_FIELD_SIZE
    assert MIMC7_ROUNDS > 0, "MiMC7 needs at least one round"
    assert KEY_HASH_PREFIX_BYTES == FIELD_ELEMENT_BYTES
    assert all(0 <= c < SNARK_FIELD_SIZE for c in BASE8), "Base point not reduced"
    return True


# Auto-validate on import
validate_config()
