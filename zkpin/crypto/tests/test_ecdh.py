import pytest

from zkpin.crypto.config import SNARK_FIELD_SIZE
from zkpin.crypto.context import CryptoContext
from zkpin.crypto.ecdh import SharedKey, derive_shared_key
from zkpin.crypto.exceptions import InvalidKeyRange
from zkpin.crypto.keys import Keypair, PrivateKey


@pytest.fixture(scope="module")
def keypairs():
    ctx = CryptoContext.create()
    return (
        Keypair.from_private(ctx, PrivateKey(1111)),
        Keypair.from_private(ctx, PrivateKey(2222)),
        Keypair.from_private(ctx, PrivateKey(3333)),
    )


def test_shared_key_is_symmetric(keypairs):
    alice, bob, _ = keypairs
    assert derive_shared_key(alice.private_key, bob.public_key) == derive_shared_key(
        bob.private_key, alice.public_key
    )


def test_shared_key_differs_per_pair(keypairs):
    alice, bob, carol = keypairs
    assert derive_shared_key(alice.private_key, bob.public_key) != derive_shared_key(
        alice.private_key, carol.public_key
    )


def test_shared_key_is_field_element(keypairs):
    alice, bob, _ = keypairs
    key = derive_shared_key(alice.private_key, bob.public_key)
    assert 0 <= key.value < SNARK_FIELD_SIZE


def test_accepts_int_private_key(keypairs):
    alice, bob, _ = keypairs
    assert derive_shared_key(1111, bob.public_key) == derive_shared_key(
        alice.private_key, bob.public_key
    )


def test_rejects_out_of_range_private_key(keypairs):
    with pytest.raises(InvalidKeyRange):
        derive_shared_key(SNARK_FIELD_SIZE, keypairs[0].public_key)


def test_rejects_non_public_key():
    with pytest.raises(TypeError):
        derive_shared_key(1, (1, 2))


def test_shared_key_repr_redacted():
    assert "424242" not in repr(SharedKey(424242))
