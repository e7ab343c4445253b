"""
⚠️ DRAFT — requires crypto review before production use

Tests for circuit input assembly.
"""

import json

import pytest

from zkpin.crypto.cipher import decrypt, encrypt
from zkpin.crypto.circuit_input import (
    CircuitInput,
    build_circuit_input,
    generate_circuit_input,
)
from zkpin.crypto.context import CryptoContext
from zkpin.crypto.ecdh import derive_shared_key
from zkpin.crypto.exceptions import NotInAnonymitySet
from zkpin.crypto.keys import Keypair, PrivateKey, format_private_key
from zkpin.crypto.merkle import hash_leaf, verify_path


@pytest.fixture(scope="module")
def ctx():
    return CryptoContext.create()


@pytest.fixture(scope="module")
def members(ctx):
    return [Keypair.from_private(ctx, PrivateKey(100 + i)) for i in range(3)]


@pytest.fixture(scope="module")
def operator(ctx):
    return Keypair.from_private(ctx, PrivateKey(999))


@pytest.fixture(scope="module")
def circuit(ctx, members, operator):
    return generate_circuit_input(
        ctx,
        operator.public_key,
        members[1],
        [m.public_key for m in members],
        pool_id=7,
        plaintext=[1, 0],
    )


class TestGenerateCircuitInput:
    def test_path_verifies(self, ctx, members, circuit):
        leaf = hash_leaf(ctx, members[1].public_key)
        path = list(
            zip(circuit.path_elements, [bit == 1 for bit in circuit.path_indices])
        )
        assert verify_path(ctx, leaf, path, circuit.root)

    def test_depth_and_indices(self, circuit):
        assert circuit.depth == 2
        # index 1: right child at the bottom, left child above
        assert circuit.path_indices == [1, 0]

    def test_private_key_hash_is_clamped_scalar(self, members, circuit):
        assert circuit.signer_private_key_hash == format_private_key(
            members[1].private_key
        )

    def test_operator_can_decrypt(self, ctx, members, operator, circuit):
        shared = derive_shared_key(operator.private_key, members[1].public_key)
        assert decrypt(ctx, circuit.ciphertext, shared) == [1, 0]

    def test_not_in_set(self, ctx, members, operator):
        outsider = Keypair.from_private(ctx, PrivateKey(5))
        with pytest.raises(NotInAnonymitySet):
            generate_circuit_input(
                ctx,
                operator.public_key,
                outsider,
                [m.public_key for m in members],
                pool_id=1,
                plaintext=[1],
            )

    def test_explicit_depth(self, ctx, members, operator, circuit):
        deep = build_circuit_input(
            ctx,
            operator.public_key,
            members[1],
            [m.public_key for m in members],
            7,
            circuit.ciphertext,
            depth=4,
        )
        assert deep.depth == 4
        assert deep.path_elements[:2] == circuit.path_elements
        assert deep.root != circuit.root

    def test_rejects_negative_pool_id(self, ctx, members, operator, circuit):
        with pytest.raises(ValueError, match="pool_id"):
            build_circuit_input(
                ctx,
                operator.public_key,
                members[0],
                [m.public_key for m in members],
                -1,
                circuit.ciphertext,
            )


class TestToDict:
    def test_snarkjs_keys(self, circuit):
        data = circuit.to_dict()
        assert set(data) == {
            "poolPubKey",
            "signerPubkey",
            "signerPrivKeyHash",
            "ciphertext",
            "pathElements",
            "pathIndices",
            "root",
            "poolId",
        }

    def test_values_are_decimal_strings(self, circuit):
        data = circuit.to_dict()
        json.dumps(data)
        assert data["poolId"] == "7"
        assert data["ciphertext"][0] == str(circuit.ciphertext.iv)
        assert len(data["ciphertext"]) == 3
        assert data["pathIndices"] == ["1", "0"]

    def test_repr_hides_witness(self, circuit):
        assert str(circuit.signer_private_key_hash) not in repr(circuit)


def test_mismatched_path_lengths_rejected(ctx, members, operator):
    ciphertext = encrypt(ctx, [1], derive_shared_key(1, operator.public_key))
    with pytest.raises(ValueError):
        CircuitInput(
            pool_public_key=operator.public_key,
            signer_public_key=members[0].public_key,
            path_elements=[1, 2],
            path_indices=[0],
            root=0,
            signer_private_key_hash=0,
            ciphertext=ciphertext,
            pool_id=0,
        )
