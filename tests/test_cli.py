"""
Test CLI commands.

Commands run in-process through click's CliRunner.
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from zkpin import __version__
from zkpin.cli import main
from zkpin.crypto import CryptoContext, Keypair, PrivateKey
from zkpin.keystore import Keystore


@pytest.fixture(scope="module")
def ctx():
    return CryptoContext.create()


@pytest.fixture(scope="module")
def alice(ctx):
    return Keypair.from_private(ctx, PrivateKey(4242))


@pytest.fixture(scope="module")
def bob(ctx):
    return Keypair.from_private(ctx, PrivateKey(2424))


@pytest.fixture
def runner():
    return CliRunner()


def test_cli_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_keygen_json(runner, ctx):
    result = runner.invoke(main, ["keygen", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    keypair = Keypair.from_private(ctx, PrivateKey.from_hex(data["private_key"]))
    assert keypair.public_key.to_hex() == data["public_key"]


def test_keygen_table(runner):
    result = runner.invoke(main, ["keygen"])
    assert result.exit_code == 0
    assert "public key" in result.output


def test_keygen_into_keystore(runner, tmp_path, ctx):
    path = tmp_path / "keystore.yaml"
    result = runner.invoke(
        main, ["keygen", "--json", "--keystore", str(path), "--user-id", "u1"]
    )
    assert result.exit_code == 0
    stored = Keystore(path).get_signer(ctx, "u1")
    assert stored.public_key.to_hex() == json.loads(result.output)["public_key"]


def test_keygen_keystore_requires_user(runner, tmp_path):
    result = runner.invoke(main, ["keygen", "--keystore", str(tmp_path / "k.yaml")])
    assert result.exit_code == 2


def test_pubkey(runner, alice):
    result = runner.invoke(main, ["pubkey", alice.private_key.to_hex()])
    assert result.exit_code == 0
    assert result.output.strip() == alice.public_key.to_hex()


def test_shared_key_symmetric(runner, alice, bob):
    one = runner.invoke(
        main, ["shared-key", alice.private_key.to_hex(), bob.public_key.to_hex()]
    )
    two = runner.invoke(
        main, ["shared-key", bob.private_key.to_hex(), alice.public_key.to_hex()]
    )
    assert one.exit_code == 0
    assert one.output == two.output


def test_encrypt_decrypt(runner, alice, bob):
    encrypted = runner.invoke(
        main,
        ["encrypt", alice.private_key.to_hex(), bob.public_key.to_hex(), "1", "0", "7"],
    )
    assert encrypted.exit_code == 0
    ciphertext = encrypted.output.strip()
    assert len(json.loads(ciphertext)["data"]) == 3

    decrypted = runner.invoke(
        main,
        ["decrypt", bob.private_key.to_hex(), alice.public_key.to_hex(), ciphertext],
    )
    assert decrypted.exit_code == 0
    assert decrypted.output.strip() == "1 0 7"


def test_bad_public_key(runner, alice):
    result = runner.invoke(main, ["shared-key", alice.private_key.to_hex(), "00" * 64])
    assert result.exit_code == 1
    assert "InvalidPoint" in result.output


def test_merkle_root(runner, tmp_path, alice, bob):
    keys = tmp_path / "keys.yaml"
    keys.write_text(yaml.safe_dump([alice.public_key.to_hex(), bob.public_key.to_hex()]))
    result = runner.invoke(main, ["merkle-root", str(keys)])
    assert result.exit_code == 0
    assert result.output.startswith("depth=1 root=")


def test_merkle_root_empty_file(runner, tmp_path):
    keys = tmp_path / "keys.yaml"
    keys.write_text("[]\n")
    result = runner.invoke(main, ["merkle-root", str(keys)])
    assert result.exit_code == 1


def test_circuit_input(runner, tmp_path, alice, bob):
    keys = tmp_path / "keys.yaml"
    keys.write_text(yaml.safe_dump([alice.public_key.to_hex(), bob.public_key.to_hex()]))
    output = tmp_path / "input.json"
    result = runner.invoke(
        main,
        [
            "circuit-input",
            "--operator-key", bob.public_key.to_hex(),
            "--private-key", alice.private_key.to_hex(),
            "--keys", str(keys),
            "--pool-id", "3",
            "--output", str(output),
            "1", "0",
        ],
    )
    assert result.exit_code == 0
    data = json.loads(output.read_text())
    assert data["poolId"] == "3"
    assert data["pathIndices"] == ["0"]
    assert len(data["ciphertext"]) == 3


def test_demo(runner):
    result = runner.invoke(main, ["demo", "--signers", "3", "--threshold", "2"])
    assert result.exit_code == 0
    assert "revealed: [[1], [2], [3]]" in result.output


def test_demo_rejects_small_set(runner):
    result = runner.invoke(main, ["demo", "--signers", "1", "--threshold", "2"])
    assert result.exit_code == 2
