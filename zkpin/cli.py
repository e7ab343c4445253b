"""
Command-Line Interface for zkpin

Key management, encryption and circuit-input tooling for commitment pools,
plus an in-memory demo of the full sign/reveal flow.
"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import List

import click
import trio
import yaml
from rich.console import Console
from rich.table import Table

from zkpin import __version__
from zkpin.crypto import (
    Ciphertext,
    CryptoContext,
    Keypair,
    PrivateKey,
    PublicKey,
    ZkPinCryptoError,
    build_anonymity_tree,
    decrypt,
    derive_shared_key,
    encrypt,
    generate_circuit_input,
    generate_keypair,
)
from zkpin.keystore import Keystore
from zkpin.pool import (
    CommitmentPoolService,
    InMemoryPinningService,
    InMemoryPoolStore,
    MockProver,
    PoolError,
)
from zkpin.settings import get_settings

console = Console()


@contextmanager
def _errors():
    try:
        yield
    except (ZkPinCryptoError, PoolError, ValueError, TypeError) as exc:
        raise click.ClickException(f"{type(exc).__name__}: {exc}") from exc


def _load_public_keys(path: str) -> List[PublicKey]:
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if not isinstance(data, list) or not data:
        raise ValueError(f"{path} must contain a non-empty list of public keys")
    return [PublicKey.from_hex(str(item)) for item in data]


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, verbose):
    """
    zkpin - anonymous attestations with threshold reveal

    Signers prove membership in an anonymity set and submit a ballot
    encrypted for the pool operator; the operator decrypts once the pool
    reaches its threshold.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = CryptoContext.create()


@main.command()
@click.option('--keystore', 'keystore_path', type=click.Path(), help='Save into this keystore')
@click.option('--user-id', type=str, help='Hashed user id to store the signer keypair under')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of a table')
@click.pass_obj
def keygen(crypto, keystore_path, user_id, as_json):
    """
    Generate a keypair.

    Examples:

        zkpin keygen

        zkpin keygen --keystore ~/.zkpin/keystore.yaml --user-id 3f2a...
    """
    with _errors():
        keypair = generate_keypair(crypto)
        if keystore_path or user_id:
            if not user_id:
                raise click.UsageError("--user-id is required with --keystore")
            path = keystore_path or get_settings().keystore_path
            Keystore(path).add_signer(user_id, keypair)

    if as_json:
        click.echo(json.dumps({
            "private_key": keypair.private_key.to_hex(),
            "public_key": keypair.public_key.to_hex(),
        }))
        return

    table = Table(title="zkpin keypair")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("private key", keypair.private_key.to_hex())
    table.add_row("public key", keypair.public_key.to_hex())
    console.print(table)


@main.command()
@click.argument('private_key')
@click.pass_obj
def pubkey(crypto, private_key):
    """Derive the public key for PRIVATE_KEY (hex)."""
    with _errors():
        keypair = Keypair.from_private(crypto, PrivateKey.from_hex(private_key))
    click.echo(keypair.public_key.to_hex())


@main.command('shared-key')
@click.argument('private_key')
@click.argument('public_key')
def shared_key(private_key, public_key):
    """Derive the ECDH shared key between PRIVATE_KEY and PUBLIC_KEY."""
    with _errors():
        key = derive_shared_key(
            PrivateKey.from_hex(private_key), PublicKey.from_hex(public_key)
        )
    click.echo(str(key.value))


@main.command('encrypt')
@click.argument('private_key')
@click.argument('public_key')
@click.argument('values', nargs=-1, type=int, required=True)
@click.pass_obj
def encrypt_cmd(crypto, private_key, public_key, values):
    """
    Encrypt VALUES for the holder of PUBLIC_KEY.

    Prints the ciphertext as JSON.
    """
    with _errors():
        key = derive_shared_key(
            PrivateKey.from_hex(private_key), PublicKey.from_hex(public_key)
        )
        ciphertext = encrypt(crypto, list(values), key)
    click.echo(json.dumps(ciphertext.to_dict()))


@main.command('decrypt')
@click.argument('private_key')
@click.argument('public_key')
@click.argument('ciphertext')
@click.pass_obj
def decrypt_cmd(crypto, private_key, public_key, ciphertext):
    """Decrypt a JSON CIPHERTEXT sent by the holder of PUBLIC_KEY."""
    with _errors():
        parsed = Ciphertext.from_dict(json.loads(ciphertext))
        key = derive_shared_key(
            PrivateKey.from_hex(private_key), PublicKey.from_hex(public_key)
        )
        plaintext = decrypt(crypto, parsed, key)
    click.echo(" ".join(str(v) for v in plaintext))


@main.command('merkle-root')
@click.argument('keys_file', type=click.Path(exists=True))
@click.option('--depth', type=int, default=None, help='Fixed tree depth')
@click.pass_obj
def merkle_root(crypto, keys_file, depth):
    """Print the Merkle root over the public keys in KEYS_FILE (YAML list)."""
    with _errors():
        tree = build_anonymity_tree(crypto, _load_public_keys(keys_file), depth)
    click.echo(f"depth={tree.depth} root={tree.root}")


@main.command('circuit-input')
@click.option('--operator-key', required=True, help='Operator public key (hex)')
@click.option('--private-key', required=True, help='Signer private key (hex)')
@click.option('--keys', 'keys_file', required=True, type=click.Path(exists=True),
              help='YAML list of anonymity set public keys')
@click.option('--pool-id', required=True, type=int)
@click.option('--depth', type=int, default=None, help='Fixed tree depth')
@click.option('--output', type=click.Path(), help='Write JSON here instead of stdout')
@click.argument('values', nargs=-1, type=int, required=True)
@click.pass_obj
def circuit_input(crypto, operator_key, private_key, keys_file, pool_id, depth,
                  output, values):
    """Build snarkjs input JSON for signing pool POOL_ID with VALUES."""
    with _errors():
        signer = Keypair.from_private(crypto, PrivateKey.from_hex(private_key))
        circuit = generate_circuit_input(
            crypto,
            PublicKey.from_hex(operator_key),
            signer,
            _load_public_keys(keys_file),
            pool_id,
            list(values),
            depth=depth or get_settings().merkle_depth,
        )
    rendered = json.dumps(circuit.to_dict(), indent=2)
    if output:
        Path(output).write_text(rendered)
        click.echo(f"wrote {output}")
    else:
        click.echo(rendered)


async def _run_demo(crypto: CryptoContext, signers: int, threshold: int) -> dict:
    service = CommitmentPoolService(
        crypto, InMemoryPoolStore(), InMemoryPinningService(), MockProver()
    )
    operator = generate_keypair(crypto)
    members = [generate_keypair(crypto) for _ in range(signers)]
    for member in members:
        await service.register_public_key(member.public_key)

    pool = await service.create_pool("demo", threshold, operator.public_key)
    outcomes = []
    for i, member in enumerate(members):
        outcomes.append(await service.sign(pool.id, member, [i + 1]))
    plaintexts = await service.reveal(pool.id, operator.private_key)
    return {"outcomes": outcomes, "plaintexts": plaintexts}


@main.command()
@click.option('--signers', type=int, default=6, help='Anonymity set size (default: 6)')
@click.option('--threshold', type=int, default=3, help='Pool threshold (default: 3)')
@click.pass_obj
def demo(crypto, signers, threshold):
    """
    Run an in-memory pool end to end with a mock prover.

    ⚠️  The mock prover gives no cryptographic guarantee.
    """
    if signers < threshold:
        raise click.BadParameter("--signers must be >= --threshold")
    with _errors():
        result = trio.run(_run_demo, crypto, signers, threshold)

    table = Table(title=f"demo pool ({signers} signers, threshold {threshold})")
    table.add_column("Signer")
    table.add_column("Accepted")
    table.add_column("Count")
    table.add_column("State")
    for i, outcome in enumerate(result["outcomes"]):
        table.add_row(
            str(i), str(outcome.accepted), str(outcome.signature_count),
            outcome.state.value,
        )
    console.print(table)
    click.echo(f"revealed: {result['plaintexts']}")


if __name__ == '__main__':
    main()
