"""External prover collaborator backed by the snarkjs CLI."""

from __future__ import annotations

import hashlib
import json
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

import trio

from ..crypto.circuit_input import CircuitInput
from .errors import ProofGenerationFailure
from .models import ProofResult


class Prover(Protocol):
    async def prove(self, circuit_input: CircuitInput) -> ProofResult:
        ...


@dataclass(frozen=True)
class ProverPaths:
    wasm_path: Path
    zkey_path: Path


class SnarkjsProver:
    """
    Runs `snarkjs groth16 fullprove` in a temporary directory.

    The process is started with trio.run_process, so cancelling the caller
    (for example via trio.fail_after) kills it.
    """

    def __init__(
        self,
        wasm_path: Path | str,
        zkey_path: Path | str,
        snarkjs: Sequence[str] = ("snarkjs",),
    ) -> None:
        self._paths = ProverPaths(Path(wasm_path), Path(zkey_path))
        self._snarkjs = list(snarkjs)

    @property
    def paths(self) -> ProverPaths:
        return self._paths

    async def prove(self, circuit_input: CircuitInput) -> ProofResult:
        if not self._paths.wasm_path.exists():
            raise FileNotFoundError(f"missing circuit wasm: {self._paths.wasm_path}")
        if not self._paths.zkey_path.exists():
            raise FileNotFoundError(f"missing proving key: {self._paths.zkey_path}")

        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp = Path(tmp_dir)
            input_path = tmp / "input.json"
            proof_path = tmp / "proof.json"
            public_path = tmp / "public.json"
            input_path.write_text(json.dumps(circuit_input.to_dict()))

            command = self._snarkjs + [
                "groth16",
                "fullprove",
                str(input_path),
                str(self._paths.wasm_path),
                str(self._paths.zkey_path),
                str(proof_path),
                str(public_path),
            ]
            result = await trio.run_process(
                command,
                capture_stdout=True,
                capture_stderr=True,
                check=False,
            )
            if result.returncode != 0:
                stderr = result.stderr.decode(errors="replace").strip()
                raise ProofGenerationFailure(
                    f"prover failed: {stderr or 'unknown prover error'}"
                )

            try:
                proof = json.loads(proof_path.read_text())
                public_signals = json.loads(public_path.read_text())
            except (OSError, ValueError) as exc:
                raise ProofGenerationFailure(f"prover output unreadable: {exc}") from exc

        return ProofResult(proof=proof, public_signals=[str(s) for s in public_signals])


class MockProver:
    """
    Prover stand-in for demos and tests.

    Notes:
    - It does NOT provide real cryptographic security.
    - Public signals carry only public values: root, pool id, operator
      key and ciphertext.
    """

    async def prove(self, circuit_input: CircuitInput) -> ProofResult:
        await trio.lowlevel.checkpoint()
        data = circuit_input.to_dict()
        public_signals = (
            [data["root"], data["poolId"]] + data["poolPubKey"] + data["ciphertext"]
        )
        digest = hashlib.sha256(json.dumps(public_signals).encode("utf-8")).hexdigest()
        return ProofResult(
            proof={"protocol": "mock", "digest": digest},
            public_signals=public_signals,
        )
