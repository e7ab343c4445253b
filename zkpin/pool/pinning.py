"""Content-addressed storage for proof artifacts."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import cbor2
import trio

from .errors import PersistenceFailure

MAX_ARTIFACT_BYTES = 256 * 1024


class PinningService(Protocol):
    async def pin(
        self, payload: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        """Persist payload and return its content identifier."""
        ...


def encode_artifact(payload: Dict[str, Any]) -> bytes:
    encoded = cbor2.dumps(payload, canonical=True)
    if len(encoded) > MAX_ARTIFACT_BYTES:
        raise PersistenceFailure("artifact too large")
    return encoded


def content_id(encoded: bytes) -> str:
    return "sha256-" + hashlib.sha256(encoded).hexdigest()


class InMemoryPinningService:
    """Pins into a dict; pinning the same payload twice is a no-op."""

    def __init__(self) -> None:
        self.artifacts: Dict[str, bytes] = {}
        self.metadata: Dict[str, Dict[str, Any]] = {}

    async def pin(
        self, payload: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        await trio.lowlevel.checkpoint()
        encoded = encode_artifact(payload)
        cid = content_id(encoded)
        self.artifacts[cid] = encoded
        self.metadata[cid] = dict(metadata or {})
        return cid

    def load(self, cid: str) -> Dict[str, Any]:
        return cbor2.loads(self.artifacts[cid])


class LocalPinningService:
    """Pins artifacts as <cid>.cbor files under base_dir."""

    def __init__(self, base_dir: Path | str) -> None:
        self._base_dir = trio.Path(Path(base_dir).expanduser())

    async def pin(
        self, payload: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        encoded = encode_artifact(payload)
        cid = content_id(encoded)
        target = self._base_dir / f"{cid}.cbor"
        try:
            await self._base_dir.mkdir(parents=True, exist_ok=True)
            if not await target.exists():
                tmp = self._base_dir / f".{cid}.tmp"
                await tmp.write_bytes(encoded)
                await tmp.replace(target)
        except OSError as exc:
            raise PersistenceFailure(f"pin failed: {exc}") from exc
        return cid

    async def load(self, cid: str) -> Dict[str, Any]:
        data = await (self._base_dir / f"{cid}.cbor").read_bytes()
        return cbor2.loads(data)
