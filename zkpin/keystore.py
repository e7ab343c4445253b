"""
Participant-local keystore.

Keeps a participant's signer keypair and the pools they operate in a YAML
file on their own machine. Private keys never go to the pool store.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .crypto.context import CryptoContext
from .crypto.exceptions import ConfigurationError
from .crypto.keys import Keypair, PrivateKey, PublicKey


class Keystore:
    """
    YAML-backed store.

    Layout::

        signers:
          <hashed_user_id>: {private_key: <hex>, public_key: <hex>}
        pools:
          <pool_id>:
            operator_public_key: <hex>
            operator_private_key: <hex or null>
            local_signers: [<hex>, ...]

    Adds are no-ops when the entry already exists.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {"signers": {}, "pools": {}}
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"corrupt keystore {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"corrupt keystore {self._path}")
        data.setdefault("signers", {})
        data.setdefault("pools", {})
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(yaml.safe_dump(data, sort_keys=True), encoding="utf-8")
        os.chmod(tmp, 0o600)
        tmp.replace(self._path)

    # ------------------------------------------------------------------
    # Signers
    # ------------------------------------------------------------------

    def add_signer(self, hashed_user_id: str, keypair: Keypair) -> None:
        data = self._load()
        if hashed_user_id in data["signers"]:
            return
        data["signers"][hashed_user_id] = {
            "private_key": keypair.private_key.to_hex(),
            "public_key": keypair.public_key.to_hex(),
        }
        self._save(data)

    def get_signer(
        self, ctx: CryptoContext, hashed_user_id: str
    ) -> Optional[Keypair]:
        """
        Load a signer keypair, re-deriving the public key.

        Raises:
            ConfigurationError: If the stored public key does not match
        """
        entry = self._load()["signers"].get(hashed_user_id)
        if entry is None:
            return None
        keypair = Keypair.from_private(ctx, PrivateKey.from_hex(entry["private_key"]))
        if keypair.public_key.to_hex() != entry["public_key"]:
            raise ConfigurationError(
                f"stored public key for {hashed_user_id} does not match private key"
            )
        return keypair

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def add_operator_pool(
        self,
        pool_id: int,
        operator_public_key: PublicKey,
        operator_private_key: Optional[PrivateKey] = None,
    ) -> None:
        """Store operator data; fills in an entry created by add_local_signer."""
        data = self._load()
        entry = data["pools"].get(str(pool_id))
        if entry and entry.get("operator_public_key"):
            return
        data["pools"][str(pool_id)] = {
            "operator_public_key": operator_public_key.to_hex(),
            "operator_private_key": (
                operator_private_key.to_hex() if operator_private_key else None
            ),
            "local_signers": entry.get("local_signers", []) if entry else [],
        }
        self._save(data)

    def get_pool(self, pool_id: int) -> Optional[Dict[str, Any]]:
        return self._load()["pools"].get(str(pool_id))

    def get_operator_key(self, pool_id: int) -> Optional[PrivateKey]:
        entry = self.get_pool(pool_id)
        if not entry or not entry.get("operator_private_key"):
            return None
        return PrivateKey.from_hex(entry["operator_private_key"])

    def add_local_signer(self, pool_id: int, public_key: PublicKey) -> None:
        data = self._load()
        entry = data["pools"].setdefault(
            str(pool_id),
            {
                "operator_public_key": None,
                "operator_private_key": None,
                "local_signers": [],
            },
        )
        if public_key.to_hex() not in entry["local_signers"]:
            entry["local_signers"].append(public_key.to_hex())
            self._save(data)

    def has_signed(self, pool_id: int, public_key: PublicKey) -> bool:
        """Only knows about signatures made from this keystore."""
        entry = self.get_pool(pool_id) or {}
        signers: List[str] = entry.get("local_signers", [])
        return public_key.to_hex() in signers
