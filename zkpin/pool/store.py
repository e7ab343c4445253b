"""Pool persistence collaborator and an in-memory implementation."""

from __future__ import annotations

import itertools
from typing import Callable, Dict, List, Protocol, Tuple, TypeVar

import trio

from ..crypto.keys import PublicKey
from .errors import PoolNotFound
from .models import CommitmentPool
from .state import new_pool

T = TypeVar("T")

PoolTransition = Callable[[CommitmentPool], Tuple[CommitmentPool, T]]


class PoolStore(Protocol):
    """
    Shared store for pools and the anonymity set.

    atomic_update must run the transition against the current record and
    commit its result as one check-and-insert, so concurrent submissions
    never both see the pre-insert record.
    """

    async def create_pool(
        self,
        title: str,
        threshold: int,
        operator_public_key: PublicKey,
        description: str = "",
    ) -> CommitmentPool:
        ...

    async def get_pool(self, pool_id: int) -> CommitmentPool:
        ...

    async def atomic_update(self, pool_id: int, transition: PoolTransition) -> T:
        ...

    async def register_public_key(self, public_key: PublicKey) -> None:
        ...

    async def list_public_keys(self) -> List[PublicKey]:
        ...


class InMemoryPoolStore:
    """
    Process-local PoolStore.

    Each pool has its own trio.Lock. Transitions are pure, so the record is
    swapped with no checkpoint between reading and writing it; a cancelled
    caller either committed the whole record or nothing.
    """

    def __init__(self) -> None:
        self._pools: Dict[int, CommitmentPool] = {}
        self._locks: Dict[int, trio.Lock] = {}
        self._public_keys: List[PublicKey] = []
        self._ids = itertools.count(1)

    async def create_pool(
        self,
        title: str,
        threshold: int,
        operator_public_key: PublicKey,
        description: str = "",
    ) -> CommitmentPool:
        await trio.lowlevel.checkpoint()
        pool = new_pool(
            next(self._ids), title, threshold, operator_public_key, description
        )
        self._pools[pool.id] = pool
        self._locks[pool.id] = trio.Lock()
        return pool

    def _require(self, pool_id: int) -> CommitmentPool:
        try:
            return self._pools[pool_id]
        except KeyError:
            raise PoolNotFound(f"pool {pool_id} not found") from None

    async def get_pool(self, pool_id: int) -> CommitmentPool:
        await trio.lowlevel.checkpoint()
        return self._require(pool_id)

    async def atomic_update(self, pool_id: int, transition: PoolTransition) -> T:
        self._require(pool_id)
        async with self._locks[pool_id]:
            updated, result = transition(self._pools[pool_id])
            self._pools[pool_id] = updated
        return result

    async def register_public_key(self, public_key: PublicKey) -> None:
        await trio.lowlevel.checkpoint()
        if public_key not in self._public_keys:
            self._public_keys.append(public_key)

    async def list_public_keys(self) -> List[PublicKey]:
        await trio.lowlevel.checkpoint()
        return list(self._public_keys)
