import pytest
import trio

from zkpin.crypto.cipher import Ciphertext
from zkpin.crypto.config import BASE8
from zkpin.crypto.field import Point
from zkpin.crypto.keys import PublicKey
from zkpin.pool.errors import PoolNotFound
from zkpin.pool.models import PoolState, Signature
from zkpin.pool.state import apply_submission
from zkpin.pool.store import InMemoryPoolStore

OPERATOR = PublicKey(Point(*BASE8))


def _signature(n: int) -> Signature:
    return Signature(
        proof={}, public_signals=[], ciphertext=Ciphertext(iv=n, data=(n,))
    )


@pytest.mark.trio
async def test_create_assigns_increasing_ids():
    store = InMemoryPoolStore()
    first = await store.create_pool("a", 1, OPERATOR)
    second = await store.create_pool("b", 1, OPERATOR)
    assert second.id == first.id + 1
    assert (await store.get_pool(first.id)).title == "a"


@pytest.mark.trio
async def test_get_missing_pool():
    store = InMemoryPoolStore()
    with pytest.raises(PoolNotFound):
        await store.get_pool(42)


@pytest.mark.trio
async def test_atomic_update_missing_pool():
    store = InMemoryPoolStore()
    with pytest.raises(PoolNotFound):
        await store.atomic_update(42, lambda pool: (pool, None))


@pytest.mark.trio
async def test_register_public_key_dedups_and_keeps_order():
    store = InMemoryPoolStore()
    other = PublicKey(Point(0, 1))
    await store.register_public_key(OPERATOR)
    await store.register_public_key(other)
    await store.register_public_key(OPERATOR)
    assert await store.list_public_keys() == [OPERATOR, other]


@pytest.mark.trio
async def test_concurrent_duplicates_insert_once():
    store = InMemoryPoolStore()
    pool = await store.create_pool("vote", 2, OPERATOR)
    outcomes = []

    async def submit():
        outcomes.append(
            await store.atomic_update(
                pool.id, lambda p: apply_submission(p, _signature(1))
            )
        )

    async with trio.open_nursery() as nursery:
        for _ in range(5):
            nursery.start_soon(submit)

    assert sum(o.accepted for o in outcomes) == 1
    assert (await store.get_pool(pool.id)).signature_count == 1


@pytest.mark.trio
async def test_concurrent_submissions_transition_once():
    store = InMemoryPoolStore()
    pool = await store.create_pool("vote", 3, OPERATOR)
    outcomes = []

    async def submit(n):
        outcomes.append(
            await store.atomic_update(
                pool.id, lambda p: apply_submission(p, _signature(n))
            )
        )

    async with trio.open_nursery() as nursery:
        for n in range(6):
            nursery.start_soon(submit, n)

    stored = await store.get_pool(pool.id)
    assert stored.signature_count == 6
    assert stored.state is PoolState.THRESHOLD_REACHED
    assert sum(o.transitioned for o in outcomes) == 1
    assert sorted(o.signature_count for o in outcomes) == [1, 2, 3, 4, 5, 6]
