import cbor2
import pytest

from zkpin.pool.errors import PersistenceFailure
from zkpin.pool.pinning import (
    MAX_ARTIFACT_BYTES,
    InMemoryPinningService,
    LocalPinningService,
    content_id,
    encode_artifact,
)


def test_encode_is_canonical():
    assert encode_artifact({"b": 1, "a": 2}) == encode_artifact({"a": 2, "b": 1})


def test_encode_rejects_oversized():
    with pytest.raises(PersistenceFailure, match="too large"):
        encode_artifact({"blob": b"\x00" * (MAX_ARTIFACT_BYTES + 1)})


def test_content_id_format():
    cid = content_id(b"abc")
    assert cid.startswith("sha256-")
    assert len(cid) == len("sha256-") + 64


@pytest.mark.trio
async def test_in_memory_pin_and_load():
    service = InMemoryPinningService()
    payload = {"proof": {"a": 1}, "publicSignals": ["1"]}
    cid = await service.pin(payload, {"name": "ZKPin", "commitmentPoolId": "3"})
    assert service.load(cid) == payload
    assert service.metadata[cid]["commitmentPoolId"] == "3"


@pytest.mark.trio
async def test_in_memory_pin_is_content_addressed():
    service = InMemoryPinningService()
    first = await service.pin({"x": 1})
    second = await service.pin({"x": 1})
    assert first == second
    assert len(service.artifacts) == 1


@pytest.mark.trio
async def test_local_pin_writes_file(tmp_path):
    service = LocalPinningService(tmp_path / "pins")
    payload = {"proof": {"pi_a": ["1", "2"]}, "publicSignals": ["5"]}
    cid = await service.pin(payload)
    target = tmp_path / "pins" / f"{cid}.cbor"
    assert target.exists()
    assert cbor2.loads(target.read_bytes()) == payload
    assert await service.load(cid) == payload


@pytest.mark.trio
async def test_local_pin_unwritable_dir(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    service = LocalPinningService(blocker / "pins")
    with pytest.raises(PersistenceFailure):
        await service.pin({"x": 1})
