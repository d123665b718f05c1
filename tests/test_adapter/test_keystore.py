"""
Tests for KeypairStore and the key-value storages.
"""
import asyncio
import json
import logging

import pytest

from pseudo_wallet.adapters import InMemoryStorage, JsonFileStorage, KEY_ALGORITHMS, KeypairStore, KeyValueStorage
from pseudo_wallet.engine.exceptions import KeyImportError, KeyPersistenceError
from pseudo_wallet.schemas.bases import Chain, KeypairRecord


class FailingStorage(KeyValueStorage):
    """Reads nothing, refuses every write."""

    def __init__(self):
        self.writes = 0

    def get(self, key):
        return None

    def set(self, key, value):
        self.writes += 1
        raise KeyPersistenceError("disk full")

    def delete(self, key):
        raise KeyPersistenceError("disk full")


@pytest.mark.asyncio
@pytest.mark.parametrize("chain", [Chain.SOLANA, Chain.ETHEREUM])
async def test_keypair_is_persisted_and_reloaded(chain):
    storage = InMemoryStorage()
    first = await KeypairStore(storage).get_keypair(chain)

    raw = storage.get(KEY_ALGORITHMS[chain].namespace)
    record = json.loads(raw)
    assert set(record) == {"privateKeyMaterial", "publicKey", "address"}
    assert record["address"] == first.address

    second = await KeypairStore(storage).get_keypair(chain)
    assert second.address == first.address
    assert second.public_key == first.public_key
    assert second.private_key == first.private_key


@pytest.mark.asyncio
async def test_namespaces_are_fixed():
    storage = InMemoryStorage()
    store = KeypairStore(storage)
    await store.get_keypair("solana")
    await store.get_keypair("ethereum")
    assert sorted(storage.keys()) == ["pseudo_ethereum_keypair", "pseudo_solana_keypair"]


@pytest.mark.asyncio
async def test_concurrent_first_use_yields_one_keypair():
    storage = InMemoryStorage()
    store = KeypairStore(storage)
    keypairs = await asyncio.gather(*(store.get_keypair(Chain.ETHEREUM) for _ in range(8)))

    assert all(k is keypairs[0] for k in keypairs)
    assert store.peek(Chain.ETHEREUM) is keypairs[0]
    assert json.loads(storage.get("pseudo_ethereum_keypair"))["address"] == keypairs[0].address


@pytest.mark.asyncio
async def test_corrupted_record_is_replaced(caplog):
    storage = InMemoryStorage({"pseudo_solana_keypair": "{not json"})
    with caplog.at_level(logging.WARNING, logger="pseudo_wallet"):
        keypair = await KeypairStore(storage).get_keypair(Chain.SOLANA)

    assert "address will change" in caplog.text
    assert json.loads(storage.get("pseudo_solana_keypair"))["address"] == keypair.address


@pytest.mark.asyncio
async def test_record_with_wrong_address_is_rejected():
    storage = InMemoryStorage()
    keypair = await KeypairStore(storage).get_keypair(Chain.ETHEREUM)

    tampered = KeypairRecord.from_bytes(keypair.private_key, keypair.public_key, "0x" + "00" * 20)
    with pytest.raises(KeyImportError):
        KeypairStore.decode_record(Chain.ETHEREUM, tampered.to_canonical_json())

    wrong_public = KeypairRecord.from_bytes(keypair.private_key, bytes(65), keypair.address)
    with pytest.raises(KeyImportError):
        KeypairStore.decode_record(Chain.ETHEREUM, wrong_public.to_canonical_json())

    with pytest.raises(KeyImportError):
        KeypairStore.decode_record(Chain.SOLANA, json.dumps({"privateKeyMaterial": [1, 2], "publicKey": [], "address": "x"}))


@pytest.mark.asyncio
async def test_persistence_failure_is_not_fatal(caplog):
    storage = FailingStorage()
    store = KeypairStore(storage)
    with caplog.at_level(logging.WARNING, logger="pseudo_wallet"):
        keypair = await store.get_keypair(Chain.SOLANA)
        again = await store.get_keypair(Chain.SOLANA)

    assert keypair is again
    assert storage.writes == 1
    assert "in memory only" in caplog.text


@pytest.mark.asyncio
async def test_reset_rotates_identity():
    storage = InMemoryStorage()
    store = KeypairStore(storage)
    old = await store.get_keypair(Chain.ETHEREUM)

    store.reset(Chain.ETHEREUM)
    assert store.peek(Chain.ETHEREUM) is None
    assert storage.get("pseudo_ethereum_keypair") is None

    new = await store.get_keypair(Chain.ETHEREUM)
    assert new.address != old.address


@pytest.mark.asyncio
async def test_json_file_storage_round_trip(tmp_path):
    path = tmp_path / "keys" / "sandbox.json"
    first = await KeypairStore(JsonFileStorage(path)).get_keypair(Chain.SOLANA)

    assert path.exists()
    assert list(tmp_path.joinpath("keys").iterdir()) == [path]
    second = await KeypairStore(JsonFileStorage(path)).get_keypair(Chain.SOLANA)
    assert second.address == first.address


def test_json_file_storage_treats_garbage_as_empty(tmp_path):
    path = tmp_path / "sandbox.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert storage.get("pseudo_solana_keypair") is None
    storage.set("pseudo_solana_keypair", "value")
    assert json.loads(path.read_text(encoding="utf-8")) == {"pseudo_solana_keypair": "value"}
    storage.delete("pseudo_solana_keypair")
    assert storage.get("pseudo_solana_keypair") is None


def test_json_file_storage_write_failure(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(KeyPersistenceError):
        JsonFileStorage(blocker / "keys.json").set("k", "v")
