"""
Sandbox Keypair Store

Owns one keypair per chain. A keypair is created lazily on first use,
persisted under a fixed namespace key and reloaded (never regenerated) while
a valid record exists.

Loading order for ``get_keypair(chain)``:
    1. In-memory instance, if any.
    2. Persisted record, decoded and checked against its own derived address.
    3. Fresh keypair, persisted best-effort.

A corrupted record is not an error for the caller: the store logs it and
generates a new keypair. The sandbox address shown to the user changes in that
case, and the log line says so.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from pydantic import ValidationError

from ..engine.exceptions import KeyImportError, KeyPersistenceError
from ..schemas.bases import Chain, Keypair, KeypairRecord
from ..utils import logger
from .evm import signatures as evm_signatures
from .storages import InMemoryStorage, KeyValueStorage
from .svm import signatures as svm_signatures


@dataclass(frozen=True)
class KeyAlgorithm:
    """How to create and rebuild a keypair for one chain."""
    namespace: str
    tag: str
    generate: Callable[[], Keypair]
    from_private_key: Callable[[bytes], Keypair]


KEY_ALGORITHMS: Dict[Chain, KeyAlgorithm] = {
    Chain.SOLANA: KeyAlgorithm(
        namespace="pseudo_solana_keypair",
        tag="[SOL]",
        generate=svm_signatures.generate_keypair,
        from_private_key=svm_signatures.keypair_from_seed,
    ),
    Chain.ETHEREUM: KeyAlgorithm(
        namespace="pseudo_ethereum_keypair",
        tag="[ETH]",
        generate=evm_signatures.generate_keypair,
        from_private_key=evm_signatures.keypair_from_private_key,
    ),
}


class KeypairStore:
    """
    Lazily generated, persisted sandbox keypairs.

    Safe to share between coroutines: a per-chain lock makes concurrent first
    calls resolve to the same instance.

    Example::

        store = KeypairStore(JsonFileStorage("~/.pseudo/keys.json"))
        keypair = await store.get_keypair(Chain.ETHEREUM)
        keypair.address  # '0x...'
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None) -> None:
        self._storage = storage if storage is not None else InMemoryStorage()
        self._keypairs: Dict[Chain, Keypair] = {}
        self._locks: Dict[Chain, asyncio.Lock] = {}

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    def peek(self, chain: Chain) -> Optional[Keypair]:
        """Return the in-memory keypair without loading or generating one."""
        return self._keypairs.get(Chain(chain))

    async def get_keypair(self, chain: Chain) -> Keypair:
        """
        Return the sandbox keypair for ``chain``, loading or generating it once.

        Args:
            chain: ``Chain.SOLANA`` or ``Chain.ETHEREUM`` (or their string values).

        Returns:
            The same ``Keypair`` instance on every call for a given store.
        """
        chain = Chain(chain)
        cached = self._keypairs.get(chain)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(chain, asyncio.Lock())
        async with lock:
            cached = self._keypairs.get(chain)
            if cached is not None:
                return cached

            algorithm = KEY_ALGORITHMS[chain]
            keypair = self._load(chain, algorithm)
            if keypair is None:
                keypair = self._generate(chain, algorithm)
            self._keypairs[chain] = keypair
            return keypair

    def reset(self, chain: Chain) -> None:
        """
        Forget the keypair for ``chain`` in memory and in storage.

        The next ``get_keypair`` call generates a new sandbox address.
        """
        chain = Chain(chain)
        self._keypairs.pop(chain, None)
        try:
            self._storage.delete(KEY_ALGORITHMS[chain].namespace)
        except KeyPersistenceError as e:
            logger.warning("%s Could not delete stored keypair: %s", KEY_ALGORITHMS[chain].tag, e)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @staticmethod
    def decode_record(chain: Chain, raw: str) -> Keypair:
        """
        Rebuild a keypair from its serialized record.

        The private key is re-derived and must reproduce both the stored
        public key and the stored address.

        Raises:
            KeyImportError: If the record is malformed or inconsistent.
        """
        chain = Chain(chain)
        algorithm = KEY_ALGORITHMS[chain]
        try:
            record = KeypairRecord.model_validate_json(raw)
            keypair = algorithm.from_private_key(record.private_key_bytes())
        except (ValidationError, ValueError) as e:
            raise KeyImportError(f"Stored {chain.value} keypair is unreadable: {e}") from e
        if keypair.public_key != record.public_key_bytes():
            raise KeyImportError(f"Stored {chain.value} public key does not match its private key")
        if keypair.address != record.address:
            raise KeyImportError(f"Stored {chain.value} address does not match its public key")
        return keypair

    @staticmethod
    def encode_record(keypair: Keypair) -> str:
        return keypair.to_record().to_canonical_json()

    def _load(self, chain: Chain, algorithm: KeyAlgorithm) -> Optional[Keypair]:
        try:
            raw = self._storage.get(algorithm.namespace)
        except KeyPersistenceError as e:
            logger.warning("%s Could not read stored keypair: %s", algorithm.tag, e)
            return None
        if raw is None:
            return None
        try:
            keypair = self.decode_record(chain, raw)
        except KeyImportError as e:
            logger.warning(
                "%s %s; generating a new keypair, the sandbox address will change",
                algorithm.tag, e,
            )
            return None
        logger.info("%s Loaded existing keypair: %s", algorithm.tag, keypair.address)
        return keypair

    def _generate(self, chain: Chain, algorithm: KeyAlgorithm) -> Keypair:
        logger.info("%s Generating new %s keypair...", algorithm.tag, chain.value)
        keypair = algorithm.generate()
        try:
            self._storage.set(algorithm.namespace, self.encode_record(keypair))
        except KeyPersistenceError as e:
            logger.warning("%s Could not store keypair, using it in memory only: %s", algorithm.tag, e)
        logger.info("%s Generated new wallet: %s", algorithm.tag, keypair.address)
        return keypair
