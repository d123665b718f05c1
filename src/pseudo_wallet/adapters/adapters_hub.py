"""
Adapter Hub - Sandbox Dispatcher Gateway

Single entry point the interception engine uses to answer a call locally.
The hub owns one dispatcher per chain and the ``KeypairStore`` they share;
the store is injected by the composition root rather than created as a
hidden global.

Architecture:
    DispatcherHub (you are here)
        ├── KeypairStore (one keypair per chain, persisted)
        ├── EVMDispatcher (secp256k1, personal_sign, EIP-712)
        └── SVMDispatcher (Ed25519, base58)
"""

from typing import Any, Dict, Optional, Sequence, Union

from ..engine.exceptions import UnsupportedMethodError
from ..schemas.bases import Chain, Keypair
from .bases import DispatchResult, MethodDispatcher
from .evm.adapter import EVMDispatcher
from .keystore import KeypairStore
from .svm.adapter import SVMDispatcher


class DispatcherHub:
    """
    Routes sandbox requests to the dispatcher of their chain.

    Example::

        hub = DispatcherHub(KeypairStore(InMemoryStorage()))
        result = await hub.dispatch("ethereum", "personal_sign", ["hello", address])
        result.value  # '0x...' 65-byte signature
    """

    def __init__(self, keystore: KeypairStore, eth_chain_id: str = "0x1") -> None:
        """
        Args:
            keystore: Keypair store shared by all dispatchers.
            eth_chain_id: Hex chain id reported on sandbox Ethereum connect.
        """
        self._keystore = keystore
        self._dispatchers: Dict[Chain, MethodDispatcher] = {
            Chain.ETHEREUM: EVMDispatcher(self._keystore, chain_id=eth_chain_id),
            Chain.SOLANA: SVMDispatcher(self._keystore),
        }

    @property
    def keystore(self) -> KeypairStore:
        return self._keystore

    def get_dispatcher(self, chain: Union[Chain, str]) -> MethodDispatcher:
        """
        Raises:
            UnsupportedMethodError: If no dispatcher exists for ``chain``.
        """
        try:
            return self._dispatchers[Chain(chain)]
        except (KeyError, ValueError):
            raise UnsupportedMethodError("*", chain=str(chain)) from None

    async def dispatch(
        self,
        chain: Union[Chain, str],
        method: str,
        params: Optional[Sequence[Any]] = None,
    ) -> DispatchResult:
        return await self.get_dispatcher(chain).dispatch(method, params)

    async def get_keypair(self, chain: Union[Chain, str]) -> Keypair:
        return await self._keystore.get_keypair(Chain(chain))

    async def addresses(self) -> Dict[str, str]:
        """Sandbox address of every chain, generating keypairs as needed."""
        return {chain.value: (await self._keystore.get_keypair(chain)).address for chain in self._dispatchers}
